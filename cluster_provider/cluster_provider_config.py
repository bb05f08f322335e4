# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Configuration for the EKS cluster resource provider nested stack.

The timing values below are fixed policy and are not exposed to callers:
the provider polls the completion handler once a minute for up to an hour.
"""

from dataclasses import dataclass
from typing import List, Optional
from aws_cdk import (
    Duration,
    aws_ec2 as ec2,
    aws_iam as iam,
    aws_lambda as lambda_,
)


# Node id used to find the provider under the root stack
PROVIDER_UID = "cluster-provider.ClusterResourceProvider"

HANDLER_RUNTIME = lambda_.Runtime.PYTHON_3_13
HANDLER_TIMEOUT = Duration.minutes(1)
TOTAL_TIMEOUT = Duration.hours(1)
QUERY_INTERVAL = Duration.minutes(1)


@dataclass(frozen=True)
class ClusterResourceProviderProps:
    """Inputs for the cluster resource provider."""

    # The IAM role to assume in order to interact with the cluster
    admin_role: iam.IRole

    # The VPC the cluster will be placed in
    vpc: ec2.IVpc

    # If set, all provider functions are placed in the VPC using these subnets
    private_subnets: Optional[List[ec2.ISubnet]] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.admin_role is None:
            raise ValueError("An admin role is required to manage the cluster")

        if self.vpc is None:
            raise ValueError("A VPC is required for the cluster resource provider")

        if self.private_subnets is not None and len(self.private_subnets) == 0:
            raise ValueError(
                "Private subnets must contain at least one subnet, or be omitted"
            )

    @property
    def vpc_placement(self) -> dict:
        """Keyword arguments placing a function in the VPC, empty when no subnets."""
        if not self.private_subnets:
            return {}
        return {
            "vpc": self.vpc,
            "vpc_subnets": ec2.SubnetSelection(subnets=list(self.private_subnets)),
        }
