# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Configuration classes for the EKS cluster CDK stack.
"""

import re
from dataclasses import dataclass
from typing import List, Optional


VALID_LOG_TYPES = {"api", "audit", "authenticator", "controllerManager", "scheduler"}


@dataclass
class EksClusterConfig:
    """Configuration for the EKS cluster and the network it runs in."""

    # Cluster Configuration
    cluster_name: Optional[str] = None  # If None, the provider generates one
    kubernetes_version: str = "1.31"

    # Network Configuration
    max_azs: int = 2
    endpoint_public_access: bool = True
    endpoint_private_access: bool = True

    # Control plane log types sent to CloudWatch
    cluster_logging: List[str] = None

    # Place the provider functions in the private subnets of the VPC
    place_provider_in_vpc: bool = True

    # Namespaces scheduled on Fargate, no profile is created when empty
    fargate_namespaces: List[str] = None

    def __post_init__(self):
        """Initialize default values and validate."""
        if self.cluster_logging is None:
            self.cluster_logging = ["api", "audit"]

        if self.fargate_namespaces is None:
            self.fargate_namespaces = []

        self.validate()

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.cluster_name is not None:
            if not re.match(r"^[0-9A-Za-z][A-Za-z0-9\-_]*$", self.cluster_name):
                raise ValueError(f"Invalid cluster name format: {self.cluster_name}")
            if len(self.cluster_name) > 100:
                raise ValueError(
                    f"Cluster name cannot exceed 100 characters. Got: {len(self.cluster_name)}"
                )

        if not re.match(r"^1\.\d+$", self.kubernetes_version):
            raise ValueError(
                f"Kubernetes version must look like 1.<minor>. Got: {self.kubernetes_version}"
            )

        if self.max_azs < 1 or self.max_azs > 6:
            raise ValueError(
                f"Number of availability zones must be between 1 and 6. Got: {self.max_azs}"
            )

        if not self.endpoint_public_access and not self.endpoint_private_access:
            raise ValueError("At least one of public or private endpoint access is required")

        invalid_types = set(self.cluster_logging) - VALID_LOG_TYPES
        if invalid_types:
            raise ValueError(f"Invalid cluster log types: {sorted(invalid_types)}")

        for namespace in self.fargate_namespaces:
            if not namespace or not namespace.strip():
                raise ValueError("Fargate namespaces cannot be empty")
