#!/usr/bin/env python3

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import os
import aws_cdk as cdk
from cdk_nag import AwsSolutionsChecks, NagSuppressions

from eks_cluster.eks_cluster_stack import EksClusterStack
from eks_cluster.eks_cluster_config import EksClusterConfig


app = cdk.App()

project_name = app.node.try_get_context("project_name") or "eks-cluster-provider"

# Configure AWS environment
env = cdk.Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"), region=os.getenv("CDK_DEFAULT_REGION")
)

##########################
# EKS Cluster Stack
##########################

fargate_namespaces = app.node.try_get_context("fargate_namespaces")

cluster_config = EksClusterConfig(
    cluster_name=app.node.try_get_context("cluster_name"),
    kubernetes_version=app.node.try_get_context("kubernetes_version") or "1.31",
    max_azs=2,
    cluster_logging=["api", "audit", "authenticator"],
    place_provider_in_vpc=True,
    fargate_namespaces=fargate_namespaces.split(",") if fargate_namespaces else [],
)

cluster_stack = EksClusterStack(
    app,
    "EksClusterStack",
    config=cluster_config,
    env=env,
    description="EKS cluster managed through a custom resource provider",
)

cdk.Tags.of(cluster_stack).add("Project", project_name)
cdk.Tags.of(cluster_stack).add("ManagedBy", "CDK")

# Apply CDK Nag security checks
cdk.Aspects.of(app).add(AwsSolutionsChecks(verbose=True))

NagSuppressions.add_stack_suppressions(
    cluster_stack,
    [
        {
            "id": "AwsSolutions-IAM4",
            "reason": "AWS managed policies are used for the EKS service role, Fargate pod execution and Lambda basic/VPC execution roles.",
        },
        {
            "id": "AwsSolutions-IAM5",
            "reason": "EKS cluster names are generated at deploy time and EC2 describe calls do not support resource-level permissions. The provider framework also invokes handler function versions.",
        },
        {
            "id": "AwsSolutions-L1",
            "reason": "Provider framework functions are created by the custom resources library with its own runtime.",
        },
        {
            "id": "AwsSolutions-SF1",
            "reason": "The waiter state machine is created by the custom resources library.",
        },
        {
            "id": "AwsSolutions-SF2",
            "reason": "The waiter state machine is created by the custom resources library.",
        },
        {
            "id": "AwsSolutions-VPC7",
            "reason": "VPC flow logs are out of scope for this sample.",
        },
    ],
    apply_to_nested_stacks=True,
)

app.synth()
