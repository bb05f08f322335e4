# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
AWS CDK Stack for an EKS cluster managed through a custom resource provider.

This stack creates:
- VPC with public and private subnets
- Cluster service role and control plane security group
- Administrative role assumed by the provider functions
- Cluster custom resource backed by the shared cluster resource provider
- Optional Fargate profile for selected namespaces
"""

import logging
from typing import List, Optional
import aws_cdk as cdk
from aws_cdk import (
    Stack,
    CfnOutput,
    CustomResource,
    aws_ec2 as ec2,
    aws_iam as iam,
)
from constructs import Construct

from cluster_provider.cluster_provider_config import ClusterResourceProviderProps
from cluster_provider.cluster_provider_stack import ClusterResourceProvider

from .eks_cluster_config import EksClusterConfig

logger = logging.getLogger(__name__)

CLUSTER_RESOURCE_TYPE = "Custom::AWSCDK-EKS-Cluster"
FARGATE_PROFILE_RESOURCE_TYPE = "Custom::AWSCDK-EKS-FargateProfile"


class FargateProfile(Construct):
    """Fargate profile declared through the cluster resource provider."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        cluster_name: str,
        provider_props: ClusterResourceProviderProps,
        subnets: List[ec2.ISubnet],
        namespaces: List[str],
    ) -> None:
        super().__init__(scope, construct_id)

        # Resolves to the provider already created for the cluster
        provider = ClusterResourceProvider.get_or_create(self, provider_props)

        self.pod_execution_role = iam.Role(
            self,
            "PodExecutionRole",
            assumed_by=iam.ServicePrincipal("eks-fargate-pods.amazonaws.com"),
            description="Pod execution role for EKS Fargate profile",
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "AmazonEKSFargatePodExecutionRolePolicy"
                )
            ],
        )
        self.pod_execution_role.grant_pass_role(provider_props.admin_role)

        self.resource = CustomResource(
            self,
            "Resource",
            service_token=provider.service_token,
            resource_type=FARGATE_PROFILE_RESOURCE_TYPE,
            properties={
                "AssumeRoleArn": provider_props.admin_role.role_arn,
                "Config": {
                    "clusterName": cluster_name,
                    "podExecutionRoleArn": self.pod_execution_role.role_arn,
                    "subnets": [subnet.subnet_id for subnet in subnets],
                    "selectors": [{"namespace": namespace} for namespace in namespaces],
                },
            },
        )

    @property
    def fargate_profile_arn(self) -> str:
        return self.resource.get_att_string("fargateProfileArn")

    @property
    def fargate_profile_name(self) -> str:
        return self.resource.ref


class EksClusterStack(Stack):
    """CDK Stack for an EKS cluster backed by the cluster resource provider."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: Optional[EksClusterConfig] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Initialize configuration
        self.config = config or EksClusterConfig()
        self.config.validate()
        logger.debug("Building %s with %s", construct_id, self.config)

        # Network and identities
        self.vpc = self._create_vpc()
        self.cluster_role = self._create_cluster_role()
        self.admin_role = self._create_admin_role()
        self.control_plane_security_group = self._create_control_plane_security_group()

        # Provider and cluster
        self.provider_props = ClusterResourceProviderProps(
            admin_role=self.admin_role,
            vpc=self.vpc,
            private_subnets=(
                self.vpc.private_subnets if self.config.place_provider_in_vpc else None
            ),
        )
        self.provider = ClusterResourceProvider.get_or_create(self, self.provider_props)
        self.cluster = self._create_cluster()

        self.fargate_profile = None
        if self.config.fargate_namespaces:
            self.fargate_profile = FargateProfile(
                self,
                "FargateProfile",
                cluster_name=self.cluster_name,
                provider_props=self.provider_props,
                subnets=self.vpc.private_subnets,
                namespaces=self.config.fargate_namespaces,
            )

        self._create_outputs()

    def _create_vpc(self) -> ec2.Vpc:
        """Create a VPC with public and private subnets."""
        vpc = ec2.Vpc(
            self,
            "ClusterVpc",
            max_azs=self.config.max_azs,
            nat_gateways=1,
        )
        cdk.Tags.of(vpc).add("Component", "Network")
        return vpc

    def _create_cluster_role(self) -> iam.Role:
        """Create the service role the EKS control plane runs with."""
        return iam.Role(
            self,
            "ClusterRole",
            assumed_by=iam.ServicePrincipal("eks.amazonaws.com"),
            description="Service role for the EKS control plane",
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name("AmazonEKSClusterPolicy")
            ],
        )

    def _create_admin_role(self) -> iam.Role:
        """Create the administrative role the provider functions assume."""
        role = iam.Role(
            self,
            "ClusterAdminRole",
            assumed_by=iam.AccountRootPrincipal(),
            description="Role assumed by the cluster resource provider to manage EKS",
        )

        role.add_to_policy(
            iam.PolicyStatement(
                sid="EksClusterManagement",
                effect=iam.Effect.ALLOW,
                actions=[
                    "eks:CreateCluster",
                    "eks:DescribeCluster",
                    "eks:DescribeUpdate",
                    "eks:DeleteCluster",
                    "eks:UpdateClusterVersion",
                    "eks:UpdateClusterConfig",
                    "eks:CreateFargateProfile",
                    "eks:DescribeFargateProfile",
                    "eks:DeleteFargateProfile",
                    "eks:TagResource",
                ],
                resources=["*"],
            )
        )

        role.add_to_policy(
            iam.PolicyStatement(
                sid="EksNetworkDiscovery",
                effect=iam.Effect.ALLOW,
                actions=[
                    "ec2:DescribeSubnets",
                    "ec2:DescribeRouteTables",
                    "ec2:DescribeSecurityGroups",
                    "ec2:DescribeVpcs",
                ],
                resources=["*"],  # EC2 describe calls don't support resource-level permissions
            )
        )

        self.cluster_role.grant_pass_role(role)

        return role

    def _create_control_plane_security_group(self) -> ec2.SecurityGroup:
        """Create the security group attached to the control plane ENIs."""
        return ec2.SecurityGroup(
            self,
            "ControlPlaneSecurityGroup",
            vpc=self.vpc,
            description="EKS control plane security group",
        )

    def _create_cluster(self) -> CustomResource:
        """Create the cluster custom resource."""
        cluster_config = {
            "version": self.config.kubernetes_version,
            "roleArn": self.cluster_role.role_arn,
            "resourcesVpcConfig": {
                "subnetIds": [subnet.subnet_id for subnet in self.vpc.private_subnets],
                "securityGroupIds": [
                    self.control_plane_security_group.security_group_id
                ],
                "endpointPublicAccess": self.config.endpoint_public_access,
                "endpointPrivateAccess": self.config.endpoint_private_access,
            },
        }

        if self.config.cluster_name:
            cluster_config["name"] = self.config.cluster_name

        if self.config.cluster_logging:
            cluster_config["logging"] = {
                "clusterLogging": [
                    {"enabled": True, "types": list(self.config.cluster_logging)}
                ]
            }

        cluster = CustomResource(
            self,
            "Cluster",
            service_token=self.provider.service_token,
            resource_type=CLUSTER_RESOURCE_TYPE,
            properties={
                "AssumeRoleArn": self.admin_role.role_arn,
                "Config": cluster_config,
            },
        )

        # The admin role policy must exist before the provider uses it
        cluster.node.add_dependency(self.admin_role)

        return cluster

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs."""
        CfnOutput(
            self,
            "ClusterName",
            value=self.cluster_name,
            description="Name of the EKS cluster",
            export_name=f"{self.stack_name}-ClusterName",
        )

        CfnOutput(
            self,
            "ClusterArn",
            value=self.cluster_arn,
            description="ARN of the EKS cluster",
            export_name=f"{self.stack_name}-ClusterArn",
        )

        CfnOutput(
            self,
            "ClusterEndpoint",
            value=self.cluster_endpoint,
            description="Kubernetes API server endpoint",
            export_name=f"{self.stack_name}-ClusterEndpoint",
        )

        CfnOutput(
            self,
            "ClusterAdminRoleArn",
            value=self.admin_role.role_arn,
            description="ARN of the role used to manage the cluster",
            export_name=f"{self.stack_name}-ClusterAdminRoleArn",
        )

        CfnOutput(
            self,
            "ProviderServiceToken",
            value=self.provider.service_token,
            description="Service token of the cluster resource provider",
        )

    @property
    def cluster_name(self) -> str:
        """Get the cluster name."""
        return self.cluster.ref

    @property
    def cluster_arn(self) -> str:
        """Get the cluster ARN."""
        return self.cluster.get_att_string("Arn")

    @property
    def cluster_endpoint(self) -> str:
        """Get the Kubernetes API server endpoint."""
        return self.cluster.get_att_string("Endpoint")
