# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Nested stack hosting the custom resource provider for EKS cluster operations.

The provider serves multiple custom resources, such as the cluster resource
and the Fargate profile resource. Handler functions are never given EKS
permissions directly; they may only assume the administrative role.
"""

import logging
import os
import aws_cdk as cdk
from aws_cdk import (
    NestedStack,
    Stack,
    aws_lambda as lambda_,
    custom_resources as cr,
)
from constructs import Construct

from .cluster_provider_config import (
    HANDLER_RUNTIME,
    HANDLER_TIMEOUT,
    PROVIDER_UID,
    QUERY_INTERVAL,
    TOTAL_TIMEOUT,
    ClusterResourceProviderProps,
)

logger = logging.getLogger(__name__)

HANDLER_DIR = os.path.join(os.path.dirname(__file__), "cluster_resource_handler")

# Keep tests and local artifacts out of the deployment package
HANDLER_ASSET_EXCLUDES = [
    "*.pyc",
    "__pycache__",
    "*.md",
    ".DS_Store",
    "*.log",
    "tests",
    "test_*",
    "*_test.py",
    "*.pytest_cache",
]


class ClusterResourceProvider(NestedStack):
    """
    A custom resource provider that handles cluster operations.

    Use ``get_or_create`` rather than the constructor so that a stack holds
    at most one provider.
    """

    @staticmethod
    def get_or_create(
        scope: Construct, props: ClusterResourceProviderProps
    ) -> "ClusterResourceProvider":
        stack = Stack.of(scope)
        existing = stack.node.try_find_child(PROVIDER_UID)
        if existing is not None:
            logger.debug("Reusing cluster resource provider in %s", stack.node.path)
            return existing

        logger.info("Creating cluster resource provider in %s", stack.node.path)
        return ClusterResourceProvider(stack, PROVIDER_UID, props)

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        props: ClusterResourceProviderProps,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.props = props

        self.on_event_handler = self._create_handler(
            "OnEventHandler",
            handler="index.on_event",
            description="onEvent handler for EKS cluster resource provider",
        )
        self.is_complete_handler = self._create_handler(
            "IsCompleteHandler",
            handler="index.is_complete",
            description="isComplete handler for EKS cluster resource provider",
        )

        self.provider = cr.Provider(
            self,
            "Provider",
            on_event_handler=self.on_event_handler,
            is_complete_handler=self.is_complete_handler,
            total_timeout=TOTAL_TIMEOUT,
            query_interval=QUERY_INTERVAL,
            **props.vpc_placement,
        )

        # Handlers may only assume the admin role, all cluster calls go through it
        props.admin_role.grant(self.on_event_handler.role, "sts:AssumeRole")
        props.admin_role.grant(self.is_complete_handler.role, "sts:AssumeRole")

        cdk.Tags.of(self).add("Component", "ClusterResourceProvider")

    def _create_handler(
        self, construct_id: str, handler: str, description: str
    ) -> lambda_.Function:
        """Create one of the provider functions from the shared handler asset."""
        return lambda_.Function(
            self,
            construct_id,
            code=lambda_.Code.from_asset(HANDLER_DIR, exclude=HANDLER_ASSET_EXCLUDES),
            description=description,
            runtime=HANDLER_RUNTIME,
            handler=handler,
            timeout=HANDLER_TIMEOUT,
            environment={"LOG_LEVEL": "INFO"},
            **self.props.vpc_placement,
        )

    @property
    def service_token(self) -> str:
        """The custom resource service token for this provider."""
        return self.provider.service_token
