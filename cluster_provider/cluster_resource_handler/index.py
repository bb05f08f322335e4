# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Entry points for the EKS cluster resource provider functions.

``on_event`` starts an operation and ``is_complete`` is polled by the
provider framework until the operation finishes or the provider times out.
"""

import json
import logging
import os
from typing import Any, Dict

from cluster import ClusterResourceHandler
from fargate import FargateProfileResourceHandler

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

CLUSTER_RESOURCE_TYPE = "Custom::AWSCDK-EKS-Cluster"
FARGATE_PROFILE_RESOURCE_TYPE = "Custom::AWSCDK-EKS-FargateProfile"

HANDLERS = {
    CLUSTER_RESOURCE_TYPE: ClusterResourceHandler,
    FARGATE_PROFILE_RESOURCE_TYPE: FargateProfileResourceHandler,
}


def on_event(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    logger.info("onEvent: %s", json.dumps(_redact(event), default=str))
    return _handler_for(event).on_event()


def is_complete(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    logger.info("isComplete: %s", json.dumps(_redact(event), default=str))
    return _handler_for(event).is_complete()


def _handler_for(event: Dict[str, Any]):
    resource_type = event.get("ResourceType")
    handler_class = HANDLERS.get(resource_type)
    if handler_class is None:
        raise ValueError(f"Unsupported resource type {resource_type}")
    return handler_class(event)


def _redact(event: Dict[str, Any]) -> Dict[str, Any]:
    """Drop the presigned response URL from logged events."""
    return {key: value for key, value in event.items() if key != "ResponseURL"}
