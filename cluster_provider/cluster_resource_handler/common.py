# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Shared plumbing for the EKS custom resource handlers.

Each handler receives the custom resource event, assumes the administrative
role named in ``AssumeRoleArn`` and performs all EKS calls with the
resulting short-lived credentials.
"""

import logging
import re
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

MAX_SESSION_NAME_LENGTH = 64
MAX_PHYSICAL_NAME_LENGTH = 100
BOOLEAN_VPC_FIELDS = ("endpointPublicAccess", "endpointPrivateAccess")


def make_eks_client(role_arn: str, session_name: str) -> Any:
    """Create an EKS client using credentials of the assumed role."""
    sts = boto3.client("sts")
    logger.info("Assuming role %s", role_arn)
    credentials = sts.assume_role(RoleArn=role_arn, RoleSessionName=session_name)[
        "Credentials"
    ]
    return boto3.client(
        "eks",
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
    )


def is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ResourceNotFoundException"


def _to_bool(value: Any) -> Any:
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def coerce_booleans(config: Dict[str, Any]) -> Dict[str, Any]:
    """Turn the "true"/"false" strings CloudFormation sends back into booleans.

    Only the fields the EKS API types as booleans are touched; any other
    string value (namespace names, tags, labels) is passed through as is.
    """
    config = dict(config)

    vpc_config = config.get("resourcesVpcConfig")
    if isinstance(vpc_config, dict):
        config["resourcesVpcConfig"] = {
            key: _to_bool(value) if key in BOOLEAN_VPC_FIELDS else value
            for key, value in vpc_config.items()
        }

    logging_config = config.get("logging")
    if isinstance(logging_config, dict) and "clusterLogging" in logging_config:
        config["logging"] = dict(
            logging_config,
            clusterLogging=[
                dict(entry, enabled=_to_bool(entry["enabled"]))
                if "enabled" in entry
                else entry
                for entry in logging_config["clusterLogging"]
            ],
        )

    return config


class ResourceHandler:
    """Base class dispatching provider callbacks by request type."""

    def __init__(self, event: Dict[str, Any], eks: Optional[Any] = None):
        self.event = event
        self.request_type = event["RequestType"]
        self.request_id = event["RequestId"]
        self.logical_resource_id = event["LogicalResourceId"]
        self.physical_resource_id = event.get("PhysicalResourceId")

        properties = event.get("ResourceProperties", {})
        self.role_arn = properties.get("AssumeRoleArn")
        self.config = coerce_booleans(properties.get("Config", {}))
        self.old_config = coerce_booleans(
            event.get("OldResourceProperties", {}).get("Config", {})
        )

        if eks is None:
            if not self.role_arn:
                raise ValueError("AssumeRoleArn is required in resource properties")
            session_name = f"AWSCDK.EKS.{self.request_type}.{self.request_id}"
            eks = make_eks_client(
                self.role_arn, session_name[:MAX_SESSION_NAME_LENGTH]
            )
        self.eks = eks

    def on_event(self) -> Dict[str, Any]:
        if self.request_type == "Create":
            return self.on_create()
        if self.request_type == "Update":
            return self.on_update()
        if self.request_type == "Delete":
            return self.on_delete()
        raise ValueError(f"Invalid request type {self.request_type}")

    def is_complete(self) -> Dict[str, Any]:
        if self.request_type == "Create":
            return self.is_create_complete()
        if self.request_type == "Update":
            return self.is_update_complete()
        if self.request_type == "Delete":
            return self.is_delete_complete()
        raise ValueError(f"Invalid request type {self.request_type}")

    def generate_physical_name(self) -> str:
        name = f"{self.logical_resource_id}-{self.request_id}"
        name = re.sub(r"[^A-Za-z0-9_-]", "", name)
        return name[:MAX_PHYSICAL_NAME_LENGTH]

    def on_create(self) -> Dict[str, Any]:
        raise NotImplementedError

    def on_update(self) -> Dict[str, Any]:
        raise NotImplementedError

    def on_delete(self) -> Dict[str, Any]:
        raise NotImplementedError

    def is_create_complete(self) -> Dict[str, Any]:
        raise NotImplementedError

    def is_update_complete(self) -> Dict[str, Any]:
        raise NotImplementedError

    def is_delete_complete(self) -> Dict[str, Any]:
        raise NotImplementedError
