# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""Handler for the Custom::AWSCDK-EKS-FargateProfile resource."""

import logging
from typing import Any, Dict

from botocore.exceptions import ClientError

from common import ResourceHandler, is_not_found

logger = logging.getLogger(__name__)


class FargateProfileResourceHandler(ResourceHandler):
    """Creates and deletes Fargate profiles. Profiles are immutable in EKS."""

    @property
    def cluster_name(self) -> str:
        return self.config["clusterName"]

    def on_create(self) -> Dict[str, Any]:
        config = dict(self.config)
        config["fargateProfileName"] = (
            config.get("fargateProfileName") or self.generate_physical_name()
        )

        logger.info(
            "Creating Fargate profile %s on cluster %s",
            config["fargateProfileName"],
            self.cluster_name,
        )
        profile = self.eks.create_fargate_profile(**config)["fargateProfile"]

        return {
            "PhysicalResourceId": profile["fargateProfileName"],
            "Data": {"fargateProfileArn": profile["fargateProfileArn"]},
        }

    def on_update(self) -> Dict[str, Any]:
        # Any change means a new profile, CloudFormation deletes the old one
        return self.on_create()

    def on_delete(self) -> Dict[str, Any]:
        if not self.physical_resource_id:
            raise ValueError("Cannot delete a profile without a physical id")

        logger.info("Deleting Fargate profile %s", self.physical_resource_id)
        try:
            self.eks.delete_fargate_profile(
                clusterName=self.cluster_name,
                fargateProfileName=self.physical_resource_id,
            )
        except ClientError as e:
            if not is_not_found(e):
                raise
            logger.info("Fargate profile %s not found", self.physical_resource_id)

        return {"PhysicalResourceId": self.physical_resource_id}

    def is_create_complete(self) -> Dict[str, Any]:
        return {"IsComplete": self._status() == "ACTIVE"}

    def is_update_complete(self) -> Dict[str, Any]:
        return self.is_create_complete()

    def is_delete_complete(self) -> Dict[str, Any]:
        return {"IsComplete": self._status() is None}

    def _status(self):
        """Profile status, or None if the profile does not exist."""
        try:
            profile = self.eks.describe_fargate_profile(
                clusterName=self.cluster_name,
                fargateProfileName=self.physical_resource_id,
            )["fargateProfile"]
        except ClientError as e:
            if is_not_found(e):
                return None
            raise

        status = profile["status"]
        logger.info("Fargate profile %s is %s", self.physical_resource_id, status)
        if status in ("CREATE_FAILED", "DELETE_FAILED"):
            raise RuntimeError(
                f"Fargate profile {self.physical_resource_id} is in {status} state"
            )
        return status
