# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Handler for the Custom::AWSCDK-EKS-Cluster resource.

Creation and deletion are asynchronous in EKS, so ``on_event`` only starts
the operation and ``is_complete`` reports when the cluster settles.
"""

import logging
from typing import Any, Dict, Set

from botocore.exceptions import ClientError

from common import ResourceHandler, is_not_found

logger = logging.getLogger(__name__)


class ClusterResourceHandler(ResourceHandler):
    """Creates, updates and deletes an EKS cluster."""

    @property
    def cluster_name(self) -> str:
        return self.physical_resource_id

    def on_create(self) -> Dict[str, Any]:
        config = dict(self.config)
        config["name"] = config.get("name") or self.generate_physical_name()

        logger.info("Creating cluster %s", config["name"])
        response = self.eks.create_cluster(**config)
        logger.debug("create_cluster response: %s", response)

        return {"PhysicalResourceId": response["cluster"]["name"]}

    def on_update(self) -> Dict[str, Any]:
        if self._requires_replacement():
            name = self.config.get("name")
            if name and name == self.old_config.get("name"):
                raise ValueError(
                    f"Cannot replace cluster {self.config['name']} since it has an explicit "
                    "physical name. Either rename the cluster or remove the name configuration"
                )
            logger.info("Cluster %s requires replacement", self.cluster_name)
            return self.on_create()

        version_changed = self.config.get("version") != self.old_config.get("version")
        logging_changed = self._enabled_log_types(self.config) != self._enabled_log_types(
            self.old_config
        )
        access_changed = self._endpoint_access(self.config) != self._endpoint_access(
            self.old_config
        )

        if sum([version_changed, logging_changed, access_changed]) > 1:
            raise ValueError(
                "Only one type of update (version, logging or endpoint access) "
                "can be applied at a time"
            )

        if version_changed:
            logger.info(
                "Updating cluster %s to version %s",
                self.cluster_name,
                self.config.get("version"),
            )
            response = self.eks.update_cluster_version(
                name=self.cluster_name, version=self.config["version"]
            )
            return {"EksUpdateId": response["update"]["id"]}

        if logging_changed:
            logger.info("Updating logging configuration of %s", self.cluster_name)
            response = self.eks.update_cluster_config(
                name=self.cluster_name, logging=self._logging_update()
            )
            return {"EksUpdateId": response["update"]["id"]}

        if access_changed:
            logger.info("Updating endpoint access of %s", self.cluster_name)
            response = self.eks.update_cluster_config(
                name=self.cluster_name,
                resourcesVpcConfig=self._endpoint_access(self.config),
            )
            return {"EksUpdateId": response["update"]["id"]}

        logger.info("No updates required for cluster %s", self.cluster_name)
        return {}

    def on_delete(self) -> Dict[str, Any]:
        logger.info("Deleting cluster %s", self.cluster_name)
        try:
            self.eks.delete_cluster(name=self.cluster_name)
        except ClientError as e:
            if not is_not_found(e):
                raise
            logger.info("Cluster %s not found, considered deleted", self.cluster_name)

        return {"PhysicalResourceId": self.cluster_name}

    def is_create_complete(self) -> Dict[str, Any]:
        return self._is_active()

    def is_update_complete(self) -> Dict[str, Any]:
        update_id = self.event.get("EksUpdateId")
        if update_id:
            update = self.eks.describe_update(name=self.cluster_name, updateId=update_id)[
                "update"
            ]
            status = update["status"]
            logger.info("Update %s of %s is %s", update_id, self.cluster_name, status)
            if status == "InProgress":
                return {"IsComplete": False}
            if status in ("Failed", "Cancelled"):
                errors = update.get("errors", [])
                raise RuntimeError(
                    f"Cluster update {update_id} {status.lower()}: {errors}"
                )

        return self._is_active()

    def is_delete_complete(self) -> Dict[str, Any]:
        try:
            cluster = self.eks.describe_cluster(name=self.cluster_name)["cluster"]
        except ClientError as e:
            if is_not_found(e):
                logger.info("Cluster %s deleted", self.cluster_name)
                return {"IsComplete": True}
            raise

        logger.info("Cluster %s is %s", self.cluster_name, cluster.get("status"))
        return {"IsComplete": False}

    def _is_active(self) -> Dict[str, Any]:
        cluster = self.eks.describe_cluster(name=self.cluster_name)["cluster"]
        status = cluster.get("status")
        logger.info("Cluster %s is %s", self.cluster_name, status)

        if status == "FAILED":
            raise RuntimeError(f"Cluster {self.cluster_name} is in FAILED state")
        if status != "ACTIVE":
            return {"IsComplete": False}

        issuer = cluster.get("identity", {}).get("oidc", {}).get("issuer", "")
        return {
            "IsComplete": True,
            "Data": {
                "Name": cluster["name"],
                "Arn": cluster["arn"],
                "Endpoint": cluster["endpoint"],
                "CertificateAuthorityData": cluster["certificateAuthority"]["data"],
                "ClusterSecurityGroupId": cluster.get("resourcesVpcConfig", {}).get(
                    "clusterSecurityGroupId", ""
                ),
                "OpenIdConnectIssuerUrl": issuer,
                "OpenIdConnectIssuer": issuer.replace("https://", "", 1),
            },
        }

    def _requires_replacement(self) -> bool:
        old_vpc = self.old_config.get("resourcesVpcConfig", {})
        new_vpc = self.config.get("resourcesVpcConfig", {})
        return (
            self.config.get("name") != self.old_config.get("name")
            or self.config.get("roleArn") != self.old_config.get("roleArn")
            or sorted(new_vpc.get("subnetIds", [])) != sorted(old_vpc.get("subnetIds", []))
            or sorted(new_vpc.get("securityGroupIds", []))
            != sorted(old_vpc.get("securityGroupIds", []))
        )

    def _logging_update(self) -> Dict[str, Any]:
        new_types = self._enabled_log_types(self.config)
        # Types left out of the new config stay enabled unless switched off
        removed_types = self._enabled_log_types(self.old_config) - new_types

        cluster_logging = []
        if new_types:
            cluster_logging.append({"types": sorted(new_types), "enabled": True})
        if removed_types:
            cluster_logging.append({"types": sorted(removed_types), "enabled": False})
        return {"clusterLogging": cluster_logging}

    @staticmethod
    def _enabled_log_types(config: Dict[str, Any]) -> Set[str]:
        entries = (config.get("logging") or {}).get("clusterLogging", [])
        return {
            log_type
            for entry in entries
            if entry.get("enabled")
            for log_type in entry.get("types", [])
        }

    @staticmethod
    def _endpoint_access(config: Dict[str, Any]) -> Dict[str, Any]:
        vpc_config = config.get("resourcesVpcConfig", {})
        return {
            key: vpc_config[key]
            for key in ("endpointPublicAccess", "endpointPrivateAccess", "publicAccessCidrs")
            if key in vpc_config
        }
