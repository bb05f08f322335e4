"""
Pytest configuration and shared fixtures for the provider handler tests.
"""

import sys
from pathlib import Path

# Add the handler directory to Python path, as in the Lambda package
handler_dir = Path(__file__).parent.parent
sys.path.insert(0, str(handler_dir))

import pytest
from unittest.mock import Mock
from botocore.exceptions import ClientError


@pytest.fixture
def client_error():
    """Factory for botocore ClientErrors with a given error code."""

    def make(code: str, operation: str = "DescribeCluster") -> ClientError:
        return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)

    return make


@pytest.fixture
def mock_lambda_context():
    """Mock Lambda context object."""
    context = Mock()
    context.aws_request_id = "test-request-id-123"
    context.function_name = "test-on-event-handler"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-function"
    return context


@pytest.fixture
def mock_eks():
    """Mock EKS client."""
    return Mock()


@pytest.fixture
def cluster_config():
    """Cluster configuration as CloudFormation delivers it."""
    return {
        "version": "1.31",
        "roleArn": "arn:aws:iam::123456789012:role/cluster-role",
        "resourcesVpcConfig": {
            "subnetIds": ["subnet-1", "subnet-2"],
            "securityGroupIds": ["sg-1"],
            "endpointPublicAccess": "true",
            "endpointPrivateAccess": "false",
        },
        "logging": {"clusterLogging": [{"enabled": "true", "types": ["api"]}]},
    }


@pytest.fixture
def cluster_event(cluster_config):
    """Factory for cluster custom resource events."""

    def make(request_type="Create", config=None, old_config=None, **extra):
        event = {
            "RequestType": request_type,
            "RequestId": "11111111-2222-3333-4444-555555555555",
            "LogicalResourceId": "Cluster9EE0221C",
            "ResourceType": "Custom::AWSCDK-EKS-Cluster",
            "ResponseURL": "https://cloudformation-custom-resource-response.example.com/secret",
            "ResourceProperties": {
                "AssumeRoleArn": "arn:aws:iam::123456789012:role/admin-role",
                "Config": config if config is not None else cluster_config,
            },
        }
        if request_type != "Create":
            event["PhysicalResourceId"] = "my-cluster"
        if old_config is not None:
            event["OldResourceProperties"] = {
                "AssumeRoleArn": "arn:aws:iam::123456789012:role/admin-role",
                "Config": old_config,
            }
        event.update(extra)
        return event

    return make


@pytest.fixture
def fargate_event():
    """Factory for Fargate profile custom resource events."""

    def make(request_type="Create", **extra):
        event = {
            "RequestType": request_type,
            "RequestId": "99999999-8888-7777-6666-555555555555",
            "LogicalResourceId": "FargateProfile1F2A3B4C",
            "ResourceType": "Custom::AWSCDK-EKS-FargateProfile",
            "ResourceProperties": {
                "AssumeRoleArn": "arn:aws:iam::123456789012:role/admin-role",
                "Config": {
                    "clusterName": "my-cluster",
                    "podExecutionRoleArn": "arn:aws:iam::123456789012:role/pod-role",
                    "subnets": ["subnet-1", "subnet-2"],
                    "selectors": [{"namespace": "default"}],
                },
            },
        }
        if request_type != "Create":
            event["PhysicalResourceId"] = "my-profile"
        event.update(extra)
        return event

    return make


@pytest.fixture
def active_cluster():
    """describe_cluster response for an active cluster."""
    return {
        "cluster": {
            "name": "my-cluster",
            "arn": "arn:aws:eks:us-east-1:123456789012:cluster/my-cluster",
            "status": "ACTIVE",
            "endpoint": "https://ABCDEF.gr7.us-east-1.eks.amazonaws.com",
            "certificateAuthority": {"data": "LS0tLS1CRUdJTi..."},
            "resourcesVpcConfig": {"clusterSecurityGroupId": "sg-cluster"},
            "identity": {
                "oidc": {"issuer": "https://oidc.eks.us-east-1.amazonaws.com/id/ABCDEF"}
            },
        }
    }
