"""
Pytest configuration and shared fixtures for EKS cluster stack tests.
"""

import pytest
import warnings
import aws_cdk as cdk
from aws_cdk.assertions import Template
from eks_cluster.eks_cluster_stack import EksClusterStack
from eks_cluster.eks_cluster_config import EksClusterConfig

# Suppress warnings at the module level
warnings.filterwarnings("ignore", category=DeprecationWarning)
warnings.filterwarnings("ignore", category=PendingDeprecationWarning)
warnings.filterwarnings("ignore", category=UserWarning)
warnings.filterwarnings("ignore", category=FutureWarning)
warnings.filterwarnings("ignore", category=ResourceWarning)

# Suppress specific AWS/CDK warnings
warnings.filterwarnings("ignore", message=".*deprecated.*")
warnings.filterwarnings("ignore", message=".*jsii.*")
warnings.filterwarnings("ignore", message=".*constructs.*")
warnings.filterwarnings("ignore", message=".*CDK.*")


@pytest.fixture(autouse=True)
def suppress_warnings():
    """Automatically suppress warnings for all tests."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        yield


@pytest.fixture
def app():
    """Create a CDK app for testing."""
    return cdk.App()


@pytest.fixture
def default_config():
    """Create a default EKS cluster configuration for testing."""
    return EksClusterConfig()


@pytest.fixture
def fargate_config():
    """Create a configuration with a Fargate profile and a fixed cluster name."""
    return EksClusterConfig(
        cluster_name="test-cluster",
        kubernetes_version="1.30",
        fargate_namespaces=["default", "kube-system"],
    )


@pytest.fixture
def stack_with_default_config(app, default_config):
    """Create an EKS cluster stack with default configuration."""
    return EksClusterStack(app, "TestEksClusterStack", config=default_config)


@pytest.fixture
def stack_with_fargate_config(app, fargate_config):
    """Create an EKS cluster stack with a Fargate profile."""
    return EksClusterStack(app, "TestEksClusterStack", config=fargate_config)


@pytest.fixture
def template_from_default_stack(stack_with_default_config):
    """Create a CloudFormation template from the default stack."""
    return Template.from_stack(stack_with_default_config)


@pytest.fixture
def template_from_fargate_stack(stack_with_fargate_config):
    """Create a CloudFormation template from the Fargate stack."""
    return Template.from_stack(stack_with_fargate_config)
