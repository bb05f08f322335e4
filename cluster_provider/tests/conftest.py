"""
Pytest configuration and shared fixtures for cluster resource provider tests.
"""

import pytest
import warnings
import aws_cdk as cdk
from aws_cdk import aws_ec2 as ec2, aws_iam as iam
from aws_cdk.assertions import Template
from cluster_provider.cluster_provider_stack import ClusterResourceProvider
from cluster_provider.cluster_provider_config import ClusterResourceProviderProps

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
def parent_stack(app):
    """Create the root stack the provider is nested in."""
    return cdk.Stack(app, "ParentStack")


@pytest.fixture
def vpc(parent_stack):
    """Create a VPC with private subnets."""
    return ec2.Vpc(parent_stack, "Vpc", max_azs=2, nat_gateways=1)


@pytest.fixture
def admin_role(parent_stack):
    """Create the administrative role the handlers assume."""
    return iam.Role(
        parent_stack, "AdminRole", assumed_by=iam.AccountRootPrincipal()
    )


@pytest.fixture
def props_without_subnets(admin_role, vpc):
    """Provider properties without VPC placement."""
    return ClusterResourceProviderProps(admin_role=admin_role, vpc=vpc)


@pytest.fixture
def props_with_subnets(admin_role, vpc):
    """Provider properties placing the functions in the private subnets."""
    return ClusterResourceProviderProps(
        admin_role=admin_role, vpc=vpc, private_subnets=vpc.private_subnets
    )


@pytest.fixture
def provider_without_subnets(parent_stack, props_without_subnets):
    return ClusterResourceProvider.get_or_create(parent_stack, props_without_subnets)


@pytest.fixture
def provider_with_subnets(parent_stack, props_with_subnets):
    return ClusterResourceProvider.get_or_create(parent_stack, props_with_subnets)


@pytest.fixture
def template_without_subnets(provider_without_subnets):
    """Create a CloudFormation template from the nested provider stack."""
    return Template.from_stack(provider_without_subnets)


@pytest.fixture
def template_with_subnets(provider_with_subnets):
    """Create a CloudFormation template from the VPC-attached provider stack."""
    return Template.from_stack(provider_with_subnets)
