"""
Custom resource provider for managing EKS clusters from CDK stacks.
"""
