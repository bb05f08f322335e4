"""
CDK stack declaring an EKS cluster through the cluster resource provider.
"""
