"""
Lambda function code for the EKS cluster resource provider.

The modules are deployed as the root of the function package, so they import
each other by bare module name.
"""

__version__ = "1.0.0"
