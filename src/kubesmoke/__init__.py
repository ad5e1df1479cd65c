"""Kubernetes Smoke Test harness (kubesmoke).

Validate that freshly provisioned EKS clusters and their worker node groups converge
to a ready state before an end-to-end test is declared successful.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"
