"""Cluster access backends."""

from .eks_backend import EksClusterAccessBackend
from .protocol import ClusterAccessBackend

__all__ = ["ClusterAccessBackend", "EksClusterAccessBackend"]
