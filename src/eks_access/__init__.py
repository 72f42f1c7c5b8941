"""EKS access-entry reconciler.

CloudFormation custom resource that grants an IAM role cluster-admin access
entries on every EKS cluster whose authentication mode supports them.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .domain import (
    AccessEntry,
    AccessPolicyAssociation,
    AuthenticationMode,
    ClusterDescriptor,
    CompletionSignal,
    CompletionStatus,
    InvocationEnvelope,
    RequestType,
)
from .exceptions import (
    DiscoveryError,
    EksAccessError,
    InputError,
    MutationError,
    TransportError,
)

__all__ = [
    "__version__",
    "AccessEntry",
    "AccessPolicyAssociation",
    "AuthenticationMode",
    "ClusterDescriptor",
    "CompletionSignal",
    "CompletionStatus",
    "InvocationEnvelope",
    "RequestType",
    "DiscoveryError",
    "EksAccessError",
    "InputError",
    "MutationError",
    "TransportError",
]
