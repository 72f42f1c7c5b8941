"""Transient domain objects built per invocation.

Nothing here is persisted; every value is discovered live from the
invocation event or from EKS.
"""

from .access_entry import AccessEntry, AccessPolicyAssociation
from .cluster import AuthenticationMode, ClusterDescriptor
from .completion import CompletionSignal, CompletionStatus
from .invocation import InvocationEnvelope, RequestType

__all__ = [
    "AccessEntry",
    "AccessPolicyAssociation",
    "AuthenticationMode",
    "ClusterDescriptor",
    "CompletionSignal",
    "CompletionStatus",
    "InvocationEnvelope",
    "RequestType",
]
