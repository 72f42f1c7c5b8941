"""AWS operations utilities.

Composable helpers for session creation and the EKS access-entry API. All
helpers take their client or session as an argument and raise module-specific
errors.
"""

from __future__ import annotations

from .session import (
    create_session,
    create_eks_client,
    SessionError,
)
from .eks import (
    list_clusters,
    describe_cluster,
    list_access_entries,
    create_access_entry,
    associate_access_policy,
    list_associated_access_policies,
    EksError,
)

__all__ = [
    # Session management
    "create_session",
    "create_eks_client",
    "SessionError",
    # EKS operations
    "list_clusters",
    "describe_cluster",
    "list_access_entries",
    "create_access_entry",
    "associate_access_policy",
    "list_associated_access_policies",
    "EksError",
]
