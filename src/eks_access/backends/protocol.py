"""ClusterAccessBackend Protocol - capability interface the reconciler runs against.

The protocol uses structural subtyping (Protocol) rather than inheritance, so
the boto3-backed implementation and the in-memory fake used by the tests
need no common base class.

Implementations raise ``DiscoveryError`` for read failures and
``MutationError`` for write failures.
"""

from typing import Any, Dict, List, Protocol, runtime_checkable

from ..domain import AccessEntry, ClusterDescriptor


@runtime_checkable
class ClusterAccessBackend(Protocol):
    """Operations needed to discover clusters and grant access entries."""

    def list_clusters(self) -> List[str]:
        """Return the names of every cluster visible to the caller, all pages included."""
        ...

    def describe_cluster(self, name: str) -> ClusterDescriptor:
        """Return the descriptor (including authentication mode) of one cluster."""
        ...

    def list_access_entries(self, cluster_name: str) -> List[AccessEntry]:
        """Return every access entry on a cluster."""
        ...

    def create_access_entry(self, cluster_name: str, principal_arn: str, entry_type: str) -> None:
        """Create an access entry for ``principal_arn``.

        Raises:
            MutationError: On failure; an entry that already exists raises
                with ``context["already_exists"]`` set to True
        """
        ...

    def associate_policy(
        self,
        cluster_name: str,
        principal_arn: str,
        policy_arn: str,
        access_scope: Dict[str, Any],
    ) -> None:
        """Associate ``policy_arn`` with the principal's entry at ``access_scope``."""
        ...

    def list_associated_policies(self, cluster_name: str, principal_arn: str) -> List[str]:
        """Return the policy ARNs associated with the principal's entry."""
        ...
