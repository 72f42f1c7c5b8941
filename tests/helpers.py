"""Shared test helpers: an in-memory cluster access backend and event builders."""

from __future__ import annotations

import threading
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from eks_access.domain import AccessEntry, AccessPolicyAssociation, AuthenticationMode, ClusterDescriptor
from eks_access.exceptions import DiscoveryError, MutationError

ADMIN_POLICY = "arn:aws:eks::aws:cluster-access-policy/AmazonEKSClusterAdminPolicy"
RESPONSE_URL = "https://cloudformation-custom-resource-response.s3.amazonaws.com/signed?X-Amz-Signature=abc"


class FakeClusterAccessBackend:
    """In-memory ClusterAccessBackend that records every call.

    Args:
        clusters: Cluster name to authentication mode string (None for absent)
        entries: Cluster name to principal ARNs that already hold entries
        associations: Existing (cluster, principal, policy) associations
    """

    def __init__(
        self,
        clusters: Optional[Dict[str, Optional[str]]] = None,
        entries: Optional[Dict[str, Iterable[str]]] = None,
        associations: Optional[Iterable[Tuple[str, str, str]]] = None,
    ):
        self.modes: Dict[str, Optional[str]] = dict(clusters or {})
        self.entries: Dict[str, List[str]] = {name: list(entries.get(name, [])) if entries else [] for name in self.modes}
        self.associations: List[AccessPolicyAssociation] = [
            AccessPolicyAssociation(cluster, principal, policy) for cluster, principal, policy in associations or []
        ]
        self.calls: List[Tuple[Any, ...]] = []
        self.fail_listing = False
        self.describe_failures: set = set()
        self.create_failures: set = set()
        self.associate_failures: set = set()
        self._lock = threading.Lock()

    def _record(self, *call: Any) -> None:
        with self._lock:
            self.calls.append(call)

    def calls_to(self, operation: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == operation]

    @property
    def mutation_calls(self) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] in ("create_access_entry", "associate_policy")]

    def list_clusters(self) -> List[str]:
        self._record("list_clusters")
        if self.fail_listing:
            raise DiscoveryError("Failed to list clusters: AccessDeniedException")
        return list(self.modes)

    def describe_cluster(self, name: str) -> ClusterDescriptor:
        self._record("describe_cluster", name)
        if name in self.describe_failures:
            raise DiscoveryError(f"Failed to describe cluster '{name}': throttled", cluster_name=name)
        return ClusterDescriptor(name, AuthenticationMode.parse(self.modes[name]))

    def list_access_entries(self, cluster_name: str) -> List[AccessEntry]:
        self._record("list_access_entries", cluster_name)
        return [AccessEntry(cluster_name, arn) for arn in self.entries[cluster_name]]

    def create_access_entry(self, cluster_name: str, principal_arn: str, entry_type: str) -> None:
        self._record("create_access_entry", cluster_name, principal_arn, entry_type)
        if cluster_name in self.create_failures:
            raise MutationError(f"Failed to create access entry on cluster '{cluster_name}'", cluster_name=cluster_name)
        with self._lock:
            if principal_arn in self.entries[cluster_name]:
                raise MutationError(
                    "ResourceInUseException",
                    cluster_name=cluster_name,
                    context={"already_exists": True},
                )
            self.entries[cluster_name].append(principal_arn)

    def associate_policy(self, cluster_name: str, principal_arn: str, policy_arn: str, access_scope: Dict[str, Any]) -> None:
        self._record("associate_policy", cluster_name, principal_arn, policy_arn, dict(access_scope))
        if cluster_name in self.associate_failures:
            raise MutationError(f"Failed to associate {policy_arn} on cluster '{cluster_name}'", cluster_name=cluster_name)
        association = AccessPolicyAssociation(cluster_name, principal_arn, policy_arn, dict(access_scope))
        with self._lock:
            if association not in self.associations:
                self.associations.append(association)

    def list_associated_policies(self, cluster_name: str, principal_arn: str) -> List[str]:
        self._record("list_associated_policies", cluster_name, principal_arn)
        return [
            a.policy_arn for a in self.associations if a.cluster_name == cluster_name and a.principal_arn == principal_arn
        ]


def make_event(request_type: Optional[str] = "Create", role_arn: Optional[str] = "role-X", **overrides: Any) -> Dict[str, Any]:
    """Build a custom resource event."""
    properties: Dict[str, Any] = {"ServiceToken": "arn:aws:lambda:us-east-1:123456789012:function:EKSAccessEntryUpdater"}
    if role_arn is not None:
        properties["RoleArn"] = role_arn
    event: Dict[str, Any] = {
        "RequestType": request_type,
        "ResponseURL": RESPONSE_URL,
        "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/eks-access/guid",
        "RequestId": "req-1",
        "ResourceType": "Custom::ClusterAccessEntryTrigger",
        "LogicalResourceId": "TriggerAccessEntry",
        "ResourceProperties": properties,
    }
    if request_type is None:
        del event["RequestType"]
    event.update(overrides)
    return event


def make_context(remaining_ms: int = 60000, log_stream_name: str = "2025/01/01/[$LATEST]abcdef") -> SimpleNamespace:
    """Minimal Lambda context."""
    return SimpleNamespace(
        log_stream_name=log_stream_name,
        aws_request_id="lambda-req-1",
        get_remaining_time_in_millis=lambda: remaining_ms,
    )
