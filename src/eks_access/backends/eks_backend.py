"""boto3-backed implementation of the ClusterAccessBackend protocol."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from ..domain import AccessEntry, ClusterDescriptor
from ..exceptions import DiscoveryError, MutationError
from ..utilities.aws import eks
from ..utilities.aws.eks import EksError
from ..utilities.aws.session import create_eks_client, create_session

logger = logging.getLogger(__name__)


class EksClusterAccessBackend:
    """Cluster access operations against the EKS API.

    The client is created lazily so that building the backend never touches
    the network; pass ``client`` to inject one (tests, custom sessions).
    """

    def __init__(self, client: Any = None, region: Optional[str] = None, client_factory: Optional[Callable[[], Any]] = None):
        self._client = client
        self._region = region
        self._client_factory = client_factory

    @property
    def client(self) -> Any:
        if self._client is None:
            if self._client_factory is not None:
                self._client = self._client_factory()
            else:
                self._client = create_eks_client(create_session(region=self._region), region=self._region)
        return self._client

    def list_clusters(self) -> List[str]:
        try:
            return eks.list_clusters(self.client)
        except EksError as e:
            raise DiscoveryError(f"Failed to list clusters: {e}", context={"error_code": e.error_code}) from e

    def describe_cluster(self, name: str) -> ClusterDescriptor:
        try:
            cluster = eks.describe_cluster(self.client, name)
        except EksError as e:
            raise DiscoveryError(
                f"Failed to describe cluster '{name}': {e}",
                cluster_name=name,
                context={"error_code": e.error_code},
            ) from e
        if "name" not in cluster:
            cluster = {**cluster, "name": name}
        return ClusterDescriptor.from_api(cluster)

    def list_access_entries(self, cluster_name: str) -> List[AccessEntry]:
        try:
            principals = eks.list_access_entries(self.client, cluster_name)
        except EksError as e:
            raise DiscoveryError(
                f"Failed to list access entries on cluster '{cluster_name}': {e}",
                cluster_name=cluster_name,
                context={"error_code": e.error_code},
            ) from e
        return [AccessEntry(cluster_name=cluster_name, principal_arn=arn) for arn in principals]

    def create_access_entry(self, cluster_name: str, principal_arn: str, entry_type: str) -> None:
        try:
            eks.create_access_entry(self.client, cluster_name, principal_arn, entry_type)
        except EksError as e:
            raise MutationError(
                f"Failed to create access entry on cluster '{cluster_name}': {e}",
                cluster_name=cluster_name,
                context={"error_code": e.error_code, "already_exists": e.already_exists},
            ) from e

    def associate_policy(
        self,
        cluster_name: str,
        principal_arn: str,
        policy_arn: str,
        access_scope: Dict[str, Any],
    ) -> None:
        try:
            eks.associate_access_policy(self.client, cluster_name, principal_arn, policy_arn, access_scope)
        except EksError as e:
            raise MutationError(
                f"Failed to associate {policy_arn} on cluster '{cluster_name}': {e}",
                cluster_name=cluster_name,
                context={"error_code": e.error_code},
            ) from e

    def list_associated_policies(self, cluster_name: str, principal_arn: str) -> List[str]:
        try:
            return eks.list_associated_access_policies(self.client, cluster_name, principal_arn)
        except EksError as e:
            raise DiscoveryError(
                f"Failed to list associated policies on cluster '{cluster_name}': {e}",
                cluster_name=cluster_name,
                context={"error_code": e.error_code},
            ) from e
