"""Access entry and policy association domain objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from ..constants import DEFAULT_ENTRY_TYPE


@dataclass(frozen=True)
class AccessEntry:
    """An IAM principal's access entry on a cluster.

    At most one entry per (cluster_name, principal_arn) pair is meaningful;
    the reconciler checks for it before creating one.
    """

    cluster_name: str
    principal_arn: str
    type: str = DEFAULT_ENTRY_TYPE


@dataclass(frozen=True)
class AccessPolicyAssociation:
    """Association of an access entry with an access policy and scope."""

    cluster_name: str
    principal_arn: str
    policy_arn: str
    access_scope: Dict[str, Any] = field(default_factory=lambda: {"type": "cluster"})

    def __hash__(self) -> int:
        return hash((self.cluster_name, self.principal_arn, self.policy_arn, self.access_scope.get("type")))
