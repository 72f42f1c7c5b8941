"""Cluster descriptor domain object."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class AuthenticationMode(str, Enum):
    """Cluster authentication modes as reported by ``describe_cluster``."""

    CONFIG_MAP = "CONFIG_MAP"
    API = "API"
    API_AND_CONFIG_MAP = "API_AND_CONFIG_MAP"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> AuthenticationMode:
        for member in cls:
            if member.value == value:
                return member
        return cls.UNKNOWN

    @property
    def supports_access_entries(self) -> bool:
        return self in (AuthenticationMode.API, AuthenticationMode.API_AND_CONFIG_MAP)


@dataclass(frozen=True)
class ClusterDescriptor:
    """Name and authentication mode of one cluster."""

    name: str
    authentication_mode: AuthenticationMode = AuthenticationMode.UNKNOWN

    @classmethod
    def from_api(cls, cluster: Mapping[str, Any]) -> ClusterDescriptor:
        """Build from the ``cluster`` object of a ``describe_cluster`` response.

        Clusters created before access entries existed carry no
        ``accessConfig``; they come back as UNKNOWN.
        """
        access_config = cluster.get("accessConfig") or {}
        return cls(
            name=cluster["name"],
            authentication_mode=AuthenticationMode.parse(access_config.get("authenticationMode")),
        )
