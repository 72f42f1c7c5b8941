"""Exception taxonomy for the access-entry reconciler.

Every error carries an ``error_code`` and a ``context`` dict with details for
debugging. The reconciler converts all of them into a FAILED completion
signal; only ``TransportError`` has no safety net, since it is raised while
delivering that signal.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class EksAccessError(RuntimeError):
    """Base exception for reconciler errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: str = "EKS_ACCESS_ERROR",
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}


class InputError(EksAccessError):
    """Malformed or missing field in the invocation envelope. Never retried."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, error_code="INPUT_ERROR", context=context)


class DiscoveryError(EksAccessError):
    """Listing or describing clusters failed."""

    def __init__(
        self,
        message: str,
        cluster_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, error_code="DISCOVERY_ERROR", context=context)
        self.cluster_name = cluster_name


class MutationError(EksAccessError):
    """Creating an access entry or associating its policy failed.

    Attributes:
        cluster_name: Cluster the mutation targeted
        entry_created: True when the access entry exists but the policy
            association did not go through (partial state)
    """

    def __init__(
        self,
        message: str,
        cluster_name: str,
        entry_created: bool = False,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, error_code="MUTATION_ERROR", context=context)
        self.cluster_name = cluster_name
        self.entry_created = entry_created


class TransportError(EksAccessError):
    """Delivering the completion signal to the response URL failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, error_code="TRANSPORT_ERROR", context=context)
        self.status_code = status_code
