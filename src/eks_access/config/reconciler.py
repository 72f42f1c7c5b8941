"""Reconciler configuration.

``ReconcilerConfig`` holds everything the reconciler, its completion client
and its Lambda handler would otherwise hard-code: the policy to associate,
its scope, the access entry type, the time budget and the callback delivery
settings.

Values resolve with explicit arguments first, then environment variables
(see ``ENV_VARS``), then the defaults in ``eks_access.constants``.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..constants import (
    ACCESS_ENTRY_TYPES,
    ACCESS_SCOPE_TYPES,
    DEFAULT_ACCESS_SCOPE_TYPE,
    DEFAULT_CALLBACK_MAX_ATTEMPTS,
    DEFAULT_CALLBACK_RESERVE_SECONDS,
    DEFAULT_CALLBACK_TIMEOUT_SECONDS,
    DEFAULT_ENTRY_TYPE,
    DEFAULT_POLICY_ARN,
    DEFAULT_TIMEOUT_SECONDS,
)
from .base import ConfigValidationResult, Configuration, SerializationError

ENV_VARS: Dict[str, str] = {
    "policy_arn": "EKS_ACCESS_POLICY_ARN",
    "access_scope_type": "EKS_ACCESS_SCOPE_TYPE",
    "access_scope_namespaces": "EKS_ACCESS_SCOPE_NAMESPACES",
    "entry_type": "EKS_ACCESS_ENTRY_TYPE",
    "timeout_seconds": "EKS_ACCESS_TIMEOUT_SECONDS",
    "callback_reserve_seconds": "EKS_ACCESS_CALLBACK_RESERVE_SECONDS",
    "max_workers": "EKS_ACCESS_MAX_WORKERS",
    "repair_existing_entries": "EKS_ACCESS_REPAIR_EXISTING",
    "region": "AWS_REGION",
    "callback_timeout_seconds": "EKS_ACCESS_CALLBACK_TIMEOUT_SECONDS",
    "callback_max_attempts": "EKS_ACCESS_CALLBACK_MAX_ATTEMPTS",
}

_INT_FIELDS = ("max_workers", "callback_max_attempts")
_FLOAT_FIELDS = ("timeout_seconds", "callback_reserve_seconds", "callback_timeout_seconds")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_namespaces(value: Any) -> List[str]:
    if isinstance(value, str):
        return [ns.strip() for ns in value.split(",") if ns.strip()]
    return [str(ns) for ns in value]


@dataclass
class ReconcilerConfig(Configuration):
    """Settings for one reconciler invocation.

    Example usage:
        config = ReconcilerConfig.from_environment()
        config.validate_or_raise()
    """

    policy_arn: str = DEFAULT_POLICY_ARN
    access_scope_type: str = DEFAULT_ACCESS_SCOPE_TYPE
    access_scope_namespaces: List[str] = field(default_factory=list)
    entry_type: str = DEFAULT_ENTRY_TYPE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    callback_reserve_seconds: float = DEFAULT_CALLBACK_RESERVE_SECONDS
    max_workers: int = 1
    repair_existing_entries: bool = False
    region: Optional[str] = None
    callback_timeout_seconds: float = DEFAULT_CALLBACK_TIMEOUT_SECONDS
    callback_max_attempts: int = DEFAULT_CALLBACK_MAX_ATTEMPTS

    @property
    def access_scope(self) -> Dict[str, Any]:
        """Access scope in the shape ``associate_access_policy`` expects."""
        scope: Dict[str, Any] = {"type": self.access_scope_type}
        if self.access_scope_type == "namespace":
            scope["namespaces"] = list(self.access_scope_namespaces)
        return scope

    def validate(self) -> ConfigValidationResult:
        result = ConfigValidationResult()

        if not self.policy_arn or not self.policy_arn.startswith("arn:"):
            result.add_error(f"Policy ARN must be an ARN (got '{self.policy_arn}')")

        if self.access_scope_type not in ACCESS_SCOPE_TYPES:
            result.add_error(
                f"Access scope type must be one of {', '.join(ACCESS_SCOPE_TYPES)} (got '{self.access_scope_type}')"
            )
        elif self.access_scope_type == "namespace" and not self.access_scope_namespaces:
            result.add_error("Namespace access scope requires at least one namespace")

        if self.entry_type not in ACCESS_ENTRY_TYPES:
            result.add_error(
                f"Access entry type must be one of {', '.join(ACCESS_ENTRY_TYPES)} (got '{self.entry_type}')"
            )

        if self.timeout_seconds <= 0:
            result.add_error("Timeout must be positive")
        if self.callback_reserve_seconds < 0:
            result.add_error("Callback reserve cannot be negative")
        elif self.callback_reserve_seconds >= self.timeout_seconds:
            result.add_error("Callback reserve must be smaller than the timeout")

        if self.max_workers < 1:
            result.add_error("max_workers must be at least 1")
        if self.callback_max_attempts < 1:
            result.add_error("callback_max_attempts must be at least 1")
        if self.callback_timeout_seconds <= 0:
            result.add_error("Callback timeout must be positive")

        return result

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReconcilerConfig:
        known = {name: value for name, value in data.items() if name in ENV_VARS}
        try:
            for name in _INT_FIELDS:
                if name in known:
                    known[name] = int(known[name])
            for name in _FLOAT_FIELDS:
                if name in known:
                    known[name] = float(known[name])
            if "repair_existing_entries" in known:
                known["repair_existing_entries"] = _parse_bool(known["repair_existing_entries"])
            if "access_scope_namespaces" in known:
                known["access_scope_namespaces"] = _parse_namespaces(known["access_scope_namespaces"])
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Invalid reconciler configuration value: {e}") from e
        return cls(**known)

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any
    ) -> ReconcilerConfig:
        """Build configuration from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``
            **overrides: Explicit values that win over the environment

        Raises:
            SerializationError: If an environment value has the wrong type
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for name, env_var in ENV_VARS.items():
            value = environ.get(env_var)
            if value not in (None, ""):
                data[name] = value
        data.update({name: value for name, value in overrides.items() if value is not None})
        return cls.from_dict(data)
