"""Completion signal returned by the reconciler and delivered to CloudFormation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class CompletionStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


@dataclass(frozen=True)
class CompletionSignal:
    """Outcome of one invocation.

    Attributes:
        status: SUCCESS or FAILED
        reason: Human-readable explanation, required in practice for FAILED
        data: Payload returned to the stack (readable with ``Fn::GetAtt``)
    """

    status: CompletionStatus
    reason: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status is CompletionStatus.SUCCESS

    @classmethod
    def success(cls, data: Optional[Mapping[str, Any]] = None, reason: Optional[str] = None) -> CompletionSignal:
        return cls(status=CompletionStatus.SUCCESS, reason=reason, data=dict(data or {}))

    @classmethod
    def failed(cls, reason: str, data: Optional[Mapping[str, Any]] = None) -> CompletionSignal:
        return cls(status=CompletionStatus.FAILED, reason=reason, data=dict(data or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {"Status": self.status.value, "Reason": self.reason, "Data": dict(self.data)}
