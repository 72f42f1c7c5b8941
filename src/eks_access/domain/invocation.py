"""Invocation envelope for CloudFormation custom resource events.

This module defines the InvocationEnvelope dataclass that carries everything
the reconciler needs from a raw custom resource event: the request type, the
resource properties (including the target ``RoleArn``) and the correlation
fields used to address the completion response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..exceptions import InputError


class RequestType(str, Enum):
    """Custom resource request types.

    ``NONE`` stands for a missing or unrecognised request type and is handled
    as a no-op.
    """

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"
    NONE = ""

    @classmethod
    def parse(cls, value: Any) -> RequestType:
        for member in cls:
            if member.value and member.value == value:
                return member
        return cls.NONE

    @property
    def mutates(self) -> bool:
        """Whether this request type grants access."""
        return self in (RequestType.CREATE, RequestType.UPDATE)


@dataclass(frozen=True)
class InvocationEnvelope:
    """One custom resource invocation.

    Attributes:
        request_type: Parsed request type
        resource_properties: ``ResourceProperties`` of the event
        response_url: Pre-signed URL the completion response is PUT to
        stack_id: ``StackId`` correlation field
        request_id: ``RequestId`` correlation field
        logical_resource_id: ``LogicalResourceId`` correlation field
        physical_resource_id: Existing physical id (Update and Delete only)
        resource_type: Custom resource type, e.g. ``Custom::ClusterAccessEntryTrigger``
    """

    request_type: RequestType
    resource_properties: Mapping[str, Any] = field(default_factory=dict)
    response_url: Optional[str] = None
    stack_id: Optional[str] = None
    request_id: Optional[str] = None
    logical_resource_id: Optional[str] = None
    physical_resource_id: Optional[str] = None
    resource_type: Optional[str] = None

    @property
    def role_arn(self) -> Optional[str]:
        """Target principal ARN, stripped; None when missing or blank."""
        value = self.resource_properties.get("RoleArn")
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    @classmethod
    def from_event(cls, event: Mapping[str, Any]) -> InvocationEnvelope:
        """Build an envelope from a raw custom resource event.

        Only structural problems are rejected here; a missing ``RoleArn`` is
        left for the reconciler so it can be reported as a FAILED signal.

        Raises:
            InputError: If the event is not a mapping or its
                ``ResourceProperties`` is not a mapping
        """
        if not isinstance(event, Mapping):
            raise InputError(f"Invocation event must be a mapping, got {type(event).__name__}")

        properties = event.get("ResourceProperties") or {}
        if not isinstance(properties, Mapping):
            raise InputError(
                "ResourceProperties must be a mapping",
                context={"type": type(properties).__name__},
            )

        return cls(
            request_type=RequestType.parse(event.get("RequestType")),
            resource_properties=dict(properties),
            response_url=event.get("ResponseURL"),
            stack_id=event.get("StackId"),
            request_id=event.get("RequestId"),
            logical_resource_id=event.get("LogicalResourceId"),
            physical_resource_id=event.get("PhysicalResourceId"),
            resource_type=event.get("ResourceType"),
        )

    def describe(self) -> Dict[str, Any]:
        """Loggable summary without the pre-signed URL."""
        return {
            "request_type": self.request_type.value or None,
            "role_arn": self.role_arn,
            "stack_id": self.stack_id,
            "request_id": self.request_id,
            "logical_resource_id": self.logical_resource_id,
        }
