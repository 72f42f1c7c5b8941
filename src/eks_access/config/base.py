"""Configuration contract shared by the reconciler settings.

A configuration collects every problem it finds in ``validate()`` instead of
stopping at the first one, so a misconfigured Lambda reports all of them in a
single failed deployment.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping


class ConfigurationError(Exception):
    """Base exception for configuration errors."""


class ValidationError(ConfigurationError):
    """Raised by ``validate_or_raise`` with every validation problem listed."""


class SerializationError(ConfigurationError):
    """Raised when a setting cannot be coerced to its type."""


@dataclass
class ConfigValidationResult:
    """Problems found while validating a configuration; valid when empty."""

    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def add_error(self, error: str) -> None:
        self.errors.append(error)


class Configuration(ABC):
    """Settings object that can validate itself and round-trip through a dict."""

    @abstractmethod
    def validate(self) -> ConfigValidationResult:
        """Check every setting and return all problems found."""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible representation of the settings."""

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Configuration:
        """Build settings from a mapping of raw values.

        Raises:
            SerializationError: If a value cannot be coerced
        """

    def validate_or_raise(self) -> None:
        """Raise ValidationError listing every problem ``validate()`` reports."""
        result = self.validate()
        if not result.success:
            problems = "\n".join(f"  - {error}" for error in result.errors)
            raise ValidationError(f"Invalid reconciler configuration:\n{problems}")
