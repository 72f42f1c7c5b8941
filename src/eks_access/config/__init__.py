"""Configuration for the access-entry reconciler."""

from .base import (
    ConfigValidationResult,
    Configuration,
    ConfigurationError,
    SerializationError,
    ValidationError,
)
from .reconciler import ENV_VARS, ReconcilerConfig

__all__ = [
    "ConfigValidationResult",
    "Configuration",
    "ConfigurationError",
    "SerializationError",
    "ValidationError",
    "ENV_VARS",
    "ReconcilerConfig",
]
