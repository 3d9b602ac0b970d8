"""Error types for propcheck."""

from propcheck.errors.base import (
    ConfigLoadError,
    ConfigurationError,
    EmptyChoiceError,
    ErrorCode,
    ErrorContext,
    GeneratorExhaustedError,
    InvalidRangeError,
    PropcheckError,
    PropertyFailedError,
)

__all__ = [
    "ErrorCode",
    "ErrorContext",
    "PropcheckError",
    "ConfigurationError",
    "InvalidRangeError",
    "EmptyChoiceError",
    "ConfigLoadError",
    "GeneratorExhaustedError",
    "PropertyFailedError",
]
