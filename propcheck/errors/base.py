"""Custom exception hierarchy for propcheck.

propcheck separates three outcomes that a test author has to react to
differently:

- Configuration errors: the generator or run configuration is wrong
  (``min > max``, an empty ``one_of``). Raised eagerly at construction.
- Generator exhaustion: a filtered generator could not find an accepted
  value within its retry budget. The filter is too restrictive.
- Property failures: the predicate is false for some input. This is a
  *result*, returned by ``assert_property`` as a ``PropertyFailure``.
  Only ``verify`` turns it into an exception.

All propcheck errors inherit from PropcheckError and include:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with generator/property/seed details
- suggestions: List of actionable steps to resolve the issue

Example:
    try:
        assert_property(prop)
    except GeneratorExhaustedError as e:
        print(e.format_verbose())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for propcheck.

    Error codes are organized by category:
    - E1xx: Configuration errors
    - E2xx: Generation errors
    - E3xx: Property errors
    - E9xx: Unknown/internal errors
    """

    # Configuration errors (E1xx)
    INVALID_CONFIG = "E101"
    INVALID_RANGE = "E102"
    EMPTY_CHOICE = "E103"
    CONFIG_LOAD_FAILED = "E104"

    # Generation errors (E2xx)
    GENERATOR_EXHAUSTED = "E201"

    # Property errors (E3xx)
    PROPERTY_FAILED = "E301"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "configuration"
        elif code_num < 300:
            return "generation"
        elif code_num < 400:
            return "property"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context for error logging and debugging.

    Attributes:
        generator: Label of the generator involved, if any.
        property_name: Name of the property being run, if any.
        seed: Seed of the run, if the error happened inside a run.
        attempts: Number of attempts made before giving up (exhaustion).
        extra: Additional context-specific information.
        timestamp: When the error occurred.
    """

    generator: str | None = None
    property_name: str | None = None
    seed: int | None = None
    attempts: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "generator": self.generator,
            "property_name": self.property_name,
            "seed": self.seed,
            "attempts": self.attempts,
            "extra": self.extra or None,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.property_name:
            parts.append(f"property={self.property_name}")
        if self.generator:
            parts.append(f"generator={self.generator}")
        if self.seed is not None:
            parts.append(f"seed={self.seed}")
        return " > ".join(parts) if parts else "unknown location"


class PropcheckError(Exception):
    """Base exception for all propcheck errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.context.attempts is not None:
            lines.append(f"Attempts: {self.context.attempts}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(PropcheckError, ValueError):
    """A generator or run was configured with impossible parameters.

    Raised at construction time, never while sampling. It points at a
    mistake in the test itself, not at a property outcome.
    """

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check the arguments passed to the generator constructor",
        "Ranges are inclusive: min_value must not exceed max_value",
    ]


class InvalidRangeError(ConfigurationError):
    """A scalar or size range has its lower bound above its upper bound."""

    error_code = ErrorCode.INVALID_RANGE
    default_message = "Lower bound exceeds upper bound"


class EmptyChoiceError(ConfigurationError):
    """A choice generator was given nothing to choose from."""

    error_code = ErrorCode.EMPTY_CHOICE
    default_message = "At least one alternative is required"
    default_suggestions = [
        "Pass at least one generator to one_of()",
        "Pass a non-empty sequence to sampled_from()",
    ]


class ConfigLoadError(ConfigurationError):
    """A configuration file could not be read or parsed."""

    error_code = ErrorCode.CONFIG_LOAD_FAILED
    default_message = "Failed to load configuration"
    default_suggestions = [
        "Check that propcheck.yaml is valid YAML with a top-level mapping",
        "Specify a different config path with --config",
    ]


class GeneratorExhaustedError(PropcheckError):
    """A filtered generator ran out of retries.

    This is neither a pass nor a failure of the property: the filter
    rejects too much of its source's output and must be loosened.
    """

    error_code = ErrorCode.GENERATOR_EXHAUSTED
    default_message = "Filter rejected every candidate within its retry budget"
    default_suggestions = [
        "Loosen the filter predicate",
        "Narrow the source generator so that more of its values are accepted",
        "Use map() to construct valid values instead of filtering for them",
    ]


class PropertyFailedError(PropcheckError, AssertionError):
    """Raised by verify() when a property has a counterexample.

    assert_property() returns failures as data; this exception exists
    so that a failing property fails the surrounding pytest test.
    """

    error_code = ErrorCode.PROPERTY_FAILED
    default_message = "Property has a counterexample"
    default_suggestions = [
        "Replay the failure with the recorded bytes and runs=1",
    ]

    def __init__(self, failure: Any, message: str | None = None, **kwargs: Any) -> None:
        self.failure = failure
        super().__init__(message or failure.summary(), **kwargs)
