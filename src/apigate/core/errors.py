"""
Structured error types for apigate.

Every failure the dispatcher can surface is a typed error carrying a
category, structured context, and an optional chained cause.  The
dispatcher never leaks these distinctions to the caller (all of them
render as one conflict response), but they are what gets logged and
what tests assert on.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                         ApigateError                          │
        │               (category, context, cause)                      │
        ├──────────────────────────────────────────────────────────────┤
        │  RoutingError          AuthError           BindingError       │
        │  (ROUTING)             (AUTH)              (BINDING)          │
        │     │                     │                   │               │
        │  ClassNotFoundError    AccessDeniedError   ConversionError    │
        │  MethodNotFoundError                                          │
        │  MalformedRequestError                                        │
        │                                                               │
        │  InstantiationError    AsyncBusyError      InvocationError    │
        │  (HANDLER)             (CONCURRENCY)       (HANDLER)          │
        │                                                               │
        │  ConfigError                                                  │
        │  (CONFIG)                                                     │
        │     │                                                         │
        │  MissingConfigError                                           │
        └──────────────────────────────────────────────────────────────┘

Usage:
    from apigate.core.errors import AccessDeniedError

    raise AccessDeniedError("Access denied.").with_context(
        class_id="calc", method_id="add"
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for log routing."""

    ROUTING = "ROUTING"           # Unknown class/method, malformed path
    AUTH = "AUTH"                 # Operation not exposed, level too low
    BINDING = "BINDING"           # Missing or unconvertible request values
    HANDLER = "HANDLER"           # Handler construction or invocation
    CONCURRENCY = "CONCURRENCY"   # Lock group already held
    CONFIG = "CONFIG"             # Missing or invalid settings
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields end up in ``to_dict()``; anything without a
    dedicated field goes into ``metadata``.
    """

    class_id: str | None = None
    method_id: str | None = None
    session_id: str | None = None
    request_id: str | None = None
    lock_group: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["class_id", "method_id", "session_id", "request_id", "lock_group"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ApigateError(Exception):
    """
    Base exception for all apigate errors.

    Subclasses set ``default_category``; callers may override it per
    instance.  Passing ``cause`` also sets ``__cause__`` so tracebacks
    show the original failure.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ApigateError:
        """
        Add context to this error (fluent API).

        Usage:
            raise MethodNotFoundError("Method not found.").with_context(
                class_id="calc", method_id="sub"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# ROUTING ERRORS
# =============================================================================


class RoutingError(ApigateError):
    """The request could not be resolved to an operation."""

    default_category = ErrorCategory.ROUTING


class ClassNotFoundError(RoutingError):
    """No handler class registered under the requested class identifier."""

    def __init__(self, class_id: str, **kwargs: Any):
        self.class_id = class_id
        super().__init__("Class not found.", **kwargs)
        self.context.class_id = class_id


class MethodNotFoundError(RoutingError):
    """The handler class declares no operation with the requested name."""

    def __init__(self, class_id: str, method_id: str, **kwargs: Any):
        self.class_id = class_id
        self.method_id = method_id
        super().__init__("Method not found.", **kwargs)
        self.context.class_id = class_id
        self.context.method_id = method_id


class MalformedRequestError(RoutingError):
    """The request path does not name a class and a method."""


# =============================================================================
# AUTHORIZATION ERRORS
# =============================================================================


class AuthError(ApigateError):
    """Authorization error."""

    default_category = ErrorCategory.AUTH


class AccessDeniedError(AuthError):
    """Operation not exposed, or the session's access level is too low."""


# =============================================================================
# BINDING ERRORS
# =============================================================================


class BindingError(ApigateError):
    """An operation argument could not be produced from the request."""

    default_category = ErrorCategory.BINDING

    def __init__(self, message: str, *, parameter: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.parameter = parameter

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.parameter:
            result["parameter"] = self.parameter
        return result


class ConversionError(BindingError):
    """Text could not be converted to the requested target type."""


# =============================================================================
# HANDLER / CONCURRENCY ERRORS
# =============================================================================


class InstantiationError(ApigateError):
    """The handler's factory failed to produce an instance."""

    default_category = ErrorCategory.HANDLER


class InvocationError(ApigateError):
    """The handler operation itself raised; the original is ``cause``."""

    default_category = ErrorCategory.HANDLER


class AsyncBusyError(ApigateError):
    """Another invocation in the same session and lock group is running."""

    default_category = ErrorCategory.CONCURRENCY


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(ApigateError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, ApigateError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.BINDING
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ApigateError",
    "RoutingError",
    "ClassNotFoundError",
    "MethodNotFoundError",
    "MalformedRequestError",
    "AuthError",
    "AccessDeniedError",
    "BindingError",
    "ConversionError",
    "InstantiationError",
    "InvocationError",
    "AsyncBusyError",
    "ConfigError",
    "MissingConfigError",
    "categorize_error",
]
