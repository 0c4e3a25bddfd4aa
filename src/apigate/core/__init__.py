"""apigate core — errors, settings, logging and the JSON codec.

Layer 1 of the package: nothing here imports from ``framework``,
``execution`` or ``api``.

    errors.py     Structured error hierarchy (ApigateError and kinds)
    settings.py   Base pydantic-settings class
    codec.py      JSON encode / decode_array collaborator
    logging/      structlog configuration, dispatch context, timing
"""

from apigate.core.codec import JsonCodec, get_default_codec
from apigate.core.errors import (
    AccessDeniedError,
    ApigateError,
    AsyncBusyError,
    BindingError,
    ClassNotFoundError,
    ConversionError,
    InstantiationError,
    InvocationError,
    MethodNotFoundError,
)

__all__ = [
    "JsonCodec",
    "get_default_codec",
    "ApigateError",
    "ClassNotFoundError",
    "MethodNotFoundError",
    "AccessDeniedError",
    "BindingError",
    "ConversionError",
    "InstantiationError",
    "InvocationError",
    "AsyncBusyError",
]
