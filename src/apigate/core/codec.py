"""JSON codec — the serialization collaborator of the dispatcher.

The dispatcher treats results as opaque: whatever an operation returns
is handed to ``encode`` and written to the response.  ``decode_array``
is what the value converter uses for array-typed parameters.

pydantic-core does the heavy lifting so dataclasses, pydantic models,
paths, URLs, datetimes and sets all serialize without custom hooks.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic_core import from_json, to_json

from apigate.core.errors import ConversionError


class JsonCodec:
    """Encode results and decode array parameters as JSON."""

    media_type = "application/json"

    def encode(self, value: Any) -> bytes:
        """Serialize an operation result. ``None`` becomes ``null``."""
        return to_json(value)

    def decode_array(self, text: str) -> list[str]:
        """
        Decode ``text`` as a JSON array of strings.

        Scalar elements (numbers, booleans) are coerced to their JSON
        text; ``null``, objects and nested arrays are rejected.

        Raises:
            ConversionError: If the text is not a JSON array of scalars
        """
        try:
            decoded = from_json(text)
        except ValueError as e:
            raise ConversionError(f"Not a valid JSON array: {text!r}", cause=e) from e

        if not isinstance(decoded, list):
            raise ConversionError(f"Expected a JSON array, got {type(decoded).__name__}")

        values = []
        for index, item in enumerate(decoded):
            if isinstance(item, str):
                values.append(item)
            elif isinstance(item, (bool, int, float)):
                values.append(json.dumps(item))
            else:
                raise ConversionError(f"Array element {index} is not a scalar value")
        return values


_default_codec: JsonCodec | None = None


def get_default_codec() -> JsonCodec:
    """Get the shared codec instance (stateless, safe to share)."""
    global _default_codec
    if _default_codec is None:
        _default_codec = JsonCodec()
    return _default_codec
