"""Value converter — request text → typed operation argument.

Scalar support is deliberately small and extensible:

    =====================  ==========================================
    Target                 Conversion
    =====================  ==========================================
    str                    text unchanged
    int                    optional sign + ASCII digits
    URI                    ``str`` checked by ``urlsplit`` (no whitespace)
    URL (pydantic AnyUrl)  pydantic URL validation
    Path                   ``pathlib.Path`` (no NUL characters)
    list[T] / tuple[T,...] JSON array of strings, each converted to T
    =====================  ==========================================

A target matches a built-in when it *is* that type, or failing that,
when it is a supertype of it (so ``object`` receives the text).  An
unknown target is always a ``ConversionError``, never a default.

Example::

    converter = ValueConverter()
    converter.convert("42", int)                 # 42
    converter.convert('["1", "2"]', list[int])   # [1, 2]
    converter.register(float, float)
"""

import re
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, get_args, get_origin
from urllib.parse import SplitResult, urlsplit

from pydantic import AnyUrl, TypeAdapter

from apigate.core.codec import JsonCodec, get_default_codec
from apigate.core.errors import ConversionError

URL = AnyUrl

_INT_RE = re.compile(r"[+-]?[0-9]+")
_URL_ADAPTER = TypeAdapter(AnyUrl)

ScalarConverter = Callable[[str], Any]


def _to_str(text: str) -> str:
    return text


def _to_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer literal: {text!r}")
    return int(text)


class URI(str):
    """URI reference text, validated on construction.

    Being a ``str``, it encodes back to the exact text it was built
    from; the split components are available as attributes.
    """

    __slots__ = ()

    def __new__(cls, text: str) -> "URI":
        if any(c.isspace() or ord(c) < 0x20 for c in text):
            raise ValueError(f"illegal character in URI: {text!r}")
        parts = urlsplit(text)
        # Accessing port validates it
        parts.port
        return super().__new__(cls, text)

    @property
    def parts(self) -> SplitResult:
        return urlsplit(self)

    @property
    def scheme(self) -> str:
        return self.parts.scheme

    @property
    def hostname(self) -> str | None:
        return self.parts.hostname

    @property
    def port(self) -> int | None:
        return self.parts.port

    @property
    def path(self) -> str:
        return self.parts.path

    @property
    def query(self) -> str:
        return self.parts.query

    def geturl(self) -> str:
        return self.parts.geturl()


def _to_uri(text: str) -> URI:
    return URI(text)


def _to_url(text: str) -> AnyUrl:
    return _URL_ADAPTER.validate_python(text)


def _to_path(text: str) -> Path:
    if "\x00" in text:
        raise ValueError("path contains NUL character")
    return Path(text)


_BUILTIN: tuple[tuple[type, ScalarConverter], ...] = (
    (str, _to_str),
    (int, _to_int),
    (URI, _to_uri),
    (AnyUrl, _to_url),
    (Path, _to_path),
)


class ValueConverter:
    """Converts request text into the declared type of a parameter.

    Stateless after construction; one instance is shared by all
    sessions and concurrent requests.
    """

    def __init__(self, codec: JsonCodec | None = None):
        self._codec = codec or get_default_codec()
        self._scalars: list[tuple[type, ScalarConverter]] = list(_BUILTIN)

    def register(self, target: type, func: ScalarConverter) -> None:
        """Add (or replace) the scalar conversion for ``target``.

        ``func`` receives the text and may raise ``ValueError`` /
        ``TypeError`` to signal malformed input.
        """
        self._scalars = [(t, f) for t, f in self._scalars if t is not target]
        self._scalars.append((target, func))

    def supports(self, target: Any) -> bool:
        element = _array_element(target)
        if element is not None:
            return self.supports(element)
        return self._lookup(target) is not None

    def convert(self, text: str, target: Any) -> Any:
        """Convert ``text`` to ``target``.

        Raises:
            ConversionError: Malformed text, unsupported target type, or
                (for arrays) invalid JSON or any failing element
        """
        if text is None:
            raise ConversionError("No value to convert")

        element = _array_element(target)
        if element is not None:
            if not self.supports(element):
                raise ConversionError(f"Unknown target type: {_type_name(target)}")
            values = [self.convert(value, element) for value in self._codec.decode_array(text)]
            return tuple(values) if get_origin(target) is tuple else values

        func = self._lookup(target)
        if func is None:
            raise ConversionError(f"Unknown target type: {_type_name(target)}")

        try:
            return func(text)
        except ConversionError:
            raise
        except (ValueError, TypeError) as e:
            raise ConversionError(
                f"Cannot convert {text!r} to {_type_name(target)}", cause=e
            ) from e

    def _lookup(self, target: Any) -> ScalarConverter | None:
        if get_origin(target) is not None or not isinstance(target, type):
            return None
        for scalar, func in self._scalars:
            if scalar is target:
                return func
        for scalar, func in self._scalars:
            if issubclass(scalar, target):
                return func
        return None


def _array_element(target: Any) -> Any | None:
    """Element type of an array target, or None if ``target`` is not one."""
    if target in (list, tuple):
        return str
    origin = get_origin(target)
    args = get_args(target)
    if origin in (list, Sequence) and len(args) == 1:
        return args[0]
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return args[0]
    return None


def _type_name(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)
