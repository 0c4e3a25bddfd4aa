"""Operation metadata — what a handler class exposes and how.

Handler authors mark methods with ``@api_method`` and request-bound
parameters with ``Annotated[T, Param("name")]``.  ``describe_handler``
turns a class into a ``HandlerDescriptor`` once, at registration time;
nothing is inspected per request.

Example::

    class Calculator:
        @api_method(access_level=0)
        def add(self, a: Annotated[int, Param("a")], b: Annotated[int, Param("b")]) -> int:
            return a + b

        @api_method(access_level=1, asynchronous=True, locking_group="jobs")
        def rebuild(self, session: SessionState) -> dict:
            ...

    descriptor = describe_handler(Calculator)
    descriptor.operations["add"].params[0].request_name   # "a"
"""

import inspect
import types
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Union, get_args, get_origin

_META_ATTR = "__apigate_operation__"


class ExecutionMode(str, Enum):
    """How an operation runs relative to the dispatching thread."""

    SYNC = "sync"
    ASYNC = "async"


class ParamKind(str, Enum):
    """Where an operation argument comes from."""

    CONTEXTUAL = "contextual"
    REQUEST = "request"


@dataclass(frozen=True)
class Param:
    """Marks a parameter as bound to the named request value."""

    name: str
    optional: bool = False


@dataclass(frozen=True)
class OperationMeta:
    """What ``@api_method`` attaches to a function."""

    access_level: int
    asynchronous: bool = False
    locking_group: str = ""
    http_method: str = "GET"


def api_method(
    access_level: int,
    *,
    asynchronous: bool = False,
    locking_group: str = "",
    http_method: str = "GET",
) -> Callable:
    """Expose a method as a remotely invocable operation.

    Args:
        access_level: Minimum session access level required (>= 0)
        asynchronous: Run off the dispatching thread
        locking_group: Session-scoped mutual-exclusion group ("" = none)
        http_method: Request method the operation answers to

    Works above or below ``@staticmethod`` / ``@classmethod``.
    """
    if isinstance(access_level, bool) or not isinstance(access_level, int) or access_level < 0:
        raise ValueError(f"access_level must be a non-negative int, got {access_level!r}")

    meta = OperationMeta(
        access_level=access_level,
        asynchronous=asynchronous,
        locking_group=locking_group,
        http_method=http_method.upper(),
    )

    def decorator(func):
        target = func.__func__ if isinstance(func, (staticmethod, classmethod)) else func
        setattr(target, _META_ATTR, meta)
        return func

    return decorator


@dataclass(frozen=True)
class ParamSpec:
    """One parameter of an operation, in declaration order."""

    name: str
    kind: ParamKind
    annotation: Any
    request_name: str | None = None
    optional: bool = False
    default: Any = None


@dataclass(frozen=True)
class OperationDescriptor:
    """Everything the dispatcher needs to authorize, bind and run one operation."""

    name: str
    access_level: int
    mode: ExecutionMode
    locking_group: str
    http_method: str
    params: tuple[ParamSpec, ...]
    is_static: bool = False

    @property
    def is_async(self) -> bool:
        return self.mode is ExecutionMode.ASYNC


@dataclass(frozen=True)
class HandlerDescriptor:
    """Static operation table of one handler class.

    ``operations`` lists every public method by name: exposed ones map
    to their descriptor, the others to ``None``.
    """

    handler: type
    factory: Callable[[], Any]
    operations: Mapping[str, OperationDescriptor | None]

    def has_method(self, name: str) -> bool:
        return name in self.operations

    def exposed(self) -> list[OperationDescriptor]:
        """Exposed operations, sorted by name."""
        return [op for _, op in sorted(self.operations.items()) if op is not None]


def describe_handler(handler: type, factory: Callable[[], Any] | None = None) -> HandlerDescriptor:
    """Build the operation table of ``handler``.

    Args:
        handler: The handler class
        factory: Zero-argument constructor; defaults to the class itself

    Raises:
        TypeError: If ``handler`` is not a class, or an exposed operation
            has a parameter that cannot be bound
    """
    if not isinstance(handler, type):
        raise TypeError(f"Handler must be a class, got {handler!r}")

    operations: dict[str, OperationDescriptor | None] = {}
    for name in dir(handler):
        if name.startswith("_"):
            continue
        raw = inspect.getattr_static(handler, name)
        is_static = isinstance(raw, (staticmethod, classmethod))
        func = raw.__func__ if is_static else raw
        if not inspect.isfunction(func):
            continue
        meta = getattr(func, _META_ATTR, None)
        if meta is None:
            operations[name] = None
            continue
        operations[name] = OperationDescriptor(
            name=name,
            access_level=meta.access_level,
            mode=ExecutionMode.ASYNC if meta.asynchronous else ExecutionMode.SYNC,
            locking_group=meta.locking_group,
            http_method=meta.http_method,
            params=_describe_params(handler, name, func, is_static, isinstance(raw, classmethod)),
            is_static=is_static,
        )

    return HandlerDescriptor(
        handler=handler,
        factory=factory or handler,
        operations=MappingProxyType(operations),
    )


def _describe_params(
    handler: type, name: str, func: Callable, is_static: bool, is_classmethod: bool
) -> tuple[ParamSpec, ...]:
    qualified = f"{handler.__qualname__}.{name}"
    try:
        hints = typing.get_type_hints(func, include_extras=True)
    except NameError as e:
        raise TypeError(f"Cannot resolve annotations of {qualified}: {e}") from e

    parameters = list(inspect.signature(func).parameters.values())
    if not is_static or is_classmethod:
        # self / cls
        parameters = parameters[1:]

    specs = []
    for parameter in parameters:
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise TypeError(f"{qualified}: *args / **kwargs cannot be bound")

        hint = hints.get(parameter.name, inspect.Parameter.empty)
        marker = None
        if get_origin(hint) is Annotated:
            hint, *extras = get_args(hint)
            marker = next((m for m in extras if isinstance(m, Param)), None)

        if marker is not None:
            has_default = parameter.default is not inspect.Parameter.empty
            specs.append(
                ParamSpec(
                    name=parameter.name,
                    kind=ParamKind.REQUEST,
                    annotation=_unwrap_optional(hint),
                    request_name=marker.name,
                    optional=marker.optional,
                    default=parameter.default if has_default else None,
                )
            )
        elif hint is inspect.Parameter.empty:
            raise TypeError(
                f"{qualified}: parameter {parameter.name!r} needs a type annotation or a Param marker"
            )
        else:
            specs.append(
                ParamSpec(
                    name=parameter.name,
                    kind=ParamKind.CONTEXTUAL,
                    annotation=_unwrap_optional(hint),
                )
            )
    return tuple(specs)


def _unwrap_optional(hint: Any) -> Any:
    """``X | None`` -> ``X``; anything else unchanged."""
    if get_origin(hint) in (Union, types.UnionType):
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint
