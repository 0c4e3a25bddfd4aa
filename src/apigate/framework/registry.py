"""Operation registry — class identifier → handler descriptor.

The registry is built once from a mapping and is read-only afterwards,
so dispatch-time lookups need no locking.  Values may be plain handler
classes (described with their own zero-argument constructor as factory)
or ready ``HandlerDescriptor`` objects carrying a custom factory.

Example::

    registry = OperationRegistry({
        "calc": Calculator,
        "shop": describe_handler(Shop, factory=lambda: Shop(catalog)),
    })
    registry.resolve("calc").handler          # Calculator
    registry.resolve("nope")                  # None
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from apigate.core.logging import get_logger
from apigate.framework.operations import HandlerDescriptor, describe_handler

logger = get_logger(__name__)


class OperationRegistry:
    """Immutable mapping of class identifiers to handler descriptors."""

    def __init__(self, handlers: Mapping[str, type | HandlerDescriptor]):
        entries: dict[str, HandlerDescriptor] = {}
        by_type: dict[type, HandlerDescriptor] = {}

        for class_id, handler in handlers.items():
            if not isinstance(class_id, str) or not class_id:
                raise ValueError(f"Class identifier must be a non-empty string, got {class_id!r}")
            descriptor = handler if isinstance(handler, HandlerDescriptor) else describe_handler(handler)
            entries[class_id] = descriptor
            # The same handler type may be exposed under several identifiers;
            # the first registration provides its factory.
            by_type.setdefault(descriptor.handler, descriptor)
            logger.debug(
                "registry.handler_registered",
                class_id=class_id,
                handler=descriptor.handler.__qualname__,
                operations=len(descriptor.exposed()),
            )

        self._entries = MappingProxyType(entries)
        self._by_type = MappingProxyType(by_type)

    def resolve(self, class_id: str) -> HandlerDescriptor | None:
        """Look up a class identifier; ``None`` if unknown."""
        return self._entries.get(class_id)

    def descriptor_for(self, handler: type) -> HandlerDescriptor | None:
        """Look up the descriptor registered for a handler type."""
        return self._by_type.get(handler)

    def class_ids(self) -> list[str]:
        return sorted(self._entries)

    def items(self) -> list[tuple[str, HandlerDescriptor]]:
        return sorted(self._entries.items())

    def __contains__(self, class_id: Any) -> bool:
        return class_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.class_ids())

    def __len__(self) -> int:
        return len(self._entries)
