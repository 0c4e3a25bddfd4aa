"""Session object store — one handler instance per session and type.

Instances are created lazily by the handler's registered factory the
first time an instance operation of that type runs in the session, and
are reused by every later invocation in the same session.  Static
operations never create one.
"""

from typing import Any

from apigate.core.errors import InstantiationError
from apigate.core.logging import get_logger
from apigate.execution.session import InstanceKey, SessionState
from apigate.framework.registry import OperationRegistry

logger = get_logger(__name__)


class SessionObjectStore:
    """Looks up and lazily builds session-scoped handler instances."""

    def __init__(self, owner: str, registry: OperationRegistry):
        self._owner = owner
        self._registry = registry

    def get_instance(self, handler: type, session: SessionState, create_if_missing: bool = True) -> Any | None:
        """Return the session's instance of ``handler``.

        Args:
            handler: Handler type to look up
            session: Session that owns the instance
            create_if_missing: Build it with the registered factory if absent

        Returns:
            The instance, or ``None`` if absent and not created

        Raises:
            InstantiationError: If the type is not registered, or its
                factory raised or returned ``None``
        """
        key = InstanceKey(self._owner, handler)
        if not create_if_missing:
            return session.get_instance(key)

        descriptor = self._registry.descriptor_for(handler)
        if descriptor is None:
            raise InstantiationError(f"No factory registered for {handler.__qualname__}")

        def build() -> Any:
            try:
                instance = descriptor.factory()
            except Exception as e:
                raise InstantiationError(
                    f"Could not create {handler.__qualname__}", cause=e
                ).with_context(session_id=session.session_id) from e
            if instance is None:
                raise InstantiationError(f"Factory of {handler.__qualname__} returned None").with_context(
                    session_id=session.session_id
                )
            logger.debug("instance.created", handler=handler.__qualname__, session_id=session.session_id)
            return instance

        return session.get_or_create_instance(key, build)
