"""Access controller — per-session authorization level of one dispatcher.

A session starts at ``NO_ACCESS`` (-1), below every operation's
minimum, so nothing is callable until the host grants a level.  Levels
are scoped by the dispatcher's owner name: granting access on one
dispatcher says nothing about another sharing the same session.
"""

from apigate.core.logging import get_logger
from apigate.execution.session import NO_ACCESS, SessionState

logger = get_logger(__name__)


class AccessController:
    """Reads and writes the access level stored on a session."""

    def __init__(self, owner: str):
        self._owner = owner

    def get_access_level(self, session: SessionState) -> int:
        """Current level of ``session``; ``NO_ACCESS`` if never set."""
        return session.get_access_level(self._owner)

    def set_access_level(self, session: SessionState, level: int) -> None:
        if isinstance(level, bool) or not isinstance(level, int):
            raise TypeError(f"Access level must be an int, got {level!r}")
        session.set_access_level(self._owner, level)
        logger.info(
            "access.level_set",
            owner=self._owner,
            session_id=session.session_id,
            level=level,
        )

    def is_permitted(self, session: SessionState, required: int) -> bool:
        return self.get_access_level(session) >= required


__all__ = ["AccessController", "NO_ACCESS"]
