"""Request path → (class identifier, method identifier).

Only the last two path segments matter, and both must consist of word
characters: ``/shop/cart/add`` names class ``cart``, method ``add``.
"""

from __future__ import annotations

import re

PATH_PATTERN = re.compile(r"/(\w+?)/(\w+?)(?:\?.*)?$")


def parse_path(path: str) -> tuple[str, str] | None:
    """Extract ``(class_id, method_id)``; ``None`` if the path is malformed."""
    match = PATH_PATTERN.search(path)
    if match is None:
        return None
    return match.group(1), match.group(2)
