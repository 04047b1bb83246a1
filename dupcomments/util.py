from __future__ import annotations
from typing import Optional

import xxhash


def content_digest(text: Optional[str]) -> Optional[str]:
    """xxHash64 hex digest of comment content, used only to group rows.

    Collisions are possible; callers re-check candidates with exact equality.
    """
    if text is None:
        return None
    return xxhash.xxh64_hexdigest(text.encode("utf-8"))


def plural(count: int, singular: str, plural_form: str) -> str:
    return singular if count == 1 else plural_form


def snippet(text: str, width: int = 60) -> str:
    flat = " ".join((text or "").split())
    if len(flat) <= width:
        return flat
    return flat[: width - 3] + "..."
