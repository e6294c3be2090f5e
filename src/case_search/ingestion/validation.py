"""Content gate applied before text is sent to the embedding model."""

from __future__ import annotations

from typing import Any

DEFAULT_MAX_CONTENT_LENGTH = 8192


def is_valid_content(text: Any, max_length: int = DEFAULT_MAX_CONTENT_LENGTH) -> bool:
    """Return ``True`` iff *text* is a string whose trimmed length is in ``(0, max_length)``.

    Used twice by the pipeline: on whole pages before splitting and on every
    chunk before embedding.
    """
    if not isinstance(text, str):
        return False
    trimmed = text.strip()
    return 0 < len(trimmed) < max_length
