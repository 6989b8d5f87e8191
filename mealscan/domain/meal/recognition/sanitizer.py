"""Markdown fence sanitizer for generative provider output.

Chat models often wrap JSON in ```json ... ``` blocks despite being told
not to. Every fence marker (tagged or not) is removed and surrounding
whitespace trimmed. The operation is idempotent and never raises.
"""

from __future__ import annotations

import re

__all__ = ["strip_code_fences"]

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence markers from ``text``.

    Example:
        >>> strip_code_fences('```json\\n{"items": []}\\n```')
        '{"items": []}'
        >>> strip_code_fences('{"a": 1}')
        '{"a": 1}'
    """
    if not text:
        return ""
    return _FENCE_RE.sub("", text).strip()
