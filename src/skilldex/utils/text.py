"""Text helpers shared by parsers and the indexer."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_SENTENCE_END = re.compile(r"[.!?]")

# A cut point must keep at least this much of the text.
MIN_CUT = 50


def slugify(text: str, separator: str = "-") -> str:
    """Lowercase and replace every non-alphanumeric character."""
    return _NON_ALNUM.sub(separator, text.strip().lower())


def truncate_text(text: str | None, max_length: int = 200) -> str | None:
    """
    Shorten text for index descriptions.

    Prefers the last sentence end inside the limit, then the last word
    boundary (with "..."), then a hard cut (with "...").
    """
    if not text or len(text) <= max_length:
        return text

    head = text[:max_length]

    sentence_end = max((m.start() for m in _SENTENCE_END.finditer(head)), default=-1)
    if sentence_end > MIN_CUT:
        return head[: sentence_end + 1]

    space = head.rfind(" ")
    if space > MIN_CUT:
        return head[:space] + "..."

    return head + "..."
