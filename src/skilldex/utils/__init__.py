"""Utility helpers."""

from skilldex.utils.text import slugify, truncate_text

__all__ = ["slugify", "truncate_text"]
