"""Evaluator for the filter_by expressions the in-memory index accepts.

Supports clauses joined by "&&":

    field:=value        exact match (any element, for array fields)
    field:value         same as :=
    field:=[a,b]        match any listed value
    field:!=value       no match (or field absent)
    field:>n  >=  <  <= numeric comparison
"""

import re
from dataclasses import dataclass
from typing import Any

from skilldex.exceptions import SearchIndexError

CLAUSE_PATTERN = re.compile(
    r"^\s*(?P<field>[A-Za-z_][\w.]*)\s*:\s*(?P<op>!=|>=|<=|>|<|=)?\s*(?P<value>.+?)\s*$"
)


@dataclass
class Clause:
    field: str
    op: str
    values: list[str]

    def matches(self, document: dict[str, Any]) -> bool:
        present = self.field in document and document[self.field] is not None
        if self.op == "!=":
            return not present or not _any_equal(document[self.field], self.values)
        if not present:
            return False

        actual = document[self.field]
        if self.op == "=":
            return _any_equal(actual, self.values)

        try:
            target = float(self.values[0])
            number = float(actual)
        except (TypeError, ValueError):
            return False
        if self.op == ">":
            return number > target
        if self.op == ">=":
            return number >= target
        if self.op == "<":
            return number < target
        return number <= target


def _coerce(raw: str, like: Any) -> Any:
    if isinstance(like, bool):
        return raw.lower() == "true"
    if isinstance(like, (int, float)):
        try:
            return type(like)(raw)
        except ValueError:
            return raw
    return raw


def _any_equal(actual: Any, values: list[str]) -> bool:
    candidates = actual if isinstance(actual, list) else [actual]
    return any(c == _coerce(v, c) for c in candidates for v in values)


def _split_values(raw: str) -> list[str]:
    raw = raw.strip()
    if raw.startswith("[") and raw.endswith("]"):
        parts = raw[1:-1].split(",")
    else:
        parts = [raw]
    return [p.strip().strip("`") for p in parts if p.strip()]


def parse_filter(expression: str | None) -> list[Clause]:
    """Parse a filter expression; raise SearchIndexError when unsupported."""
    if not expression or not expression.strip():
        return []
    if "||" in expression:
        raise SearchIndexError(f"Unsupported filter (OR): {expression}", status_code=400)

    clauses = []
    for part in expression.split("&&"):
        match = CLAUSE_PATTERN.match(part)
        if not match:
            raise SearchIndexError(f"Could not parse filter clause: {part.strip()}", status_code=400)
        clauses.append(
            Clause(
                field=match.group("field"),
                op=match.group("op") or "=",
                values=_split_values(match.group("value")),
            )
        )
    return clauses


def matches_filter(document: dict[str, Any], clauses: list[Clause]) -> bool:
    return all(clause.matches(document) for clause in clauses)
