"""Output formatters applied to capability results before they are returned."""

import csv
import io
import json
import re
from typing import Any, Callable

import structlog

logger = structlog.get_logger()

OutputFormatter = str | Callable[[Any], str]

_NEEDS_QUOTES = re.compile(r'^\s|\s$|[,:"\[\]{}\n\r\t#]|^-')
_NUMERIC = re.compile(r"^-?\d+(\.\d+)?([eE][+-]?\d+)?$")


def _rows(output: Any) -> list | None:
    """The tabular part of an output: its "rows" list, or the list itself."""
    if isinstance(output, dict) and isinstance(output.get("rows"), list):
        return output["rows"]
    if isinstance(output, list):
        return output
    return None


# ===== TOON =====


def _toon_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)

    text = str(value)
    if (
        text == ""
        or text in ("true", "false", "null")
        or _NUMERIC.match(text)
        or _NEEDS_QUOTES.search(text)
    ):
        return json.dumps(text)
    return text


def _is_tabular(items: list) -> bool:
    if not items or not all(isinstance(i, dict) for i in items):
        return False
    keys = list(items[0].keys())
    return all(
        list(i.keys()) == keys
        and all(not isinstance(v, (dict, list)) for v in i.values())
        for i in items
    )


def _toon_lines(key: str | None, value: Any, indent: int) -> list[str]:
    pad = "  " * indent
    label = f"{key}" if key is not None else ""

    if isinstance(value, dict):
        lines = [f"{pad}{label}:"] if key is not None else []
        child_indent = indent + 1 if key is not None else indent
        for k, v in value.items():
            lines.extend(_toon_lines(str(k), v, child_indent))
        return lines

    if isinstance(value, list):
        if not value:
            return [f"{pad}{label}[0]:"]
        if all(not isinstance(v, (dict, list)) for v in value):
            return [f"{pad}{label}[{len(value)}]: " + ",".join(_toon_scalar(v) for v in value)]
        if _is_tabular(value):
            fields = list(value[0].keys())
            lines = [f"{pad}{label}[{len(value)}]{{{','.join(fields)}}}:"]
            for item in value:
                lines.append(f"{pad}  " + ",".join(_toon_scalar(item[f]) for f in fields))
            return lines
        lines = [f"{pad}{label}[{len(value)}]:"]
        for item in value:
            nested = _toon_lines(None, item, indent + 2)
            if isinstance(item, (dict, list)) and nested:
                lines.append(f"{pad}  - " + nested[0].strip())
                lines.extend(nested[1:])
            else:
                lines.append(f"{pad}  - {_toon_scalar(item)}")
        return lines

    if key is None:
        return [f"{pad}{_toon_scalar(value)}"]
    return [f"{pad}{label}: {_toon_scalar(value)}"]


def encode_toon(value: Any) -> str:
    """
    Token-Oriented Object Notation.

    Uniform lists of flat objects become a header plus one CSV-like row per
    item, e.g. "rows[2]{id,name}:" followed by "  1,Ada" and "  2,Bob".
    """
    return "\n".join(_toon_lines(None, value, 0))


def format_as_toon(output: Any) -> str:
    if isinstance(output, dict) and isinstance(output.get("rows"), list):
        if not output["rows"]:
            return "No rows returned"
        return encode_toon({"rows": output["rows"]})
    if isinstance(output, list):
        if not output:
            return "No data returned"
        return encode_toon({"rows": output})
    if isinstance(output, dict):
        return encode_toon(output)
    return format_as_json(output)


# ===== JSON / CSV / Markdown =====


def format_as_json(output: Any) -> str:
    return json.dumps(output, indent=2, default=str)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def format_as_csv(output: Any) -> str:
    rows = _rows(output)
    if rows is None:
        return format_as_json(output)
    if not rows:
        return "No data"

    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(row.get(h)) for h in headers])
    return buffer.getvalue().rstrip("\n")


def format_as_markdown(output: Any) -> str:
    rows = _rows(output)
    if rows is None:
        return f"```json\n{format_as_json(output)}\n```"
    if not rows:
        return "_No data_"

    headers = list(rows[0].keys())
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_cell(row.get(h)) for h in headers) + " |")
    return "\n".join(lines)


FORMATTERS: dict[str, Callable[[Any], str]] = {
    "toon": format_as_toon,
    "json": format_as_json,
    "csv": format_as_csv,
    "markdown": format_as_markdown,
}


def apply_output_formatter(output: Any, formatter: OutputFormatter) -> str:
    """
    Render output with a named or custom formatter.

    Unknown names fall back to JSON. Errors from custom formatters propagate
    so the caller can fall back to the unformatted output.
    """
    if callable(formatter):
        return formatter(output)

    handler = FORMATTERS.get(formatter)
    if handler is None:
        logger.warning("unknown_output_formatter", formatter=formatter)
        return format_as_json(output)
    return handler(output)
