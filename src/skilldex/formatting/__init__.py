"""Rendering of schemas and capability outputs."""

from skilldex.formatting.output import (
    FORMATTERS,
    OutputFormatter,
    apply_output_formatter,
    encode_toon,
    format_as_csv,
    format_as_json,
    format_as_markdown,
    format_as_toon,
)
from skilldex.formatting.schema import NO_PARAMETERS, format_schema_for_agent

__all__ = [
    "FORMATTERS",
    "NO_PARAMETERS",
    "OutputFormatter",
    "apply_output_formatter",
    "encode_toon",
    "format_as_csv",
    "format_as_json",
    "format_as_markdown",
    "format_as_toon",
    "format_schema_for_agent",
]
