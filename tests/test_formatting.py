"""Tests for output formatters and schema descriptions."""

from typing import Literal

from pydantic import BaseModel, Field

from skilldex.formatting import apply_output_formatter, format_schema_for_agent
from skilldex.formatting.output import encode_toon, format_as_markdown, format_as_toon
from skilldex.formatting.schema import NO_PARAMETERS

ROWS = [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Grace, Hopper"}]


class TestOutputFormatters:
    def test_toon_table(self):
        assert format_as_toon({"rows": ROWS}) == 'rows[2]{id,name}:\n  1,Ada\n  2,"Grace, Hopper"'

    def test_toon_bare_list_is_a_table(self):
        assert format_as_toon(ROWS).startswith("rows[2]{id,name}:")

    def test_toon_empty(self):
        assert format_as_toon({"rows": []}) == "No rows returned"
        assert format_as_toon([]) == "No data returned"

    def test_toon_nested_object(self):
        assert encode_toon({"user": {"id": 1, "tags": ["a", "b"]}}) == "user:\n  id: 1\n  tags[2]: a,b"

    def test_csv_quotes_cells(self):
        assert apply_output_formatter(ROWS, "csv") == 'id,name\n1,Ada\n2,"Grace, Hopper"'

    def test_csv_empty(self):
        assert apply_output_formatter([], "csv") == "No data"

    def test_markdown_table(self):
        assert format_as_markdown({"rows": ROWS[:1]}) == "| id | name |\n| --- | --- |\n| 1 | Ada |"
        assert format_as_markdown([]) == "_No data_"

    def test_markdown_non_tabular(self):
        assert format_as_markdown({"a": 1}).startswith("```json")

    def test_unknown_name_falls_back_to_json(self):
        assert apply_output_formatter({"a": 1}, "yaml") == '{\n  "a": 1\n}'

    def test_callable(self):
        assert apply_output_formatter([1, 2], lambda out: f"{len(out)} items") == "2 items"


class Query(BaseModel):
    sql: str = Field(..., min_length=1, description="SQL to run")
    limit: int = Field(default=100, ge=1, le=1000)
    mode: Literal["fast", "exact"] = "fast"
    tags: list[str] | None = None
    options: dict[str, str] = Field(default_factory=dict)


class Empty(BaseModel):
    pass


class TestFormatSchemaForAgent:
    def test_no_schema(self):
        assert format_schema_for_agent(None) is None

    def test_no_fields(self):
        assert format_schema_for_agent(Empty) == NO_PARAMETERS

    def test_fields(self):
        text = format_schema_for_agent(Query)

        assert text.split(", limit")[0] == "sql: string (min 1) - SQL to run"
        assert "limit: number (min 1, max 1000), optional, default: 100" in text
        assert 'mode: enum: "fast" | "exact", optional, default: "fast"' in text
        assert "tags: array of string, optional" in text
        assert "options: record (key-value pairs), optional" in text
