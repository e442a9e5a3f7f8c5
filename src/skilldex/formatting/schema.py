"""Render pydantic input schemas as compact, agent-readable parameter text.

Example output:

    query: string (min 1) - SQL to run, limit: number, optional, default: 100
"""

import json

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()

NO_PARAMETERS = "No parameters required"


def format_schema_for_agent(schema: type[BaseModel] | None) -> str | None:
    """
    Describe a model's fields in one line.

    Returns:
        None when there is no schema, "No parameters required" when the
        model has no fields, else comma-separated field descriptions
    """
    if schema is None:
        return None

    try:
        json_schema = schema.model_json_schema()
    except Exception as e:
        logger.error("schema_format_failed", schema=schema.__name__, error=str(e))
        return f"Schema: {schema.__name__}"

    properties = json_schema.get("properties", {})
    if not properties:
        return NO_PARAMETERS

    definitions = json_schema.get("$defs", {})
    required = set(json_schema.get("required", []))
    return ", ".join(
        _format_field(name, prop, name not in required, definitions)
        for name, prop in properties.items()
    )


def _format_field(name: str, prop: dict, optional: bool, definitions: dict) -> str:
    parts = [describe_type(prop, definitions)]
    if optional:
        parts.append("optional")
    if "default" in prop and prop["default"] is not None:
        parts.append(f"default: {json.dumps(prop['default'])}")

    text = f"{name}: {', '.join(parts)}"
    description = prop.get("description")
    if description:
        text += f" - {description}"
    return text


def _unwrap(prop: dict, definitions: dict) -> dict:
    """Resolve $ref and drop the null branch of Optional[...] unions."""
    if "$ref" in prop:
        return definitions.get(prop["$ref"].rsplit("/", 1)[-1], {})

    for key in ("anyOf", "oneOf"):
        if key in prop:
            branches = [b for b in prop[key] if b.get("type") != "null"]
            if len(branches) == 1:
                return _unwrap(branches[0], definitions)
    return prop


def _constraints(prop: dict, low: str, high: str) -> list[str]:
    result = []
    if low in prop:
        result.append(f"min {prop[low]}")
    if high in prop:
        result.append(f"max {prop[high]}")
    return result


def describe_type(prop: dict, definitions: dict | None = None) -> str:
    definitions = definitions or {}
    prop = _unwrap(prop, definitions)

    if "enum" in prop:
        return "enum: " + " | ".join(f'"{v}"' for v in prop["enum"])
    if "const" in prop:
        return f'enum: "{prop["const"]}"'

    kind = prop.get("type")
    if kind == "string":
        checks = _constraints(prop, "minLength", "maxLength")
        return f"string ({', '.join(checks)})" if checks else "string"
    if kind in ("integer", "number"):
        checks = _constraints(prop, "minimum", "maximum") or _constraints(
            prop, "exclusiveMinimum", "exclusiveMaximum"
        )
        return f"number ({', '.join(checks)})" if checks else "number"
    if kind == "boolean":
        return "boolean"
    if kind == "array":
        return f"array of {describe_type(prop.get('items', {}), definitions)}"
    if kind == "object":
        if prop.get("additionalProperties") and not prop.get("properties"):
            return "record (key-value pairs)"
        return "object"
    if "anyOf" in prop or "oneOf" in prop:
        branches = prop.get("anyOf") or prop.get("oneOf")
        return " | ".join(describe_type(b, definitions) for b in branches)
    return "any"
