"""Tool descriptors handed to the LLM, and validation of the arguments it returns.

Each descriptor carries a name, a description and a JSON-schema `parameters`
object. The model is forced to call exactly one tool, and its arguments are
checked against `enum`, `items.enum`, `maxItems` and `required` before they
reach an API client.
"""

import logging
from typing import Any

from trial_scout.constants import OVERALL_STATUSES, STUDY_FIELD_MODULES

logger = logging.getLogger(__name__)


class ToolArgumentError(ValueError):
    """LLM-supplied arguments violate the tool's declared schema."""

    def __init__(self, tool: str, key: str, message: str):
        self.tool = tool
        self.key = key
        super().__init__(f"{tool}.{key}: {message}")


STUDIES_TOOL: dict[str, Any] = {
    "name": "studies",
    "description": "Search clinical trials with filters.",
    "parameters": {
        "type": "object",
        "required": ["fields"],
        "properties": {
            "query.cond": {
                "type": "string",
                "description": "Search for condition or disease",
            },
            "query.term": {
                "type": "string",
                "description": "Search age, phase, design, sponsor, keyword, etc.",
            },
            "query.locn": {
                "type": "string",
                "description": "Search for location (country, state, city, facility)",
            },
            "query.titles": {"type": "string", "description": "Search in title"},
            "query.intr": {
                "type": "string",
                "description": "Search in interventions, Arm Groups",
            },
            "query.outc": {
                "type": "string",
                "description": "Search in outcome measures",
            },
            "query.spons": {
                "type": "string",
                "description": "Search sponsors / collaborators",
            },
            "query.patient": {
                "type": "string",
                "description": "Search all patient details",
            },
            "filter.overallStatus": {
                "type": "array",
                "items": {"type": "string", "enum": list(OVERALL_STATUSES)},
                "description": "Only return studies with these overall statuses",
            },
            "fields": {
                "type": "array",
                "items": {"type": "string", "enum": list(STUDY_FIELD_MODULES)},
                "description": "Pick ALL modules relevant to answering the question",
            },
            "sort": {
                "type": "array",
                "items": {"type": "string"},
                "maxItems": 2,
                "description": (
                    "Sorting options. Examples: @relevance, LastUpdatePostDate, "
                    "EnrollmentCount:desc, NumArmGroups"
                ),
            },
        },
    },
}

DRUG_LABELING_TOOL: dict[str, Any] = {
    "name": "drugLabeling",
    "description": "Search FDA drug labels (indications, warnings, dosage, manufacturer).",
    "parameters": {
        "type": "object",
        "properties": {
            "search": {
                "type": "string",
                "description": (
                    "openFDA search expression. Examples: "
                    'openfda.generic_name:"metformin", '
                    'indications_and_usage:"asthma" AND openfda.route:"ORAL"'
                ),
            },
            "searches": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Several openFDA search expressions, combined with AND",
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of labels to return (max 1000)",
            },
        },
    },
}

STUDY_TOOL: dict[str, Any] = {
    "name": "study",
    "description": "Get a single study by NCT ID",
    "parameters": {
        "type": "object",
        "properties": {
            "nctId": {"type": "string", "description": "NCT ID"},
        },
    },
}

TOOLS: dict[str, dict[str, Any]] = {
    tool["name"]: tool for tool in (STUDIES_TOOL, DRUG_LABELING_TOOL, STUDY_TOOL)
}


def get_tool(name: str) -> dict[str, Any]:
    """Return the descriptor for a tool name. Raises KeyError if unknown."""
    return TOOLS[name]


def to_anthropic_tool(tool: dict[str, Any]) -> dict[str, Any]:
    """Convert a descriptor into the Messages API tool shape."""
    return {
        "name": tool["name"],
        "description": tool["description"],
        "input_schema": tool["parameters"],
    }


def _coerce_type(tool: str, key: str, declared: str | None, value: Any) -> Any:
    """Bring a scalar into its declared JSON-schema type or raise ToolArgumentError.

    Integers accept digit strings ("20"); strings accept numbers. Arrays are
    handled by the caller.
    """
    if declared == "integer":
        if isinstance(value, bool):
            raise ToolArgumentError(tool, key, f"{value!r} is not an integer")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        raise ToolArgumentError(tool, key, f"{value!r} is not an integer")
    if declared == "string":
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise ToolArgumentError(tool, key, f"{value!r} is not a string")
    if declared == "array" and isinstance(value, dict):
        raise ToolArgumentError(tool, key, f"{value!r} is not an array")
    return value


def validate_tool_arguments(
    tool: dict[str, Any], args: dict[str, Any]
) -> dict[str, Any]:
    """Check LLM arguments against the tool schema and return the cleaned mapping.

    Raises ToolArgumentError when a required key is missing, a value is not
    of its declared `type`, falls outside an `enum` / `items.enum`, or an
    array exceeds `maxItems`.
    Keys the schema does not declare are dropped.
    """
    name = tool["name"]
    schema = tool["parameters"]
    properties: dict[str, Any] = schema.get("properties", {})

    for key in schema.get("required", []):
        if key not in args:
            raise ToolArgumentError(name, key, "required argument is missing")

    cleaned: dict[str, Any] = {}
    for key, value in args.items():
        prop = properties.get(key)
        if prop is None:
            logger.warning("Dropping undeclared argument %s.%s=%r", name, key, value)
            continue

        value = _coerce_type(name, key, prop.get("type"), value)

        if "enum" in prop and value not in prop["enum"]:
            raise ToolArgumentError(name, key, f"{value!r} is not one of {prop['enum']}")

        if prop.get("type") == "array":
            values = value if isinstance(value, list) else [value]
            allowed = prop.get("items", {}).get("enum")
            if allowed is not None:
                invalid = [v for v in values if v not in allowed]
                if invalid:
                    raise ToolArgumentError(
                        name, key, f"{invalid} not in allowed values {allowed}"
                    )
            max_items = prop.get("maxItems")
            if max_items is not None and len(values) > max_items:
                raise ToolArgumentError(
                    name, key, f"{len(values)} items exceeds maxItems={max_items}"
                )
            value = values

        cleaned[key] = value

    return cleaned
