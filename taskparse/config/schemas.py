"""
JSON Schema for the serialized parse output handed to external consumers
(task creation flow, highlighting UI).
"""
from taskparse.config.constants import TAG_TYPES

_TAG_SCHEMA: dict = {
    "type": "object",
    "additionalProperties": False,
    "required": [
        "id", "type", "value", "displayText", "iconName", "color",
        "startIndex", "endIndex", "originalText", "confidence", "source",
    ],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"type": "string", "enum": TAG_TYPES},
        "value": {"type": "string", "minLength": 1},
        "displayText": {"type": "string", "minLength": 1},
        "iconName": {"type": "string"},
        "color": {"type": "string", "pattern": "^#[0-9a-fA-F]{6}$"},
        "startIndex": {"type": "integer", "minimum": 0},
        "endIndex": {"type": "integer", "minimum": 1},
        "originalText": {"type": "string", "minLength": 1},
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
        "source": {"type": "string", "minLength": 1},
    },
}

PARSE_OUTPUT_SCHEMA: dict = {
    "name": "task_parse_output_v1",
    "schema": {
        "type": "object",
        "additionalProperties": False,
        "required": ["text", "cleanText", "confidence", "hasConflicts", "tags", "conflicts"],
        "properties": {
            "text": {"type": "string"},
            "cleanText": {"type": "string"},
            "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
            "hasConflicts": {"type": "boolean"},
            "tags": {"type": "array", "items": _TAG_SCHEMA},
            "conflicts": {
                "type": "array",
                "items": {
                    "type": "object",
                    "additionalProperties": False,
                    "required": ["startIndex", "endIndex", "tags", "resolved"],
                    "properties": {
                        "startIndex": {"type": "integer", "minimum": 0},
                        "endIndex": {"type": "integer", "minimum": 1},
                        "tags": {"type": "array", "minItems": 2, "items": _TAG_SCHEMA},
                        "resolved": {"anyOf": [_TAG_SCHEMA, {"type": "null"}]},
                    },
                },
            },
        },
    },
}
