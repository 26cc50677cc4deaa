"""
Output Normalization - ParseResult to the JSON-ready contract.

Converts the internal dataclasses to the PARSE_OUTPUT_SCHEMA format
(camelCase keys, ISO strings for date/time values).
"""
from taskparse.models.tag import ParseResult


def build_parse_output(result: ParseResult, text: str) -> dict:
    """
    Build the output dict for one parse.

    Args:
        result: Result returned by SmartParser.parse().
        text: The text that was parsed.

    Returns:
        Dict conforming to PARSE_OUTPUT_SCHEMA.
    """
    return {
        "text": text,
        "cleanText": result.clean_text,
        "confidence": result.confidence,
        "hasConflicts": result.has_conflicts,
        "tags": [t.to_dict() for t in result.tags],
        "conflicts": [c.to_dict() for c in result.conflicts],
    }
