"""
Validation - checks a built parse output before it leaves the engine.

Implements:
- Schema conformance (jsonschema)
- Span checks (bounds, originalText equals the slice)
- Non-overlap of retained tags
- Clean text length

Schema problems stop the check early; span problems are all collected.
"""
import logging
from typing import List

from jsonschema import ValidationError, validate

from taskparse.config.schemas import PARSE_OUTPUT_SCHEMA
from taskparse.models.validation import ValidationResult

logger = logging.getLogger(__name__)

LOW_CONFIDENCE_WARNING: float = 0.3


def validate_parse_output(output: dict) -> ValidationResult:
    """
    Multi-stage validation of a parse output dict.

    Stages:
        1. Schema conformance
        2. Tag spans against ``text``
        3. Retained tags do not overlap
        4. cleanText is no longer than text
        5. Quality warnings (low-confidence tags)

    Args:
        output: Dict produced by build_parse_output().

    Returns:
        ValidationResult with valid flag, errors, warnings and the output.
    """
    errors: List[str] = []
    warnings: List[str] = []

    # ------------------------------------------------------------------
    # Stage 1: Schema validation
    # ------------------------------------------------------------------
    try:
        validate(instance=output, schema=PARSE_OUTPUT_SCHEMA["schema"])
    except ValidationError as e:
        errors.append(f"Schema violation: {e.message}")
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    text = output["text"]
    tags = output["tags"]

    # ------------------------------------------------------------------
    # Stage 2: Spans
    # ------------------------------------------------------------------
    for tag in tags:
        errors.extend(_check_span(tag, text))

    for conflict in output["conflicts"]:
        for tag in conflict["tags"]:
            errors.extend(_check_span(tag, text))

    # ------------------------------------------------------------------
    # Stage 3: Non-overlap
    # ------------------------------------------------------------------
    ordered = sorted(tags, key=lambda t: (t["startIndex"], t["endIndex"]))
    for prev, cur in zip(ordered, ordered[1:]):
        if cur["startIndex"] < prev["endIndex"]:
            errors.append(
                f"Overlapping tags: {prev['type']} [{prev['startIndex']},{prev['endIndex']}] "
                f"and {cur['type']} [{cur['startIndex']},{cur['endIndex']}]"
            )

    # ------------------------------------------------------------------
    # Stage 4: Clean text
    # ------------------------------------------------------------------
    if len(output["cleanText"]) > len(text):
        errors.append(
            f"cleanText longer than text ({len(output['cleanText'])} > {len(text)})"
        )

    # ------------------------------------------------------------------
    # Stage 5: Quality checks
    # ------------------------------------------------------------------
    for tag in tags:
        if tag["confidence"] < LOW_CONFIDENCE_WARNING:
            warnings.append(
                f"Very low confidence for {tag['type']} '{tag['originalText']}': {tag['confidence']}"
            )

    if errors:
        logger.warning("Parse output failed validation: %s", errors)

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings, data=output)


def _check_span(tag: dict, text: str) -> List[str]:
    start, end = tag["startIndex"], tag["endIndex"]
    if not 0 <= start < end <= len(text):
        return [f"Span out of bounds: [{start},{end}] for text length {len(text)}"]

    extracted = text[start:end]
    if extracted != tag["originalText"]:
        return [
            f"Span mismatch: span=[{start},{end}] extracts '{extracted}' "
            f"but originalText is '{tag['originalText']}'"
        ]
    return []
