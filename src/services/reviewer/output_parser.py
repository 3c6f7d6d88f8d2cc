"""Recover findings from loosely framed review tool output.

Extraction is a chain of stages, each a pure function over text that either
returns a list of raw items or raises ``MalformedOutputError``:

1. ``from_wrapped_document`` - the output is a JSON object whose textual
   payload field (``response`` for the gemini CLI) holds the findings array,
   usually surrounded by prose or a Markdown fence.
2. ``from_direct_array`` - the output is itself a JSON array.
3. ``from_embedded_array`` - the first parseable ``[...]`` in the raw text.

``parse_findings`` runs the chain, validates every item and never raises.
"""

import json
from typing import Any, Callable

from pydantic import ValidationError

from src.core.exceptions import MalformedOutputError
from src.core.logging import get_logger
from src.services.reviewer.schemas import Finding

logger = get_logger("reviewer.output_parser")

PAYLOAD_FIELDS = ("response", "result", "text", "output")

_decoder = json.JSONDecoder()


def find_first_array(text: str) -> list[Any]:
    """Return the first JSON array of objects embedded in ``text``.

    Arrays holding only scalars (``[1, 2]`` in prose) are skipped; an empty
    array counts.
    """
    start = text.find("[")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, list) and (not value or any(isinstance(item, dict) for item in value)):
            return value
        start = text.find("[", start + 1)
    raise MalformedOutputError("no JSON array in text")


def _load(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedOutputError(f"output is not JSON: {e}") from e


def from_wrapped_document(raw: str) -> list[Any]:
    document = _load(raw)
    if not isinstance(document, dict):
        raise MalformedOutputError("output is not a JSON object")

    for field in PAYLOAD_FIELDS:
        payload = document.get(field)
        if isinstance(payload, list):
            return payload
        if isinstance(payload, str) and payload.strip():
            return find_first_array(payload)
    raise MalformedOutputError("no textual findings payload in document")


def from_direct_array(raw: str) -> list[Any]:
    document = _load(raw)
    if not isinstance(document, list):
        raise MalformedOutputError("output is not a JSON array")
    return document


def from_embedded_array(raw: str) -> list[Any]:
    return find_first_array(raw)


EXTRACTION_STAGES: tuple[Callable[[str], list[Any]], ...] = (
    from_wrapped_document,
    from_direct_array,
    from_embedded_array,
)


def extract_raw_findings(raw: str) -> list[Any]:
    """Run the extraction chain and return the first stage's result.

    Raises:
        MalformedOutputError: If no stage succeeds.
    """
    for stage in EXTRACTION_STAGES:
        try:
            items = stage(raw)
        except MalformedOutputError as e:
            logger.debug(f"{stage.__name__}: {e}")
            continue
        logger.debug(f"{stage.__name__} extracted {len(items)} items")
        return items
    raise MalformedOutputError("no extraction stage succeeded")


def validate_findings(items: list[Any]) -> list[Finding]:
    """Validate raw items, dropping the ones that do not fit the schema."""
    findings = []
    for index, item in enumerate(items):
        try:
            findings.append(Finding.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Dropping finding #{index}: {e.error_count()} validation errors")
            logger.debug(str(e))
    return findings


def parse_findings(raw: str) -> list[Finding]:
    """Extract validated findings from tool output; never raises."""
    if not raw or not raw.strip():
        logger.warning("Review output is empty")
        return []

    try:
        items = extract_raw_findings(raw)
    except MalformedOutputError:
        logger.warning(f"No valid JSON found in output ({len(raw)} characters)")
        return []

    findings = validate_findings(items)
    logger.info(f"Parsed {len(findings)} of {len(items)} findings")
    return findings
