"""Post-processing of AI responses: disclaimers and JSON payload extraction."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

MEDICAL_DISCLAIMER = (
    "This guidance is informational only and is not a medical diagnosis. "
    "Please consult a qualified healthcare professional."
)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class ResponseParseError(ValueError):
    """Raised when a response does not contain the expected JSON payload."""


def enforce_disclaimer(content: str, disclaimer: str = MEDICAL_DISCLAIMER) -> str:
    """Append ``disclaimer`` unless the content already carries one."""
    lowered = content.lower()
    if "not a medical diagnosis" in lowered or "not medical advice" in lowered:
        return content
    if disclaimer.lower() in lowered:
        return content
    return f"{content.rstrip()}\n\n_{disclaimer}_"


def extract_json(content: str) -> Any:
    """Parse a JSON payload from model output.

    Accepts bare JSON or JSON wrapped in a Markdown code fence.

    Raises:
        ResponseParseError: If no valid JSON can be parsed.
    """
    text = content.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        logger.debug("Unparseable JSON response: %.200s", content)
        raise ResponseParseError(f"Invalid JSON in model response: {exc}") from exc


def extract_json_list(content: str, required_keys: tuple[str, ...] = ()) -> list[dict[str, Any]]:
    """Parse a JSON array of objects, each containing ``required_keys``.

    Raises:
        ResponseParseError: If the payload is not a list of such objects.
    """
    parsed = extract_json(content)
    if not isinstance(parsed, list):
        raise ResponseParseError(f"Expected JSON array, got {type(parsed).__name__}")
    for index, item in enumerate(parsed):
        if not isinstance(item, dict):
            raise ResponseParseError(f"Item {index} is not an object")
        missing = [key for key in required_keys if key not in item]
        if missing:
            raise ResponseParseError(f"Item {index} is missing keys: {', '.join(missing)}")
    return parsed


def extract_json_object(content: str, required_keys: tuple[str, ...] = ()) -> dict[str, Any]:
    """Parse a single JSON object containing ``required_keys``.

    Raises:
        ResponseParseError: If the payload is not such an object.
    """
    parsed = extract_json(content)
    if not isinstance(parsed, dict):
        raise ResponseParseError(f"Expected JSON object, got {type(parsed).__name__}")
    missing = [key for key in required_keys if key not in parsed]
    if missing:
        raise ResponseParseError(f"Object is missing keys: {', '.join(missing)}")
    return parsed
