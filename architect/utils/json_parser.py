import json
from typing import Any, Dict

from architect.core.exceptions import ParseError


def parse_json_object(text: str) -> Dict[str, Any]:
    """Parse raw LLM output as a single strict JSON object.

    No fence stripping or repair is attempted: text that is not a JSON object
    as-is raises ``ParseError`` so the caller can ask again.
    """
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Empty response, expected a JSON object", raw=text or "")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}", raw=text) from exc

    if not isinstance(payload, dict):
        raise ParseError(
            f"Expected a JSON object, got {type(payload).__name__}", raw=text
        )
    return payload
