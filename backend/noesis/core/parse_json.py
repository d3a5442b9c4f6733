"""Provider Text Parsing: strip an optional code fence, then decode exactly one JSON value.

Invariants:
    - A single surrounding ``` fence (with or without a language tag) is removed
    - Invalid JSON raises ResponseParseError; there is no fallback and no retry
"""

import json
import re
from typing import Any

from noesis.core.errors import ErrorContext, ResponseParseError

_FENCE_RE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Return the fenced body when the whole text is one fenced block."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match and match.group(2):
        return match.group(2).strip()
    return stripped


def parse_json_payload(text: str) -> Any:
    """Decode provider text into a JSON value."""
    body = strip_code_fence(text)
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise ResponseParseError(
            f"Provider response is not valid JSON: {e}",
            context=ErrorContext(debug_info={"raw_text": text[:500]}),
        ) from e
