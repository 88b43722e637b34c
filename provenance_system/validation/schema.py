"""Structural validation of the raw provider payload.

Everything the provider returns is untrusted. This is the only place that
decides whether a payload is usable at all; downstream stages assume the
shape checked here and only deal with referential problems.
"""

import json
import logging
import re
from typing import Any, Union

from pydantic import ValidationError

from ..exceptions import SchemaError
from ..models import AnalysisPayload

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")


def extract_json_text(content: str) -> str:
    """Return the body of a ```json fenced block, or the content unchanged."""
    match = _FENCED_JSON.search(content or "")
    if match:
        return match.group(1)
    return content


def _field_path(loc) -> str:
    return ".".join(str(part) for part in loc) or "$"


def validate_payload(raw: Union[bytes, str, dict]) -> AnalysisPayload:
    """
    Parse and validate a raw analysis payload.

    Args:
        raw: JSON bytes/text, or an already-decoded dict

    Returns:
        AnalysisPayload with every required field present and in range

    Raises:
        SchemaError: on the first structural violation
    """
    data: Any = raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SchemaError("$", f"payload is not valid UTF-8: {e}") from e
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SchemaError("$", f"payload is not valid JSON: {e.msg} at line {e.lineno}") from e
        except RecursionError as e:
            raise SchemaError("$", "payload is nested too deeply to decode") from e

    if not isinstance(data, dict):
        raise SchemaError("$", f"expected a JSON object, got {type(data).__name__}")

    try:
        payload = AnalysisPayload.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = _field_path(first.get("loc", ()))
        logger.warning(f"Payload rejected: {field}: {first.get('msg')} ({e.error_count()} errors total)")
        raise SchemaError(field, first.get("msg", "invalid value")) from e

    logger.debug(
        f"Payload accepted: {len(payload.claims)} claims, {len(payload.sources)} sources, "
        f"{len(payload.citations)} citations, {len(payload.edges)} edges"
    )
    return payload
