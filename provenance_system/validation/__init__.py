"""Trust-boundary checks: payload shape and referential integrity."""

from provenance_system.validation.schema import validate_payload, extract_json_text
from provenance_system.validation.integrity import check_integrity

__all__ = ["validate_payload", "extract_json_text", "check_integrity"]
