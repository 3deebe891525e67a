"""
Schema validation for payloads entering workboard.

Envelopes (the REST response or snapshot file as a whole) must match their
schema or the fetch fails. Individual tickets and roster entries are checked
one by one and bad ones are dropped, so one corrupt record never blanks the
board.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable

import jsonschema

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Schema validation failed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


# Cache loaded schemas
_schema_cache: dict[str, dict] = {}


def _get_schemas_dir() -> Path:
    """Get path to the bundled schemas directory."""
    return Path(__file__).parent.parent / "schemas"


def _load_schema(schema_name: str) -> dict:
    """Load schema by name, with caching."""
    if schema_name not in _schema_cache:
        schema_path = _get_schemas_dir() / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise ValidationError(schema_name, f"Schema file not found: {schema_path}")
        _schema_cache[schema_name] = json.loads(schema_path.read_text())
    return _schema_cache[schema_name]


def validate(data: Any, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Parsed JSON value to validate
        schema_name: Schema name (e.g., "ticket", "tickets_response")

    Raises:
        ValidationError: If validation fails
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        raise ValidationError(schema_name, e.message, path) from None


def valid_items(items: Iterable[Any], schema_name: str) -> list:
    """Return the items that match ``schema_name``, logging the rest."""
    kept = []
    for index, item in enumerate(items):
        try:
            validate(item, schema_name)
        except ValidationError as e:
            ident = None
            if isinstance(item, dict):
                ident = item.get("jobId") or item.get("_id") or item.get("name")
            logger.warning(f"[VALIDATE] Skipping {schema_name} #{index} ({ident or 'unknown'}): {e}")
            continue
        kept.append(item)
    return kept
