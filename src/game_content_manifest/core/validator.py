"""JSON Schema validation for persisted content manifests.

This module loads the formal JSON Schema shipped with the package and
validates manifest documents before they are turned into model objects.
Identifier grammar checks happen afterwards, in serialization.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import ValidationError

from .errors import ManifestValidationError

# game_content_manifest/core/validator.py -> game_content_manifest/schemas/
SCHEMA_PATH = Path(__file__).parent.parent / "schemas" / "content_manifest.schema.json"


@lru_cache(maxsize=1)
def load_schema() -> dict[str, Any]:
    """Load the JSON schema from disk.

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    if not SCHEMA_PATH.exists():
        raise FileNotFoundError(f"Schema file not found: {SCHEMA_PATH}")

    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def validate_manifest_document(document: Any) -> None:
    """Validate a manifest document against the JSON Schema.

    Args:
        document: The decoded manifest (usually a dict from json.load)

    Raises:
        ManifestValidationError: If the document doesn't conform to the schema
        FileNotFoundError: If schema file is missing
    """
    try:
        jsonschema.validate(instance=document, schema=load_schema())
    except ValidationError as e:
        error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
        raise ManifestValidationError(
            f"Validation error at {error_path}: {e.message}", path=error_path
        ) from e


def validate_manifest_with_error_details(document: Any) -> tuple[bool, str | None]:
    """Validate a manifest document and return detailed error information.

    This is a convenience wrapper that catches validation errors and
    returns user-friendly error messages.

    Args:
        document: The manifest dictionary to validate

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_manifest_document(document)
        return True, None
    except ManifestValidationError as e:
        error_msg = str(e)

        # Add context if available
        cause = e.__cause__
        if isinstance(cause, ValidationError) and cause.instance:
            error_msg += f"\nInvalid value: {cause.instance}"

        return False, error_msg
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
