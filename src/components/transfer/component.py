"""
Transfer component - export and import of a persisted option blob.

Export format: `{ <storage_key>: <value>, ... }` as UTF-8 JSON.
Import accepts the same shape. Anything that is not valid JSON or not an
object/array is rejected and leaves stored values untouched.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from src.components.settings import ImportRejected, OptionStorePort, option_name

logger = logging.getLogger(__name__)


def export_filename(option_group: str) -> str:
    return f"settings-{option_group}.json"


def export_settings(store: OptionStorePort, option_group: str) -> tuple[bytes, str]:
    """
    Serialize the stored values of an option group.

    Returns:
        Tuple of (utf-8 JSON body, download filename)
    """
    values = store.get(option_name(option_group)) or {}
    body = json.dumps(values, ensure_ascii=False).encode("utf-8")
    logger.info("Exported %d settings for %s", len(values), option_group)
    return body, export_filename(option_group)


def parse_import(raw: Any) -> dict[str, Any]:
    """
    Decode an import payload.

    JSON arrays are accepted and keyed by their index.
    Raises ImportRejected for anything else.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ImportRejected("Import payload is not UTF-8") from e
    if not isinstance(raw, str):
        raise ImportRejected("Import payload must be a JSON string")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ImportRejected(f"Import payload is not valid JSON: {e.msg}") from e

    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        return {str(i): value for i, value in enumerate(data)}
    raise ImportRejected("Import payload must be a JSON object or array")


def import_settings(store: OptionStorePort, option_group: str, raw: Any) -> dict[str, Any]:
    """Replace the stored values of an option group with an imported blob."""
    try:
        values = parse_import(raw)
    except ImportRejected:
        logger.warning("Rejected settings import for %s", option_group)
        raise

    saved = store.save(option_name(option_group), values)
    logger.info("Imported %d settings for %s", len(saved), option_group)
    return saved
