"""Schema migrations for config.toml.

Older releases wrote two other layouts:

``FLAT``
    ``default_prompt`` and ``gemini_api_key`` at the top level.
``ENVIRONMENTS``
    ``gemini_api.environment`` naming an entry of ``gemini_api.environments``,
    each entry either a variable name or a table with ``api_key_env_var``.

``migrate_document`` rewrites a parsed document in place until it reaches the
current layout, then backfills missing fields. Each step is recorded by name so
the caller knows whether the file must be rewritten.
"""

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from mawaku.core.shapes import DEFAULT_API_KEY_ENV_VAR

logger = logging.getLogger(__name__)

Document = dict[str, Any]

OBSOLETE_TOP_LEVEL_KEYS = ("default_prompt", "gemini_api_key")


class SchemaVersion(str, Enum):
    FLAT = "flat"
    ENVIRONMENTS = "environments"
    CURRENT = "current"


def detect_schema_version(document: Document) -> SchemaVersion:
    if any(key in document for key in OBSOLETE_TOP_LEVEL_KEYS):
        return SchemaVersion.FLAT

    gemini_api = document.get("gemini_api")
    if isinstance(gemini_api, dict) and (
        "environment" in gemini_api or "environments" in gemini_api
    ):
        return SchemaVersion.ENVIRONMENTS

    return SchemaVersion.CURRENT


def _gemini_table(document: Document) -> dict[str, Any]:
    table = document.get("gemini_api")
    if not isinstance(table, dict):
        table = {}
        document["gemini_api"] = table
    return table


def _migrate_flat(document: Document) -> None:
    for key in OBSOLETE_TOP_LEVEL_KEYS:
        document.pop(key, None)


def _resolve_environment_entry(entry: Any) -> str | None:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        value = entry.get("api_key_env_var")
        if isinstance(value, str):
            return value
    return None


def _migrate_environments(document: Document) -> None:
    table = _gemini_table(document)
    selected = table.pop("environment", None)
    environments = table.pop("environments", None)

    current = table.get("api_key_env_var")
    if isinstance(current, str) and current.strip():
        return

    if isinstance(environments, dict) and isinstance(selected, str):
        resolved = _resolve_environment_entry(environments.get(selected))
        if resolved and resolved.strip():
            table["api_key_env_var"] = resolved.strip()


_LEGACY_TRANSFORMS: dict[SchemaVersion, Callable[[Document], None]] = {
    SchemaVersion.FLAT: _migrate_flat,
    SchemaVersion.ENVIRONMENTS: _migrate_environments,
}


def _backfill_api_key_env_var(document: Document) -> bool:
    table = _gemini_table(document)
    value = table.get("api_key_env_var")
    if isinstance(value, str) and value.strip():
        return False
    table["api_key_env_var"] = DEFAULT_API_KEY_ENV_VAR
    return True


def _backfill_image_output_dir(document: Document, config_dir: Path) -> bool:
    value = document.get("image_output_dir")
    if isinstance(value, str) and value.strip():
        return False
    document["image_output_dir"] = str(config_dir)
    return True


def migrate_document(document: Document, config_dir: Path) -> list[str]:
    """Bring a parsed config document up to the current layout.

    Args:
        document: Parsed TOML, modified in place.
        config_dir: Directory holding the config file, used as the default
            image output directory.

    Returns:
        Names of the steps that changed the document, in application order.
    """
    applied: list[str] = []

    version = detect_schema_version(document)
    while version is not SchemaVersion.CURRENT:
        _LEGACY_TRANSFORMS[version](document)
        applied.append(f"from_{version.value}")
        version = detect_schema_version(document)

    if _backfill_api_key_env_var(document):
        applied.append("backfill_api_key_env_var")
    if _backfill_image_output_dir(document, config_dir):
        applied.append("backfill_image_output_dir")

    if applied:
        logger.info(f"Applied config migrations: {', '.join(applied)}")
    return applied
