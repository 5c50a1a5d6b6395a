"""Read resource models from a directory of JSON and YAML files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from apipls.errors import ConfigurationError

logger = logging.getLogger(__name__)

_SUFFIXES = (".json", ".yml", ".yaml")


def _parse(path: Path) -> Any:
    raw = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return json.loads(raw)
    return yaml.safe_load(raw)


def load_resource_models(directory: str | Path) -> list[dict[str, Any]]:
    """Load every resource model found in ``directory``.

    Files are read in name order. A file may hold one model or a list of
    models.

    Raises:
        ConfigurationError: If the directory is missing, a file cannot be
            parsed, or an entry is not a mapping.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ConfigurationError(f"Resources directory not found: {directory}")

    models: list[dict[str, Any]] = []
    for path in sorted(directory.iterdir()):
        if path.suffix not in _SUFFIXES or not path.is_file():
            continue
        try:
            content = _parse(path)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Could not parse resource model {path.name}: {exc}") from exc

        entries = content if isinstance(content, list) else [content]
        for entry in entries:
            if not isinstance(entry, dict):
                raise ConfigurationError(f"Resource model in {path.name} is not a mapping.")
            models.append(entry)
        logger.debug("Loaded %d resource model(s) from %s", len(entries), path.name)

    return models
