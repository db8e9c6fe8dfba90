"""Save and load experiment configurations.

Only :class:`ExperimentConfig` is persisted, never iteration progress: a
loaded experiment must be initialized again and always starts from its first
cell. Files ending in ``.json`` are written as JSON, everything else as YAML.
Documents carry a ``schema_version``; versions newer than
:data:`SCHEMA_VERSION` are rejected.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from benchsweep.errors import ConfigurationError, SerializationError
from benchsweep.experiments.config import ExperimentConfig

logger = logging.getLogger("benchsweep.persistence")

SCHEMA_VERSION = 1
JSON_SUFFIXES = (".json",)


def config_to_document(config: ExperimentConfig) -> dict[str, Any]:
    return {"schema_version": SCHEMA_VERSION, "experiment": config.to_dict()}


def config_from_document(document: Any) -> ExperimentConfig:
    if not isinstance(document, dict):
        raise SerializationError("experiment document must be a mapping")
    version = document.get("schema_version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise SerializationError(f"missing or invalid schema_version: {version!r}")
    if version > SCHEMA_VERSION:
        raise SerializationError(
            f"schema_version {version} is newer than supported ({SCHEMA_VERSION})"
        )
    if "experiment" not in document:
        raise SerializationError("document has no 'experiment' section")
    try:
        return ExperimentConfig.from_dict(document["experiment"])
    except ConfigurationError as e:
        raise SerializationError(f"invalid experiment section: {e}") from e


def dump_config(config: ExperimentConfig, fmt: str = "yaml") -> str:
    document = config_to_document(config)
    try:
        if fmt == "json":
            return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
        if fmt == "yaml":
            return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    except (TypeError, ValueError, yaml.YAMLError) as e:
        raise SerializationError(f"cannot serialize experiment: {e}") from e
    raise ValueError(f"Unknown format: {fmt}")


def parse_config(text: str, fmt: str = "yaml") -> ExperimentConfig:
    try:
        if fmt == "json":
            document = json.loads(text)
        elif fmt == "yaml":
            document = yaml.safe_load(text)
        else:
            raise ValueError(f"Unknown format: {fmt}")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SerializationError(f"malformed {fmt} document: {e}") from e
    return config_from_document(document)


def _format_for(path: Path) -> str:
    return "json" if path.suffix.lower() in JSON_SUFFIXES else "yaml"


def save_config(config: ExperimentConfig, path: str | Path) -> Path:
    """Write ``config`` to ``path`` (parent directories are created)."""
    path = Path(path)
    text = dump_config(config, _format_for(path))
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise SerializationError(f"cannot write {path}: {e}") from e
    logger.info("Saved experiment configuration to %s", path)
    return path


def load_config(path: str | Path) -> ExperimentConfig:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SerializationError(f"cannot read {path}: {e}") from e
    config = parse_config(text, _format_for(path))
    logger.info("Loaded experiment configuration from %s", path)
    return config
