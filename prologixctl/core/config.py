"""CLI settings loading and validation."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from prologixctl.core.errors import ConfigError
from prologixctl.core.protocol import BROADCAST_ADDRESS, PROLOGIX_PORT

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class Settings:
    discover_timeout_s: float = 0.5
    port: int = PROLOGIX_PORT
    broadcast_address: str = BROADCAST_ADDRESS
    output_format: str = "text"


def _load_schema_validator() -> Any:
    schema_text = resources.files("prologixctl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema, format_checker=validator_cls.FORMAT_CHECKER)


def config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "prologixctl/config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read settings file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping at root")
    return loaded


def load_settings(path: Path | None = None) -> Settings:
    """Load CLI defaults, falling back to built-in values when no file exists."""
    path = path or config_path()
    if not path.is_file():
        return Settings()

    doc = _read_yaml(path)
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        where = f" ({where})" if where else ""
        raise ConfigError(f"Schema validation failed for {path}{where}: {exc.message}") from exc

    LOGGER.debug("Loaded settings from %s", path)
    return Settings(
        discover_timeout_s=float(doc.get("discover_timeout_s", 0.5)),
        port=int(doc.get("port", PROLOGIX_PORT)),
        broadcast_address=doc.get("broadcast_address", BROADCAST_ADDRESS),
        output_format=doc.get("output_format", "text"),
    )
