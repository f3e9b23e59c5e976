"""Configuration loading and validation for lowpanctl."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from lowpanctl.core.errors import ConfigError

DEFAULT_SOCKET_PATH = "/run/lowpand/lowpand.sock"
DEFAULT_REQUEST_TIMEOUT_S = 5.0
SOCKET_ENV = "LOWPANCTL_SOCKET"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


# No config value is boolean: YAML 1.1 words like "on" and "no" stay strings.
UniqueKeyLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


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
class Config:
    socket_path: str = DEFAULT_SOCKET_PATH
    interface: str | None = None
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S


def _load_schema_validator() -> Any:
    schema_text = resources.files("lowpanctl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def default_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "lowpanctl/config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at root")
    return loaded


def _build_config(doc: dict[str, Any], source: Path) -> Config:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    return Config(
        socket_path=doc.get("socket_path", DEFAULT_SOCKET_PATH),
        interface=doc.get("interface"),
        request_timeout_s=float(doc.get("request_timeout_s", DEFAULT_REQUEST_TIMEOUT_S)),
    )


def load_config(path: Path | None = None) -> Config:
    """Load configuration from ``path`` or the default XDG location.

    A missing default file yields the built-in defaults; a missing explicit
    file is an error. ``LOWPANCTL_SOCKET`` overrides ``socket_path``.
    """
    source = path or default_config_path()
    if path is None and not source.exists():
        config = Config()
    else:
        config = _build_config(_read_yaml(source), source)
        LOGGER.debug("Loaded configuration from %s", source)

    socket_override = os.environ.get(SOCKET_ENV)
    if socket_override:
        config = replace(config, socket_path=socket_override)
    return config
