"""Layered settings: packaged defaults, user file, --config file, CLI overrides."""

from __future__ import annotations

import json
import logging
import os
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from budspair.core.errors import SettingsError
from budspair.core.model import Settings

LOGGER = logging.getLogger(__name__)
LOG_FILE_ENV = "BUDSPAIR_LOG_FILE"


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise SettingsError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _load_schema_validator() -> Any:
    schema_text = resources.files("budspair.schemas").joinpath("settings.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _user_settings_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "budspair/settings.yaml"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"Could not read settings file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], source: str) -> None:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise SettingsError(f"Invalid settings in {source}{where}: {exc.message}") from exc


def _expand_path(value: str | None) -> Path | None:
    if not value:
        return None
    return Path(value).expanduser()


def _build_settings(doc: dict[str, Any]) -> Settings:
    return Settings(
        conf_path=Path(doc["conf_path"]),
        backup_suffix=doc["backup_suffix"],
        controller_mode=doc["controller_mode"],
        service_name=doc["service_name"],
        device_name=doc["device_name"],
        scan_timeout=int(doc["scan_timeout"]),
        max_retries=int(doc["max_retries"]),
        backoff_delay=float(doc["backoff_delay"]),
        adapter_poll_attempts=int(doc["adapter_poll_attempts"]),
        adapter_poll_interval=float(doc["adapter_poll_interval"]),
        wait_for_services=bool(doc["wait_for_services"]),
        services_poll_attempts=int(doc["services_poll_attempts"]),
        log_file=_expand_path(doc.get("log_file")),
        verbose=bool(doc["verbose"]),
    )


def load_settings(
    config_file: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Merge every settings layer and return a validated `Settings`.

    `config_file` must exist when given. `overrides` entries that are None are
    ignored so CLI options left unset do not mask file values.
    """
    defaults_path = resources.files("budspair.defaults").joinpath("settings.yaml")
    merged = _read_yaml(defaults_path)
    _validate(merged, "packaged defaults")

    user_path = _user_settings_path()
    if user_path.is_file():
        user_doc = _read_yaml(user_path)
        _validate(user_doc, str(user_path))
        merged.update(user_doc)
        LOGGER.debug("Loaded settings from %s", user_path)

    if config_file is not None:
        if not config_file.is_file():
            raise SettingsError(f"Config file not found: {config_file}")
        file_doc = _read_yaml(config_file)
        _validate(file_doc, str(config_file))
        merged.update(file_doc)
        LOGGER.debug("Loaded settings from %s", config_file)

    env_log_file = os.environ.get(LOG_FILE_ENV)
    if env_log_file:
        merged["log_file"] = env_log_file

    cli_doc = {key: value for key, value in (overrides or {}).items() if value is not None}
    if cli_doc:
        _validate(cli_doc, "command-line options")
        merged.update(cli_doc)

    return _build_settings(merged)
