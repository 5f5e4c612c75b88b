from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from zeroed.scheduling.models import SchedulingPreferences

CONFIG_DIR_NAME = ".zeroed"
CONFIG_FILE_NAME = "config.json"


class ConfigError(RuntimeError):
    """Raised when config cannot be loaded or parsed."""


class ConfigMissingError(ConfigError):
    """Raised when required config is missing."""


@dataclass(frozen=True)
class AppConfig:
    preferences: SchedulingPreferences = field(default_factory=SchedulingPreferences)
    timezone: str | None = None


def config_path(base_dir: Path | None = None) -> Path:
    base = base_dir or Path.cwd()
    return base / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def config_exists(base_dir: Path | None = None) -> bool:
    return config_path(base_dir).exists()


def ensure_config_dir(base_dir: Path | None = None) -> Path:
    path = config_path(base_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def load_config(base_dir: Path | None = None) -> AppConfig:
    path = config_path(base_dir)
    if not path.exists():
        raise ConfigMissingError("Config not found. Run `zeroed init` to set up your preferences.")

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError("Config file is not valid JSON") from exc

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object")
    return _parse_config(data)


def load_config_or_default(base_dir: Path | None = None) -> AppConfig:
    try:
        return load_config(base_dir)
    except ConfigMissingError:
        return AppConfig()


def write_config(config: AppConfig, base_dir: Path | None = None) -> None:
    path = ensure_config_dir(base_dir)
    payload: dict[str, Any] = {"preferences": config.preferences.model_dump()}
    if config.timezone:
        payload["timezone"] = config.timezone
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False))


def update_config(update: dict[str, Any], base_dir: Path | None = None) -> AppConfig:
    path = config_path(base_dir)
    current: dict[str, Any] = {}
    if path.exists():
        try:
            current = json.loads(path.read_text())
        except json.JSONDecodeError:
            current = {}
    if not isinstance(current, dict):
        current = {}

    merged = _merge_dicts(current, update)
    config = _parse_config(merged)
    write_config(config, base_dir)
    return config


def _parse_config(data: dict[str, Any]) -> AppConfig:
    return AppConfig(
        preferences=_parse_preferences(data.get("preferences")),
        timezone=_optional_str(data, "timezone"),
    )


def _parse_preferences(data: Any) -> SchedulingPreferences:
    if data is None:
        return SchedulingPreferences()
    if not isinstance(data, dict):
        raise ConfigError("Preferences payload is invalid")
    try:
        preferences = SchedulingPreferences.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid preferences: {exc}") from exc
    if preferences.work_hours_start >= preferences.work_hours_end:
        raise ConfigError("`work_hours_start` must be before `work_hours_end`.")
    return preferences


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _merge_dicts(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
