"""Configuration loading utilities for the database console."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from . import paths
from .exceptions import ConfigurationError

DEFAULT_API_URL = "http://localhost:3000/api"
DEFAULT_PAGE_SIZE = 25
DEFAULT_POLL_INTERVAL = 5.0


@dataclass(frozen=True, slots=True)
class ApiSettings:
    """Backend API connection settings."""

    base_url: str
    timeout: float | None  # None disables request timeouts


@dataclass(frozen=True, slots=True)
class BrowserSettings:
    """Table browsing defaults."""

    page_size: int


@dataclass(frozen=True, slots=True)
class MonitorSettings:
    """Connectivity monitor configuration."""

    enabled: bool
    poll_interval: float


@dataclass(frozen=True, slots=True)
class ExportSettings:
    """CSV export configuration."""

    directory: Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Top-level application configuration."""

    source_path: Path
    api: ApiSettings
    browser: BrowserSettings
    monitor: MonitorSettings
    export: ExportSettings

    def with_api_url(self, base_url: str) -> AppConfig:
        """Return a copy pointed at a different backend."""
        return replace(self, api=replace(self.api, base_url=base_url))

    def with_export_dir(self, directory: str | Path) -> AppConfig:
        """Return a copy writing exports to ``directory``."""
        resolved = paths.resolve_path(directory)
        return replace(self, export=replace(self.export, directory=resolved))


def _default_config(env: Mapping[str, str]) -> dict[str, Any]:
    return {
        "api": {"base_url": DEFAULT_API_URL, "timeout": None},
        "browser": {"page_size": DEFAULT_PAGE_SIZE},
        "monitor": {"enabled": True, "poll_interval": DEFAULT_POLL_INTERVAL},
        "export": {"directory": str(paths.default_export_dir(env=env))},
    }


ENV_OVERRIDE_SPEC: dict[str, tuple[str, type]] = {
    "api.base_url": ("DBCONSOLE_API_URL", str),
    "api.timeout": ("DBCONSOLE_API_TIMEOUT", float),
    "browser.page_size": ("DBCONSOLE_PAGE_SIZE", int),
    "monitor.enabled": ("DBCONSOLE_MONITOR_ENABLED", bool),
    "monitor.poll_interval": ("DBCONSOLE_POLL_INTERVAL", float),
    "export.directory": (paths.EXPORT_DIR_ENV, str),
}


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from defaults, YAML file, and env overrides."""
    env = dict(os.environ if env is None else env)
    resolved_config_path = _resolve_config_path(config_path, env)
    file_data = _load_yaml(resolved_config_path)
    defaults = _default_config(env)
    merged: dict[str, Any] = _deep_merge(defaults, file_data)
    merged = _apply_env_overrides(merged, env)
    return _build_config(merged, resolved_config_path)


def _resolve_config_path(
    config_path: str | Path | None, env: Mapping[str, str]
) -> Path:
    if config_path:
        return paths.resolve_path(config_path)
    return paths.default_config_path(env=env)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Config file at {path} is not valid YAML: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigurationError(f"Config file at {path} must define a mapping root object.")
        return dict(data)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    config_copy = _deep_merge(config, {})
    for dotted_key, (env_key, expected_type) in ENV_OVERRIDE_SPEC.items():
        if env_key not in env:
            continue
        raw_value = env[env_key]
        try:
            value = _coerce_env_value(raw_value, expected_type)
        except ValueError as exc:
            raise ConfigurationError(
                f"Environment override {env_key} has invalid value '{raw_value}': {exc}"
            ) from exc
        _assign_nested(config_copy, dotted_key.split("."), value)
    return config_copy


def _coerce_env_value(raw: str, expected_type: type) -> Any:
    cleaned = raw.strip()
    if expected_type is bool:
        lowered = cleaned.lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError("expected boolean (true/false)")
    if expected_type is int:
        return int(cleaned)
    if expected_type is float:
        if cleaned.lower() in {"", "none", "null"}:
            return None
        return float(cleaned)
    return cleaned


def _assign_nested(target: MutableMapping[str, Any], keys: list[str], value: Any) -> None:
    current = target
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], MutableMapping):
            current[key] = {}
        current = current[key]  # type: ignore[assignment]
    current[keys[-1]] = value


def _build_config(data: Mapping[str, Any], source_path: Path) -> AppConfig:
    try:
        api_cfg = data["api"]
        raw_timeout = api_cfg.get("timeout")
        api = ApiSettings(
            base_url=str(api_cfg["base_url"]).rstrip("/"),
            timeout=None if raw_timeout is None else float(raw_timeout),
        )
        browser = BrowserSettings(page_size=int(data["browser"]["page_size"]))
        monitor = MonitorSettings(
            enabled=bool(data["monitor"]["enabled"]),
            poll_interval=float(data["monitor"]["poll_interval"]),
        )
        export = ExportSettings(directory=paths.resolve_path(str(data["export"]["directory"])))
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ConfigurationError(f"Invalid configuration structure: {exc}") from exc

    if not api.base_url:
        raise ConfigurationError("api.base_url must not be empty.")
    if api.timeout is not None and api.timeout <= 0:
        raise ConfigurationError("api.timeout must be positive or null.")
    if browser.page_size < 1:
        raise ConfigurationError("browser.page_size must be a positive integer.")
    if monitor.poll_interval <= 0:
        raise ConfigurationError("monitor.poll_interval must be positive.")

    return AppConfig(
        source_path=source_path,
        api=api,
        browser=browser,
        monitor=monitor,
        export=export,
    )
