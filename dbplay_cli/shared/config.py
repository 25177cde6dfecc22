"""Configuration loading utilities for the database playground."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from . import paths
from .exceptions import ConfigurationError

VALID_MODES = ("sql", "nosql", "cache")


@dataclass(frozen=True, slots=True)
class ServiceSettings:
    """Where the remote SQL service lives and how long to wait for it."""

    base_url: str
    health_path: str
    query_path: str
    timeout_seconds: float | None


@dataclass(frozen=True, slots=True)
class DispatchSettings:
    """Dispatcher behaviour."""

    simulate_latency: bool


@dataclass(frozen=True, slots=True)
class SessionSettings:
    """Initial session state."""

    default_mode: str


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Top-level application configuration."""

    source_path: Path
    service: ServiceSettings
    dispatch: DispatchSettings
    session: SessionSettings

    def with_service_url(self, base_url: str) -> AppConfig:
        """Return a copy pointing at a different query service."""
        return replace(self, service=replace(self.service, base_url=base_url.rstrip("/")))

    def without_latency(self) -> AppConfig:
        """Return a copy with the artificial local delay switched off."""
        return replace(self, dispatch=replace(self.dispatch, simulate_latency=False))


def _default_config() -> dict[str, Any]:
    return {
        "service": {
            "base_url": "http://localhost:8080",
            "health_path": "/",
            "query_path": "/api/query",
            "timeout_seconds": 10.0,
        },
        "dispatch": {
            "simulate_latency": True,
        },
        "session": {
            "default_mode": "sql",
        },
    }


ENV_OVERRIDE_SPEC: dict[str, tuple[str, type]] = {
    "service.base_url": ("DBPLAY_SERVICE_URL", str),
    "service.health_path": ("DBPLAY_SERVICE_HEALTH_PATH", str),
    "service.query_path": ("DBPLAY_SERVICE_QUERY_PATH", str),
    "service.timeout_seconds": ("DBPLAY_SERVICE_TIMEOUT", float),
    "dispatch.simulate_latency": ("DBPLAY_SIMULATE_LATENCY", bool),
    "session.default_mode": ("DBPLAY_DEFAULT_MODE", str),
}


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from defaults, YAML file, and env overrides."""
    env = dict(os.environ if env is None else env)
    resolved_config_path = _resolve_config_path(config_path, env)
    file_data = _load_yaml(resolved_config_path)
    merged: dict[str, Any] = _deep_merge(_default_config(), file_data)
    merged = _apply_env_overrides(merged, env)
    return _build_config(merged, resolved_config_path)


def _resolve_config_path(config_path: str | Path | None, env: Mapping[str, str]) -> Path:
    if config_path:
        return paths.resolve_path(config_path)
    return paths.default_config_path(env=env)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
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
    if expected_type is float:
        return float(cleaned)
    return cleaned


def _assign_nested(target: MutableMapping[str, Any], keys: list[str], value: Any) -> None:
    current = target
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], MutableMapping):
            current[key] = {}
        current = current[key]  # type: ignore[assignment]
    current[keys[-1]] = value


def _optional_timeout(raw: Any) -> float | None:
    if raw is None:
        return None
    timeout = float(raw)
    if timeout <= 0:
        raise ValueError("service.timeout_seconds must be positive or null")
    return timeout


def _build_config(data: Mapping[str, Any], source_path: Path) -> AppConfig:
    try:
        service_cfg = data["service"]
        service = ServiceSettings(
            base_url=str(service_cfg["base_url"]).rstrip("/"),
            health_path=str(service_cfg["health_path"]),
            query_path=str(service_cfg["query_path"]),
            timeout_seconds=_optional_timeout(service_cfg["timeout_seconds"]),
        )
        dispatch = DispatchSettings(
            simulate_latency=bool(data["dispatch"]["simulate_latency"]),
        )
        default_mode = str(data["session"]["default_mode"]).strip().lower()
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration structure: {exc}") from exc

    if default_mode not in VALID_MODES:
        raise ConfigurationError(
            f"session.default_mode must be one of {', '.join(VALID_MODES)}; got '{default_mode}'."
        )

    return AppConfig(
        source_path=source_path,
        service=service,
        dispatch=dispatch,
        session=SessionSettings(default_mode=default_mode),
    )
