"""Shared configuration loader for tempo-tx."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml
from dotenv import dotenv_values


class ConfigurationError(RuntimeError):
    """Raised when configuration is invalid."""


DEFAULT_CONFIG_PATH = Path.home() / ".tempo-tx.yaml"
DEFAULT_ENV_FILE = Path(".env")
DEFAULT_RPC_URL = "https://rpc.testnet.tempo.xyz"
DEFAULT_TIMEOUT_SECONDS = 30.0
_CONFIG_PATH_OVERRIDE: Path | None = None


@dataclass
class RPCConfig:
    """Connection details for the chain's JSON-RPC endpoint."""

    url: str = DEFAULT_RPC_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def set_default_config_path(path: str | Path | None) -> None:
    """Remember a user-supplied config path for future loads."""

    global _CONFIG_PATH_OVERRIDE
    _CONFIG_PATH_OVERRIDE = Path(path).expanduser() if path else None


def _load_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - delegated to PyYAML
        raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected {path} to contain a YAML object with an 'rpc' section")
    return loaded


def load_env_file(path: Path) -> dict[str, str]:
    """Read a dotenv file without touching ``os.environ``.

    Keys declared without a value are dropped. A missing file yields an
    empty mapping.
    """

    if not path.is_file():
        return {}
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def _validate_url(raw: Any, *, source: str) -> str | None:
    if raw is None:
        return None
    parsed = urlparse(str(raw))
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.hostname:
        raise ConfigurationError(f"Invalid RPC endpoint URL in {source}: {raw}")
    return str(raw)


def _coerce_timeout(raw: Any, *, source: str) -> float | None:
    if raw is None:
        return None
    try:
        timeout = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid timeout in {source}: {raw}") from exc
    if timeout <= 0:
        raise ConfigurationError(f"Timeout in {source} must be positive: {raw}")
    return timeout


def _first_value(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def _env_lookup(env_map: Mapping[str, str], *keys: str) -> str | None:
    for key in keys:
        value = env_map.get(key)
        if value:
            return value
    return None


def load_rpc_config(
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
    env_file: str | Path | None = None,
) -> RPCConfig:
    """Load RPC configuration from overrides, environment, ``.env`` and YAML.

    Sources are consulted in that order and the first non-empty value wins.
    When ``env`` is passed explicitly the ``.env`` file is ignored so callers
    get a fully controlled environment.
    """

    if env is None:
        dotenv = load_env_file(Path(env_file) if env_file is not None else DEFAULT_ENV_FILE)
        env_map: Mapping[str, str] = {**dotenv, **os.environ}
    else:
        env_map = env

    explicit_path = config_path is not None or _CONFIG_PATH_OVERRIDE is not None
    path = (
        Path(config_path).expanduser()
        if config_path is not None
        else _CONFIG_PATH_OVERRIDE or DEFAULT_CONFIG_PATH
    )

    file_config = _load_config_file(path, required=explicit_path)
    rpc_section = file_config.get("rpc", {})
    if not isinstance(rpc_section, dict):
        raise ConfigurationError(f"Expected 'rpc' to be a mapping in {path}")

    override_map = dict(overrides or {})

    resolved_url = _first_value(
        _validate_url(override_map.get("url"), source="overrides"),
        _validate_url(_env_lookup(env_map, "TEMPO_RPC_URL", "RPC_URL"), source="environment"),
        _validate_url(rpc_section.get("url"), source=f"{path} rpc.url"),
        DEFAULT_RPC_URL,
    )
    resolved_timeout = _first_value(
        _coerce_timeout(override_map.get("timeout"), source="overrides"),
        _coerce_timeout(_env_lookup(env_map, "TEMPO_RPC_TIMEOUT"), source="environment"),
        _coerce_timeout(rpc_section.get("timeout"), source=f"{path} rpc.timeout"),
        DEFAULT_TIMEOUT_SECONDS,
    )

    return RPCConfig(url=resolved_url, timeout=resolved_timeout)
