"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubeguide.models.config import (
    AccessorConfig,
    ClusterConfig,
    KubeGuideConfig,
    LogConfig,
    RegistryConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEGUIDE_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    valid = {"console", "json"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log format: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> KubeGuideConfig:
    """Load configuration from KUBEGUIDE_* environment variables."""
    return KubeGuideConfig(
        registry=RegistryConfig(
            ttl_seconds=_env_int("REGISTRY_TTL", 300, min_val=5, max_val=3600),
            serve_stale_on_error=_env_bool("SERVE_STALE_ON_ERROR", True),
        ),
        accessor=AccessorConfig(
            generic_fallback=_env_bool("GENERIC_FALLBACK", False),
            request_timeout_seconds=_env_int("REQUEST_TIMEOUT", 30, min_val=1, max_val=300),
        ),
        cluster=ClusterConfig(
            kubeconfig=_env("KUBECONFIG", ""),
            context=_env("CONTEXT", ""),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "console")),
        ),
    )
