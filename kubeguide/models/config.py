"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RegistryConfig:
    """Resource registry configuration."""

    ttl_seconds: int = 300
    serve_stale_on_error: bool = True


@dataclass
class AccessorConfig:
    """Unified accessor configuration."""

    generic_fallback: bool = False
    request_timeout_seconds: int = 30


@dataclass
class ClusterConfig:
    """Cluster connection configuration."""

    kubeconfig: str = ""
    context: str = ""


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "console"


@dataclass
class KubeGuideConfig:
    """Top-level kubeguide configuration."""

    registry: RegistryConfig = field(default_factory=RegistryConfig)
    accessor: AccessorConfig = field(default_factory=AccessorConfig)
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    log: LogConfig = field(default_factory=LogConfig)
