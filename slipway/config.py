"""TOML-based provider and cluster configuration.

Loads ~/.slipway/defaults.toml (global) and slipway.toml (project), merges
them, and resolves named clusters into a ClusterSpecification plus the
configuration of the provider that runs it.

Example slipway.toml::

    [providers.prod-hbase]
    type = "hbase"
    site = { "hbase.zookeeper.quorum" = "zk1,zk2,zk3" }

    [clusters.analytics]
    provider = "prod-hbase"
    image_path = "hdfs:///apps/hbase-0.98.1.tar.gz"
    roles = { master = 1, worker = 8 }

    [clusters.analytics.role_options.worker]
    "env.HBASE_HEAPSIZE" = "4096"
"""

from __future__ import annotations

import tomllib
from functools import reduce
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeAlias

from loguru import logger

from slipway.core.exceptions import ConfigurationError
from slipway.spec import ClusterSpecification

if TYPE_CHECKING:
    from slipway.providers.hbase.config import HBase

    ProviderConfig: TypeAlias = "HBase"

log = logger.bind(component="config")

RawConfig: TypeAlias = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".slipway" / "defaults.toml"
PROJECT_CONFIG_NAME = "slipway.toml"

_CLUSTER_FIELDS = frozenset({"roles", "options", "role_options", "image_path", "application_home", "secure"})


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    """Merge ``override`` into a copy of ``base``; nested tables merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        match merged.get(key), value:
            case dict() as current, dict():
                merged[key] = _deep_merge(current, value)
            case _:
                merged[key] = value
    return merged


def _read_toml(path: Path) -> RawConfig:
    try:
        with path.open("rb") as f:
            raw = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"{path}: invalid TOML: {e}") from e
    log.debug("Loaded configuration from {path}", path=path)
    return raw


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    """Global defaults overlaid with the project file; both are optional."""
    layers = (
        _read_toml(global_path or GLOBAL_CONFIG_PATH),
        _read_toml((project_dir or Path.cwd()) / PROJECT_CONFIG_NAME),
    )
    merged = reduce(_deep_merge, layers, {})
    for section in ("providers", "clusters"):
        if not isinstance(merged.setdefault(section, {}), dict):
            raise ConfigurationError(f"[{section}] must be a table of named entries")
    return merged


def _get_provider_map() -> dict[str, type]:
    from slipway.providers.hbase.config import HBase

    return {"hbase": HBase}


def _build_provider(name: str, raw: RawConfig) -> ProviderConfig:
    raw = dict(raw)
    provider_type = raw.pop("type", None)
    if provider_type is None:
        raise ValueError(f"Provider '{name}' missing 'type' field")

    provider_map = _get_provider_map()
    cls = provider_map.get(provider_type)
    if cls is None:
        raise ValueError(
            f"Unknown provider type '{provider_type}'. "
            f"Valid: {', '.join(provider_map)}"
        )
    return cls(**raw)


def _build_cluster(name: str, raw: RawConfig) -> ClusterSpecification:
    unknown = set(raw) - _CLUSTER_FIELDS
    if unknown:
        raise ValueError(f"Cluster '{name}' has unknown fields: {', '.join(sorted(unknown))}")
    options = {k: str(v) for k, v in raw.get("options", {}).items()}
    role_options = {
        role: {k: str(v) for k, v in opts.items()}
        for role, opts in raw.get("role_options", {}).items()
    }
    return ClusterSpecification(
        roles=dict(raw.get("roles", {})),
        options=options,
        role_options=role_options,
        image_path=raw.get("image_path"),
        application_home=raw.get("application_home"),
        secure=bool(raw.get("secure", False)),
    )


def resolve_cluster(
    name: str,
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> tuple[ClusterSpecification, ProviderConfig]:
    config = load_config(project_dir=project_dir, global_path=global_path)

    clusters = config["clusters"]
    if name not in clusters:
        raise KeyError(f"Cluster '{name}' not found. Available: {', '.join(clusters) or 'none'}")

    raw_cluster = dict(clusters[name])

    provider_ref = raw_cluster.pop("provider", None)
    if provider_ref is None:
        raise ValueError(f"Cluster '{name}' missing 'provider' field")

    providers = config["providers"]
    if provider_ref not in providers:
        raise KeyError(
            f"Provider '{provider_ref}' not found. Available: {', '.join(providers) or 'none'}"
        )

    provider = _build_provider(provider_ref, providers[provider_ref])
    return _build_cluster(name, raw_cluster), provider
