"""Specification dataclasses for clusters and launches.

These are the immutable objects that flow between the controller and the
provider core: what the operator asked for (ClusterSpecification) and what
the resource manager should run (LaunchSpec).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Literal, TypeAlias

ResourceKind: TypeAlias = Literal["file", "archive"]


def _frozen(mapping: Mapping[str, object] | None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, slots=True)
class ClusterSpecification:
    """Cluster specification - what the operator wants.

    The mappings are copied into read-only views on construction, so later
    changes to the caller's dicts never leak into an operation in progress.

    Args:
        roles: Role name to desired instance count.
        options: Cluster-wide key/value options.
        role_options: Per-role options. Keys prefixed with ``env.`` become
            environment variables of that role's processes.
        image_path: Path of a deployable archive to stage, if any.
        application_home: Pre-installed application directory, used when
            no image is staged.
        secure: Whether the cluster runs in secure (kerberized) mode.

    Example:
        >>> spec = ClusterSpecification(
        ...     roles={"master": 1, "worker": 3},
        ...     image_path="hdfs:///apps/hbase-0.98.tar.gz",
        ... )
    """

    roles: Mapping[str, int] = field(default_factory=dict)
    options: Mapping[str, str] = field(default_factory=dict)
    role_options: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    image_path: str | None = None
    application_home: str | None = None
    secure: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", _frozen(self.roles))
        object.__setattr__(self, "options", _frozen(self.options))
        object.__setattr__(
            self,
            "role_options",
            MappingProxyType({k: _frozen(v) for k, v in (self.role_options or {}).items()}),
        )

    @property
    def is_image_path_set(self) -> bool:
        return bool(self.image_path)

    def desired_instances(self, role: str, default: int = 0) -> int:
        return self.roles.get(role, default)

    def options_for(self, role: str) -> Mapping[str, str]:
        return self.role_options.get(role, MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class HostAndPort:
    """A network endpoint of a role instance."""

    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def parse(cls, text: str) -> HostAndPort:
        """Parse ``host:port`` or the ``host,port,startcode`` server-name form."""
        text = text.strip()
        if "," in text:
            host, port, *_ = text.split(",")
        else:
            host, sep, port = text.rpartition(":")
            if not sep:
                raise ValueError(f"no port in address '{text}'")
        if not host:
            raise ValueError(f"no host in address '{text}'")
        return cls(host=host, port=int(port))


@dataclass(frozen=True, slots=True)
class LocalResource:
    """A file or archive the resource manager stages next to the process."""

    source: str
    kind: ResourceKind = "file"


@dataclass(frozen=True, slots=True)
class StagedArtifacts:
    """Local view of what was staged for a launch.

    Args:
        generated_conf_dir: Directory holding the generated configuration
            files; every file in it is shipped to the role instance.
        expanded_image_dir: Local unpacked copy of the image archive, used
            to find the archive's top-level directory. Optional.
    """

    generated_conf_dir: Path
    expanded_image_dir: Path | None = None


@dataclass(frozen=True, slots=True)
class LaunchSpec:
    """Everything needed to start one instance of a role.

    Built fresh per request and handed over to the caller.
    """

    command: tuple[str, ...]
    environment: Mapping[str, str]
    local_resources: Mapping[str, LocalResource]

    def __post_init__(self) -> None:
        object.__setattr__(self, "command", tuple(self.command))
        object.__setattr__(self, "environment", _frozen(self.environment))
        object.__setattr__(self, "local_resources", _frozen(self.local_resources))

    @property
    def command_line(self) -> str:
        """The command as the single shell line the resource manager runs."""
        return " ".join(self.command)
