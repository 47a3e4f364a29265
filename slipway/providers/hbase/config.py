"""HBase provider configuration.

Immutable configuration dataclass for the HBase provider.
"""

from __future__ import annotations

import typing
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

if typing.TYPE_CHECKING:
    from slipway.providers.hbase.provider import HBaseProvider


@dataclass(frozen=True, slots=True)
class HBase:
    """HBase provider configuration.

    Example:
        >>> from slipway.providers.hbase import HBase
        >>> config = HBase(site={"hbase.zookeeper.quorum": "zk1,zk2"})

    Args:
        site: HBase site options the controller itself needs (ZooKeeper
            quorum and znode parent, REST gateway address).
        zk_session_timeout: ZooKeeper session/connect timeout in seconds.
        admin_timeout: Timeout of administrative REST calls in seconds.
        admin_attempts: Attempts per administrative call on transport errors.
        admin_retry_wait: Seconds between those attempts.
        log_dir: HBASE_LOG_DIR for launched processes. Defaults to $LOGDIR
            or /tmp/slipway-<user>.
    """

    site: Mapping[str, str] = field(default_factory=dict)
    zk_session_timeout: float = 10.0
    admin_timeout: float = 30.0
    admin_attempts: int = 3
    admin_retry_wait: float = 0.5
    log_dir: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "site", MappingProxyType({k: str(v) for k, v in self.site.items()}))
        if self.admin_attempts < 1:
            raise ValueError(f"admin_attempts must be >= 1, got {self.admin_attempts}")

    @property
    def type(self) -> str:
        return "hbase"

    def create_provider(self) -> HBaseProvider:
        from slipway.providers.hbase.provider import HBaseProvider

        return HBaseProvider(self)
