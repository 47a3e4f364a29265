"""Server-side aspects of an HBase cluster.

HBaseProvider turns a ClusterSpecification into HBase master/regionserver
launches, checks the HBase configuration directory, follows the active
master through ZooKeeper and asks the REST gateway for dead region servers.
"""

from __future__ import annotations

from typing import TypeAlias

from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager
from functools import partial
from pathlib import Path

from loguru import logger

from slipway.constants import INFO_MASTER_ADDRESS, KEY_PROBE_MAX_CODE, KEY_PROBE_MIN_CODE, WEB_PROBE_DEFAULT_CODE
from slipway.coordination import CoordinationClient, CoordinationWatcher, ZooKeeperClient
from slipway.core.exceptions import AdminConnectionError, BadArgumentsError
from slipway.monitoring.probes import Probe, create_http_probe
from slipway.providers.common import validate_binaries, validate_roles
from slipway.providers.hbase.admin import AdminConnection, admin_connection
from slipway.providers.hbase.config import HBase
from slipway.providers.hbase.keys import DEFAULT_MASTER_INFO_PORT, HBASE_ROLES, KEY_ZOOKEEPER_QUORUM, SITE_XML
from slipway.providers.hbase.launch import LaunchSpecBuilder
from slipway.providers.hbase.site import (
    list_dir,
    load_site_xml,
    master_znode,
    validate_site,
    verify_keytabs,
    zookeeper_hosts,
)
from slipway.providers.hbase.znode import decode_master_address
from slipway.roles import RoleCatalog
from slipway.spec import ClusterSpecification, HostAndPort, LaunchSpec, StagedArtifacts

log = logger.bind(component="provider", provider="hbase")

CoordinationClientFactory: TypeAlias = Callable[[], CoordinationClient]
AdminFactory: TypeAlias = Callable[[Mapping[str, str]], AbstractContextManager[AdminConnection]]


def _code_option(config: Mapping[str, str], key: str) -> int:
    raw = config.get(key)
    if raw is None:
        return WEB_PROBE_DEFAULT_CODE
    try:
        return int(raw)
    except (TypeError, ValueError):
        log.warning("Ignoring non-numeric {key}={raw!r}", key=key, raw=raw)
        return WEB_PROBE_DEFAULT_CODE


class HBaseProvider:
    """ProviderService for HBase.

    Args:
        config: Provider configuration.
        coordination_factory: Builds the coordination client used by the
            master watcher. Defaults to a ZooKeeper session on the
            configured quorum.
        admin_factory: Opens a scoped administrative connection. Defaults
            to the REST gateway client.
    """

    name = "hbase"

    def __init__(
        self,
        config: HBase,
        *,
        coordination_factory: CoordinationClientFactory | None = None,
        admin_factory: AdminFactory | None = None,
    ) -> None:
        self.config = config
        self._builder = LaunchSpecBuilder(HBASE_ROLES, log_dir=config.log_dir)
        self._coordination_factory = coordination_factory or self._zookeeper_client
        self._admin_factory = admin_factory or partial(
            admin_connection,
            timeout=config.admin_timeout,
            attempts=config.admin_attempts,
            wait=config.admin_retry_wait,
        )
        self._watcher: CoordinationWatcher | None = None

    @property
    def default_info_port(self) -> int:
        return DEFAULT_MASTER_INFO_PORT

    @property
    def site_filename(self) -> str:
        return SITE_XML

    @property
    def watcher(self) -> CoordinationWatcher | None:
        return self._watcher

    def roles(self) -> RoleCatalog:
        return HBASE_ROLES

    # -------------------------------------------------------------------------
    # Validation and launch (client and server)
    # -------------------------------------------------------------------------

    def validate_cluster_spec(self, spec: ClusterSpecification) -> None:
        validate_roles(self.roles(), spec)
        validate_binaries(spec)

    def build_launch_spec(
        self,
        role: str,
        spec: ClusterSpecification,
        staged: StagedArtifacts,
    ) -> LaunchSpec:
        return self._builder.build(role, spec, staged)

    def validate_application_configuration(
        self,
        spec: ClusterSpecification,
        conf_dir: Path,
        secure: bool,
    ) -> None:
        """Check the configuration directory before the processes are spawned.

        This is where things not visible client side are tested, such as
        the existence of keytabs.
        """
        conf_dir = Path(conf_dir)
        site_xml = conf_dir / SITE_XML
        if not site_xml.is_file():
            raise BadArgumentsError(
                f"Configuration directory {conf_dir} doesn't contain {SITE_XML} "
                f"- listing is {list_dir(conf_dir)}"
            )

        site = load_site_xml(site_xml)
        validate_site(site, secure, str(site_xml))
        if secure:
            verify_keytabs(site)

    # -------------------------------------------------------------------------
    # Monitoring (server)
    # -------------------------------------------------------------------------

    def init_monitoring(self) -> bool:
        if self._watcher is None:
            self._watcher = CoordinationWatcher(
                self._coordination_factory,
                master_znode(self.config.site),
                decode=decode_master_address,
            )
        self._watcher.start()
        return True

    def stop_monitoring(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()

    def create_probes(
        self,
        spec: ClusterSpecification,
        url: str | None,
        config: Mapping[str, str],
        timeout: float,
    ) -> list[Probe]:
        if url is None:
            return []
        probe = create_http_probe(
            url,
            timeout=timeout,
            secure=spec.secure,
            min_code=_code_option(config, KEY_PROBE_MIN_CODE),
            max_code=_code_option(config, KEY_PROBE_MAX_CODE),
        )
        return [probe] if probe is not None else []

    def build_status(self) -> dict[str, str] | None:
        if self._watcher is None:
            return None
        primary = self._watcher.current_primary()
        log.debug(
            "master address {primary}, quorum={quorum}",
            primary=primary,
            quorum=self.config.site.get(KEY_ZOOKEEPER_QUORUM),
        )
        if primary is None:
            return None
        return {INFO_MASTER_ADDRESS: str(primary)}

    def list_unavailable_instances(self, config: Mapping[str, str]) -> list[HostAndPort]:
        try:
            with self._admin_factory(config) as admin:
                dead = admin.dead_servers()
        except AdminConnectionError as e:
            log.warning("Couldn't list dead region servers: {error}", error=e)
            return []
        if dead:
            log.info("{n} dead region servers: {servers}", n=len(dead), servers=", ".join(map(str, dead)))
        return dead

    def _zookeeper_client(self) -> CoordinationClient:
        return ZooKeeperClient(zookeeper_hosts(self.config.site), timeout=self.config.zk_session_timeout)
