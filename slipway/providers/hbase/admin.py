"""Administrative connection to a running HBase cluster.

Talks to the HBase REST gateway's ``/status/cluster`` resource. A
connection only lives inside ``with admin_connection(...)``; the HTTP
client is released when the block exits, whatever happens inside it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from typing import Any, Protocol, TypeAlias

import httpx
from loguru import logger
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from slipway.core.exceptions import AdminConnectionError
from slipway.providers.hbase.keys import (
    CLUSTER_STATUS_PATH,
    DEFAULT_REST_HOST,
    DEFAULT_REST_PORT,
    KEY_ADMIN_URL,
    KEY_REST_HOST,
    KEY_REST_PORT,
)
from slipway.spec import HostAndPort

log = logger.bind(component="admin", provider="hbase")


class AdminConnection(Protocol):
    def dead_servers(self) -> list[HostAndPort]: ...


AdminConnectionFactory: TypeAlias = Callable[[Mapping[str, str]], AbstractContextManager[AdminConnection]]


def admin_url(config: Mapping[str, str]) -> str:
    if url := config.get(KEY_ADMIN_URL, "").strip():
        return url
    host = config.get(KEY_REST_HOST, "").strip() or DEFAULT_REST_HOST
    port = config.get(KEY_REST_PORT, "").strip() or str(DEFAULT_REST_PORT)
    return f"http://{host}:{port}"


def server_names_to_addresses(names: list[Any]) -> list[HostAndPort]:
    """Map REST server entries (``host,port,startcode`` strings or ``{"name": ...}``)."""
    addresses: list[HostAndPort] = []
    for entry in names:
        name = entry.get("name") if isinstance(entry, dict) else entry
        try:
            addresses.append(HostAndPort.parse(str(name)))
        except ValueError:
            log.warning("Skipping unparseable server name {name!r}", name=name)
    return addresses


class HBaseRestAdmin:
    """Cluster-status queries over one HTTP client.

    Transport errors are retried ``attempts`` times in total; anything that
    still fails is raised as AdminConnectionError.
    """

    def __init__(self, client: httpx.Client, *, attempts: int = 3, wait: float = 0.5) -> None:
        self._client = client
        self._attempts = attempts
        self._wait = wait

    def cluster_status(self) -> dict[str, Any]:
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._attempts),
                wait=wait_fixed(self._wait),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = self._client.get(CLUSTER_STATUS_PATH, headers={"Accept": "application/json"})
            response.raise_for_status()
            status = response.json()
        except httpx.HTTPError as e:
            raise AdminConnectionError(f"cluster status query to {self._client.base_url} failed: {e}") from e
        except ValueError as e:
            raise AdminConnectionError(f"cluster status from {self._client.base_url} is not JSON: {e}") from e
        if not isinstance(status, dict):
            raise AdminConnectionError(
                f"cluster status from {self._client.base_url} is a JSON {type(status).__name__}, not an object"
            )
        return status

    def dead_servers(self) -> list[HostAndPort]:
        dead = self.cluster_status().get("DeadNodes") or []
        if not isinstance(dead, list):
            raise AdminConnectionError(f"DeadNodes from {self._client.base_url} is not a list: {dead!r}")
        return server_names_to_addresses(dead)


@contextmanager
def admin_connection(
    config: Mapping[str, str],
    *,
    timeout: float = 30.0,
    attempts: int = 3,
    wait: float = 0.5,
    transport: httpx.BaseTransport | None = None,
) -> Iterator[HBaseRestAdmin]:
    """Open an administrative connection for the duration of a ``with`` block."""
    url = admin_url(config)
    log.debug("Opening admin connection to {url}", url=url)
    try:
        client = httpx.Client(base_url=url, timeout=timeout, transport=transport)
    except httpx.InvalidURL as e:
        raise AdminConnectionError(f"bad admin URL {url!r}: {e}") from e
    with client:
        yield HBaseRestAdmin(client, attempts=attempts, wait=wait)
