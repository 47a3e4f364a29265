"""Watching the coordination service for the current primary instance.

The watcher keeps a "last known" primary address that the coordination
client updates from its own callback thread. Readers on the request path
always see a complete HostAndPort or None, never a half-updated pair.

Example:
    watcher = CoordinationWatcher(
        lambda: ZooKeeperClient("zk1:2181,zk2:2181"),
        path="/hbase/master",
    )
    watcher.start()
    watcher.current_primary()   # HostAndPort("rs1.example.com", 16000) or None
    watcher.stop()
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable, TypeAlias

from loguru import logger

from slipway.spec import HostAndPort

log = logger.bind(component="coordination")

WatchCallback: TypeAlias = Callable[[bytes | None], None]
AddressDecoder: TypeAlias = Callable[[bytes], HostAndPort | None]


@runtime_checkable
class CoordinationClient(Protocol):
    """The narrow slice of a coordination-service client the watcher uses.

    Implementations deliver watch callbacks on their own thread. The callback
    receives the node's data, or None when the node does not exist.
    """

    def start(self) -> None: ...

    def watch(self, path: str, callback: WatchCallback) -> None: ...

    def stop(self) -> None: ...


def decode_text_address(data: bytes) -> HostAndPort | None:
    """Decode a node holding ``host:port`` or ``host,port,startcode`` text."""
    try:
        return HostAndPort.parse(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None


class CoordinationWatcher:
    """Caches the address stored at a well-known coordination path.

    ``start`` never raises: if the client cannot be built or connected the
    watcher stays inert and ``current_primary`` returns None.
    """

    def __init__(
        self,
        client_factory: Callable[[], CoordinationClient],
        path: str,
        *,
        decode: AddressDecoder = decode_text_address,
    ) -> None:
        self._client_factory = client_factory
        self._path = path
        self._decode = decode
        self._lock = threading.Lock()
        self._primary: HostAndPort | None = None
        self._client: CoordinationClient | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def active(self) -> bool:
        with self._lock:
            return self._client is not None

    def start(self) -> None:
        with self._lock:
            if self._client is not None:
                log.warning("Watcher for {path} already running", path=self._path)
                return

        try:
            client = self._client_factory()
            client.start()
        except Exception as e:
            log.error("Couldn't start coordination client for {path}: {error}", path=self._path, error=e)
            return

        with self._lock:
            self._client = client

        try:
            client.watch(self._path, self._on_change)
        except Exception as e:
            log.error("Couldn't watch {path}: {error}", path=self._path, error=e)
            self.stop()
            return
        log.info("Watching {path} for primary address", path=self._path)

    def stop(self) -> None:
        with self._lock:
            client, self._client = self._client, None
            self._primary = None
        if client is None:
            return
        try:
            client.stop()
        except Exception as e:
            log.warning("Error closing coordination session: {error}", error=e)
        log.debug("Stopped watching {path}", path=self._path)

    def current_primary(self) -> HostAndPort | None:
        with self._lock:
            return self._primary

    def _on_change(self, data: bytes | None) -> None:
        address = self._decode(data) if data else None
        if data and address is None:
            log.warning("Undecodable data at {path} ({size} bytes)", path=self._path, size=len(data))
        with self._lock:
            if self._client is None:
                return
            self._primary = address
        log.debug("Primary at {path} is now {address}", path=self._path, address=address)


class ZooKeeperClient:
    """CoordinationClient backed by a kazoo ZooKeeper session."""

    def __init__(self, hosts: str, *, timeout: float = 10.0) -> None:
        self._hosts = hosts
        self._timeout = timeout
        self._zk: Any = None
        self._closed = threading.Event()

    def start(self) -> None:
        from kazoo.client import KazooClient

        self._zk = KazooClient(hosts=self._hosts, timeout=self._timeout)
        self._zk.start(timeout=self._timeout)
        log.debug("ZooKeeper session established with {hosts}", hosts=self._hosts)

    def watch(self, path: str, callback: WatchCallback) -> None:
        def on_data(data: bytes | None, _stat: Any) -> bool:
            if self._closed.is_set():
                return False
            callback(data)
            return True

        self._zk.DataWatch(path, func=on_data)

    def stop(self) -> None:
        self._closed.set()
        if self._zk is not None:
            self._zk.stop()
            self._zk.close()
            self._zk = None
