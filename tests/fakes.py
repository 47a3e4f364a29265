from __future__ import annotations

from pathlib import Path

from slipway.coordination import WatchCallback

SITE_OPTIONS = {
    "hbase.cluster.distributed": "true",
    "hbase.rootdir": "hdfs://nn:8020/hbase",
    "zookeeper.znode.parent": "/hbase",
    "hbase.zookeeper.quorum": "zk1,zk2",
    "hbase.zookeeper.property.clientPort": "2181",
}


class FakeCoordinationClient:
    """In-memory CoordinationClient; ``publish`` plays the service's callback thread."""

    def __init__(self, *, fail_start: bool = False, fail_watch: bool = False) -> None:
        self.fail_start = fail_start
        self.fail_watch = fail_watch
        self.started = 0
        self.stopped = 0
        self.callbacks: dict[str, WatchCallback] = {}

    def start(self) -> None:
        if self.fail_start:
            raise ConnectionRefusedError("coordination service unavailable")
        self.started += 1

    def watch(self, path: str, callback: WatchCallback) -> None:
        if self.fail_watch:
            raise RuntimeError("watch rejected")
        self.callbacks[path] = callback

    def stop(self) -> None:
        self.stopped += 1

    def publish(self, path: str, data: bytes | None) -> None:
        self.callbacks[path](data)


def write_site_xml(path: Path, options: dict[str, str]) -> Path:
    properties = "\n".join(
        f"  <property>\n    <name>{k}</name>\n    <value>{v}</value>\n  </property>"
        for k, v in options.items()
    )
    path.write_text(f'<?xml version="1.0"?>\n<configuration>\n{properties}\n</configuration>\n')
    return path
