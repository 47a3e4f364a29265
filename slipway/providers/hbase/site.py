"""HBase site configuration: loading and server-side checks."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable, Mapping
from pathlib import Path

from slipway.core.exceptions import BadArgumentsError, ConfigurationError
from slipway.providers.hbase.keys import (
    DEFAULT_ZNODE_PARENT,
    DEFAULT_ZOOKEEPER_PORT,
    KEY_ZNODE_PARENT,
    KEY_ZOOKEEPER_PORT,
    KEY_ZOOKEEPER_QUORUM,
    KEYTAB_OPTIONS,
    MASTER_ZNODE,
    REQUIRED_SECURE_SITE_OPTIONS,
    REQUIRED_SITE_OPTIONS,
)


def list_dir(path: Path) -> list[str]:
    """Sorted entry names of a directory, empty if it does not exist."""
    if not path.is_dir():
        return []
    return sorted(p.name for p in path.iterdir())


def load_site_xml(path: Path) -> dict[str, str]:
    """Read a Hadoop-style ``<configuration><property>`` XML file."""
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise ConfigurationError(f"File {path}: not a valid configuration file: {e}") from e

    conf: dict[str, str] = {}
    for prop in root.iter("property"):
        name = (prop.findtext("name") or "").strip()
        if name:
            conf[name] = (prop.findtext("value") or "").strip()
    return conf


def verify_options_set(conf: Mapping[str, str], keys: Iterable[str], origin: str) -> None:
    for key in keys:
        if not conf.get(key, "").strip():
            raise ConfigurationError(f"File {origin}: Unset option {key}")


def validate_site(conf: Mapping[str, str], secure: bool, origin: str) -> None:
    verify_options_set(conf, REQUIRED_SITE_OPTIONS, origin)
    if secure:
        verify_options_set(conf, REQUIRED_SECURE_SITE_OPTIONS, origin)


def verify_keytab_exists(conf: Mapping[str, str], key: str) -> None:
    keytab = conf.get(key, "").strip()
    if not keytab:
        raise BadArgumentsError(f"Missing keytab property {key}")
    if not Path(keytab).is_file():
        raise BadArgumentsError(f"Missing keytab file {keytab} defined in {key}")


def verify_keytabs(conf: Mapping[str, str]) -> None:
    for key in KEYTAB_OPTIONS:
        verify_keytab_exists(conf, key)


# =============================================================================
# ZooKeeper
# =============================================================================


def zookeeper_hosts(site: Mapping[str, str]) -> str:
    """Connection string for the quorum, e.g. ``zk1:2181,zk2:2181``.

    Raises:
        ConfigurationError: If no quorum is configured.
    """
    quorum = site.get(KEY_ZOOKEEPER_QUORUM, "").strip()
    if not quorum:
        raise ConfigurationError(f"Unset option {KEY_ZOOKEEPER_QUORUM}")
    port = site.get(KEY_ZOOKEEPER_PORT, "").strip() or str(DEFAULT_ZOOKEEPER_PORT)
    hosts = (h.strip() for h in quorum.split(","))
    return ",".join(h if ":" in h else f"{h}:{port}" for h in hosts if h)


def master_znode(site: Mapping[str, str]) -> str:
    parent = site.get(KEY_ZNODE_PARENT, "").strip() or DEFAULT_ZNODE_PARENT
    return f"{parent.rstrip('/')}/{MASTER_ZNODE}"
