"""Names, options and defaults specific to HBase clusters."""

from __future__ import annotations

from typing import Final

from slipway.roles import Role, RoleCatalog

ROLE_MASTER: Final = "master"
ROLE_WORKER: Final = "worker"

DEFAULT_MASTER_INFO_PORT: Final = 60010
DEFAULT_REGIONSERVER_INFO_PORT: Final = 60030

HBASE_ROLES: Final = RoleCatalog(
    (
        Role(ROLE_MASTER, id=1, info_port=DEFAULT_MASTER_INFO_PORT),
        Role(ROLE_WORKER, id=2, info_port=DEFAULT_REGIONSERVER_INFO_PORT),
    )
)

# =============================================================================
# Launch
# =============================================================================

SITE_XML: Final = "hbase-site.xml"
HBASE_SCRIPT: Final = "hbase"
BIN_DIR: Final = "bin"
HBASE_LOG_DIR: Final = "HBASE_LOG_DIR"

ARG_CONFIG: Final = "--config"
ACTION_START: Final = "start"

# role -> (hbase subcommand, log file under the container log dir)
ROLE_COMMANDS: Final[dict[str, tuple[str, str]]] = {
    ROLE_WORKER: ("regionserver", "region-server.txt"),
    ROLE_MASTER: ("master", "master.txt"),
}

# =============================================================================
# Site Options
# =============================================================================

KEY_HBASE_CLUSTER_DISTRIBUTED: Final = "hbase.cluster.distributed"
KEY_HBASE_ROOTDIR: Final = "hbase.rootdir"
KEY_ZNODE_PARENT: Final = "zookeeper.znode.parent"
KEY_ZOOKEEPER_QUORUM: Final = "hbase.zookeeper.quorum"
KEY_ZOOKEEPER_PORT: Final = "hbase.zookeeper.property.clientPort"

KEY_MASTER_KERBEROS_PRINCIPAL: Final = "hbase.master.kerberos.principal"
KEY_MASTER_KERBEROS_KEYTAB: Final = "hbase.master.keytab.file"
KEY_REGIONSERVER_KERBEROS_PRINCIPAL: Final = "hbase.regionserver.kerberos.principal"
KEY_REGIONSERVER_KERBEROS_KEYTAB: Final = "hbase.regionserver.keytab.file"

REQUIRED_SITE_OPTIONS: Final = (
    KEY_HBASE_CLUSTER_DISTRIBUTED,
    KEY_HBASE_ROOTDIR,
    KEY_ZNODE_PARENT,
    KEY_ZOOKEEPER_QUORUM,
    KEY_ZOOKEEPER_PORT,
)

REQUIRED_SECURE_SITE_OPTIONS: Final = (
    KEY_MASTER_KERBEROS_PRINCIPAL,
    KEY_MASTER_KERBEROS_KEYTAB,
    KEY_REGIONSERVER_KERBEROS_PRINCIPAL,
    KEY_REGIONSERVER_KERBEROS_KEYTAB,
)

KEYTAB_OPTIONS: Final = (KEY_MASTER_KERBEROS_KEYTAB, KEY_REGIONSERVER_KERBEROS_KEYTAB)

DEFAULT_ZNODE_PARENT: Final = "/hbase"
DEFAULT_ZOOKEEPER_PORT: Final = 2181
MASTER_ZNODE: Final = "master"

# =============================================================================
# Administrative REST API
# =============================================================================

KEY_ADMIN_URL: Final = "slipway.admin.url"
KEY_REST_HOST: Final = "hbase.rest.host"
KEY_REST_PORT: Final = "hbase.rest.port"
DEFAULT_REST_HOST: Final = "localhost"
DEFAULT_REST_PORT: Final = 8080
CLUSTER_STATUS_PATH: Final = "/status/cluster"
