"""HBase provider: master and region server roles on the resource manager."""

from slipway.providers.hbase.config import HBase
from slipway.providers.hbase.keys import HBASE_ROLES, ROLE_MASTER, ROLE_WORKER

__all__ = ["HBASE_ROLES", "HBase", "ROLE_MASTER", "ROLE_WORKER"]
