"""Slipway - provider-side orchestration core for role-based cluster applications.

Example:

    from slipway import ClusterSpecification, HBase, StagedArtifacts, create_provider

    provider = create_provider(HBase(site={"hbase.zookeeper.quorum": "zk1,zk2"}))
    spec = ClusterSpecification(
        roles={"master": 1, "worker": 3},
        image_path="hdfs:///apps/hbase-0.98.1.tar.gz",
    )
    provider.validate_cluster_spec(spec)
    launch = provider.build_launch_spec("worker", spec, StagedArtifacts(Path("generated")))
"""

from slipway.actions import Action, LifecyclePhase, require_valid
from slipway.coordination import CoordinationClient, CoordinationWatcher, ZooKeeperClient
from slipway.core.exceptions import (
    AdminConnectionError,
    BadArgumentsError,
    BadClusterStateError,
    ConfigurationError,
    InternalStateError,
    SlipwayError,
    UnknownRoleError,
    UnsupportedActionError,
)
from slipway.logging import LogConfig, setup_logging, teardown_logging
from slipway.monitoring import (
    ClusterMonitor,
    CoordinationProbe,
    HttpProbe,
    Outcome,
    ProbeRegistry,
    ProbeResult,
)
from slipway.providers import HBase, ProviderService, create_provider
from slipway.roles import Role, RoleCatalog
from slipway.spec import (
    ClusterSpecification,
    HostAndPort,
    LaunchSpec,
    LocalResource,
    StagedArtifacts,
)

__version__ = "0.1.0"

__all__ = [
    "Action",
    "AdminConnectionError",
    "BadArgumentsError",
    "BadClusterStateError",
    "ClusterMonitor",
    "ClusterSpecification",
    "ConfigurationError",
    "CoordinationClient",
    "CoordinationProbe",
    "CoordinationWatcher",
    "HBase",
    "HostAndPort",
    "HttpProbe",
    "InternalStateError",
    "LaunchSpec",
    "LifecyclePhase",
    "LocalResource",
    "LogConfig",
    "Outcome",
    "ProbeRegistry",
    "ProbeResult",
    "ProviderService",
    "Role",
    "RoleCatalog",
    "SlipwayError",
    "StagedArtifacts",
    "UnknownRoleError",
    "UnsupportedActionError",
    "ZooKeeperClient",
    "create_provider",
    "require_valid",
    "setup_logging",
    "teardown_logging",
]
