from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol, TypeVar, runtime_checkable

from slipway.coordination import CoordinationWatcher
from slipway.monitoring.probes import Probe
from slipway.roles import RoleCatalog
from slipway.spec import ClusterSpecification, HostAndPort, LaunchSpec, StagedArtifacts


@runtime_checkable
class ProviderService(Protocol):
    """Application-specific side of the controller.

    One implementation exists per supported application type, chosen from
    the provider configuration at startup. Validation and launch building
    are pure; monitoring methods own the coordination session and degrade
    to empty results instead of raising.
    """

    @property
    def name(self) -> str: ...

    @property
    def default_info_port(self) -> int: ...

    @property
    def site_filename(self) -> str: ...

    @property
    def watcher(self) -> CoordinationWatcher | None:
        """The primary-address watcher, once monitoring has been initialised."""
        ...

    def roles(self) -> RoleCatalog:
        """Roles this application type supports."""
        ...

    def validate_cluster_spec(self, spec: ClusterSpecification) -> None:
        """Check role counts and options. Runs client side and server side.

        Raises
        ------
        BadArgumentsError
            On unknown roles or out-of-range counts.
        ConfigurationError
            When neither an image nor an application home is set.
        """
        ...

    def build_launch_spec(
        self,
        role: str,
        spec: ClusterSpecification,
        staged: StagedArtifacts,
    ) -> LaunchSpec:
        """Build the command, environment and resources for one role instance.

        Raises
        ------
        UnknownRoleError
            If ``role`` is not in the catalog.
        ConfigurationError
            If there is no way to locate the application binaries.
        InternalStateError
            If a catalog role has no start command.
        """
        ...

    def validate_application_configuration(
        self,
        spec: ClusterSpecification,
        conf_dir: Path,
        secure: bool,
    ) -> None:
        """Check the configuration directory before anything is launched.

        Server side only: files referenced here exist on the controller's
        host, not the client's.
        """
        ...

    def init_monitoring(self) -> bool:
        """Start background monitoring; return whether it is supported."""
        ...

    def stop_monitoring(self) -> None: ...

    def create_probes(
        self,
        spec: ClusterSpecification,
        url: str | None,
        config: Mapping[str, str],
        timeout: float,
    ) -> list[Probe]:
        """Probes for the application's web endpoint; empty when none can be set up."""
        ...

    def build_status(self) -> dict[str, str] | None:
        """Provider entries for the cluster status, or None when unknown."""
        ...

    def list_unavailable_instances(self, config: Mapping[str, str]) -> Sequence[HostAndPort]:
        """Instances the application itself reports as dead."""
        ...


P = TypeVar("P", covariant=True)


@runtime_checkable
class ProviderConfig(Protocol[P]):
    @property
    def type(self) -> str: ...

    def create_provider(self) -> P: ...
