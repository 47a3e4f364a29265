"""DI modules for wiring Slipway into a controller.

Usage:
    injector = Injector([ProviderModule(HBase(site=site)), MonitoringModule(interval=15)])
    provider = injector.get(ProviderService)
    monitor = injector.get(ClusterMonitor)
"""

from __future__ import annotations

from injector import Binder, Module, provider, singleton

from slipway.constants import DEFAULT_MONITOR_INTERVAL, DEFAULT_PROBE_HISTORY, DEFAULT_SETUP_ATTEMPTS
from slipway.monitoring.monitor import ClusterMonitor
from slipway.monitoring.registry import ProbeRegistry
from slipway.providers.hbase.config import HBase
from slipway.providers.provider import ProviderService
from slipway.providers.registry import ProviderConfig, create_provider


class ProviderModule(Module):
    """Binds the provider configuration and the ProviderService built from it."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    def configure(self, binder: Binder) -> None:
        if isinstance(self._config, HBase):
            binder.bind(HBase, to=self._config)

    @singleton
    @provider
    def provide_service(self) -> ProviderService:
        return create_provider(self._config)


class MonitoringModule(Module):
    """Provides the probe registry and the cluster monitor on top of it."""

    def __init__(
        self,
        *,
        interval: float = DEFAULT_MONITOR_INTERVAL,
        history_size: int = DEFAULT_PROBE_HISTORY,
        setup_attempts: int = DEFAULT_SETUP_ATTEMPTS,
    ) -> None:
        self._interval = interval
        self._history_size = history_size
        self._setup_attempts = setup_attempts

    @singleton
    @provider
    def provide_registry(self, service: ProviderService) -> ProbeRegistry:
        return ProbeRegistry(
            interval=self._interval,
            history_size=self._history_size,
            setup_attempts=self._setup_attempts,
            name=service.name,
        )

    @singleton
    @provider
    def provide_monitor(self, service: ProviderService, registry: ProbeRegistry) -> ClusterMonitor:
        return ClusterMonitor(service, registry)


__all__ = ["MonitoringModule", "ProviderModule"]
