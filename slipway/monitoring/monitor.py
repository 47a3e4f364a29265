"""Cluster monitoring: a provider's probes driven by a ProbeRegistry."""

from __future__ import annotations

from collections.abc import Mapping
from functools import partial
from typing import TYPE_CHECKING

from loguru import logger

from slipway.constants import DEFAULT_PROBE_TIMEOUT, PROBE_STATUS_PREFIX
from slipway.monitoring.probes import CoordinationProbe, normalize_url, parse_probe_url
from slipway.monitoring.registry import ProbeRegistry
from slipway.spec import ClusterSpecification

if TYPE_CHECKING:
    from slipway.providers.provider import ProviderService

log = logger.bind(component="monitor")


class ClusterMonitor:
    """Starts, runs and tears down monitoring for one cluster.

    Example:
        monitor = ClusterMonitor(provider, ProbeRegistry(interval=15))
        monitor.start(spec, "http://master:60010/", {}, timeout=5)
        monitor.snapshot()
        # {"info.master.address": "master:16000",
        #  "probe.http:http://master:60010/": "success", ...}
        monitor.stop()
    """

    def __init__(self, provider: ProviderService, registry: ProbeRegistry | None = None) -> None:
        self.provider = provider
        self.registry = registry or ProbeRegistry(name=provider.name)
        self._supported = False

    @property
    def supported(self) -> bool:
        return self._supported

    def start(
        self,
        spec: ClusterSpecification,
        url: str | None,
        config: Mapping[str, str],
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> bool:
        """Initialise provider monitoring, register probes and start the loop.

        Returns whether the provider supports monitoring.
        """
        self._supported = self.provider.init_monitoring()

        probes = self.provider.create_probes(spec, url, config, timeout)
        for probe in probes:
            self.registry.add(probe)
        if url is not None and not probes and parse_probe_url(normalize_url(url, secure=spec.secure)) is not None:
            log.info("No probe for {url} yet, retrying on the next cycles", url=url)
            self.registry.defer(partial(self.provider.create_probes, spec, url, config, timeout), attempts=1)

        if self._supported and (watcher := self.provider.watcher) is not None:
            self.registry.add(CoordinationProbe(watcher))

        self.registry.start()
        return self._supported

    def stop(self) -> None:
        self.registry.stop()
        self.provider.stop_monitoring()

    def snapshot(self) -> dict[str, str]:
        """Provider status merged with the latest outcome of every probe."""
        status: dict[str, str] = {}
        try:
            status.update(self.provider.build_status() or {})
        except Exception as e:
            log.warning("Provider status unavailable: {error}", error=e)
        for name, outcome in self.registry.snapshot().items():
            status[f"{PROBE_STATUS_PREFIX}{name}"] = str(outcome)
        return status
