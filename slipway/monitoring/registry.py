"""Probe registry and the periodic monitoring loop.

The registry owns the probes of one cluster. A background thread runs a
cycle every ``interval`` seconds: probes execute concurrently and each
result replaces that probe's previous one, so the snapshot is "latest per
probe", not a point-in-time view across probes.

Example:
    registry = ProbeRegistry(interval=15)
    registry.add(HttpProbe("http://master:60010/", timeout=5))
    registry.start()
    ...
    registry.latest()     # {"http:http://master:60010/": ProbeResult(...)}
    registry.stop()
"""

from __future__ import annotations

from typing import TypeAlias

import contextvars
import threading
import time
from collections import deque
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from loguru import logger

from slipway.constants import DEFAULT_MONITOR_INTERVAL, DEFAULT_PROBE_HISTORY, DEFAULT_SETUP_ATTEMPTS
from slipway.monitoring.probes import Outcome, Probe, ProbeResult

log = logger.bind(component="monitor")

ProbeFactory: TypeAlias = Callable[[], Sequence[Probe]]


@dataclass
class _DeferredSetup:
    factory: ProbeFactory
    attempts: int = 0


class ProbeRegistry:
    """Owns a cluster's probes and runs them on a fixed interval.

    Args:
        interval: Seconds between monitoring cycles.
        history_size: Results kept per probe for trend display.
        setup_attempts: How many cycles a deferred probe setup is retried.
        max_workers: Upper bound on probes executing at the same time.
        name: Used for thread naming and logging.
    """

    def __init__(
        self,
        *,
        interval: float = DEFAULT_MONITOR_INTERVAL,
        history_size: int = DEFAULT_PROBE_HISTORY,
        setup_attempts: int = DEFAULT_SETUP_ATTEMPTS,
        max_workers: int = 4,
        name: str = "probes",
    ) -> None:
        self.interval = interval
        self.history_size = history_size
        self.setup_attempts = setup_attempts
        self.max_workers = max_workers
        self.name = name

        self._lock = threading.Lock()
        self._probes: dict[str, Probe] = {}
        self._deferred: list[_DeferredSetup] = []
        self._latest: dict[str, ProbeResult] = {}
        self._history: dict[str, deque[ProbeResult]] = {}
        self._generation = 0

        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # -------------------------------------------------------------------------
    # Probe set
    # -------------------------------------------------------------------------

    def add(self, probe: Probe) -> None:
        with self._lock:
            if probe.name in self._probes:
                log.debug("Replacing probe {probe}", probe=probe.name)
            self._probes[probe.name] = probe

    def defer(self, factory: ProbeFactory, *, attempts: int = 0) -> None:
        """Register a probe setup to retry on the following cycles.

        ``attempts`` counts tries already made by the caller.
        """
        with self._lock:
            self._deferred.append(_DeferredSetup(factory, attempts))

    @property
    def probes(self) -> tuple[Probe, ...]:
        with self._lock:
            return tuple(self._probes.values())

    @property
    def pending_setups(self) -> int:
        with self._lock:
            return len(self._deferred)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def latest(self) -> dict[str, ProbeResult]:
        with self._lock:
            return dict(self._latest)

    def history(self, probe_name: str) -> list[ProbeResult]:
        with self._lock:
            return list(self._history.get(probe_name, ()))

    def snapshot(self) -> dict[str, Outcome]:
        with self._lock:
            return {name: result.outcome for name, result in self._latest.items()}

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def run_once(self) -> list[ProbeResult]:
        """Run one monitoring cycle and return the results it recorded."""
        self._retry_deferred()

        with self._lock:
            probes = list(self._probes.values())
            generation = self._generation
        if not probes:
            return []

        recorded: list[ProbeResult] = []
        workers = max(1, min(len(probes), self.max_workers))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"probe-{self.name}") as pool:
            futures = [pool.submit(_execute, probe) for probe in probes]
            for future in as_completed(futures):
                result = future.result()
                if self._record(result, generation):
                    recorded.append(result)
        return recorded

    def start(self) -> None:
        """Start the monitoring loop in a background thread."""
        if self.running:
            log.warning("Monitor {name} already running", name=self.name)
            return

        self._stop.clear()
        ctx = contextvars.copy_context()
        self._thread = threading.Thread(
            target=ctx.run,
            args=(self._loop,),
            daemon=True,
            name=f"monitor-{self.name}",
        )
        self._thread.start()
        log.debug("Monitor {name} started (interval={interval}s)", name=self.name, interval=self.interval)

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the loop and drop all probes.

        Probe executions still in flight finish on their own; their results
        are discarded.
        """
        self._stop.set()
        with self._lock:
            self._generation += 1
            self._probes.clear()
            self._deferred.clear()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                log.warning("Monitor {name} did not stop cleanly", name=self.name)
            self._thread = None
        log.debug("Monitor {name} stopped", name=self.name)

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.run_once()
            except Exception as e:
                log.warning("Monitor {name} cycle failed: {error}", name=self.name, error=e)

    def _record(self, result: ProbeResult, generation: int) -> bool:
        with self._lock:
            if generation != self._generation or result.probe not in self._probes:
                return False
            self._latest[result.probe] = result
            history = self._history.setdefault(result.probe, deque(maxlen=self.history_size))
            history.append(result)
        if not result.success:
            log.debug("Probe {probe}: {outcome} {message}", probe=result.probe, outcome=result.outcome, message=result.message)
        return True

    def _retry_deferred(self) -> None:
        with self._lock:
            pending, self._deferred = self._deferred, []
            generation = self._generation

        still_pending: list[_DeferredSetup] = []
        for setup in pending:
            setup.attempts += 1
            try:
                created = list(setup.factory())
            except Exception as e:
                log.warning("Deferred probe setup raised: {error}", error=e)
                created = []

            if created:
                with self._lock:
                    if generation != self._generation:
                        return
                    self._probes.update((probe.name, probe) for probe in created)
                log.info("Deferred probe setup succeeded after {n} attempts", n=setup.attempts)
            elif setup.attempts >= self.setup_attempts:
                log.warning("Giving up on deferred probe setup after {n} attempts", n=setup.attempts)
            else:
                still_pending.append(setup)

        with self._lock:
            if generation == self._generation:
                self._deferred.extend(still_pending)


def _execute(probe: Probe) -> ProbeResult:
    started = time.monotonic()
    try:
        return probe.execute()
    except Exception as e:
        return ProbeResult(
            probe.name,
            Outcome.FAILURE,
            time.monotonic() - started,
            f"probe raised {type(e).__name__}: {e}",
        )
