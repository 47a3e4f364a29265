import threading
import time
from dataclasses import dataclass, field

import pytest

from slipway.monitoring import ClusterMonitor, ProbeRegistry
from slipway.monitoring.probes import Outcome, ProbeResult
from slipway.providers.hbase import HBase
from slipway.providers.hbase.provider import HBaseProvider
from slipway.spec import ClusterSpecification
from tests.fakes import SITE_OPTIONS, FakeCoordinationClient

pytestmark = [pytest.mark.unit]


@dataclass
class StubProbe:
    name: str
    outcome: Outcome = Outcome.SUCCESS
    error: Exception | None = None
    calls: int = 0
    gate: threading.Event | None = None
    started: threading.Event = field(default_factory=threading.Event)

    def execute(self):
        self.calls += 1
        self.started.set()
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return ProbeResult(self.name, self.outcome, 0.001, f"call {self.calls}")


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestRunOnce:
    def test_records_latest_result_per_probe(self):
        registry = ProbeRegistry()
        registry.add(StubProbe("a"))
        registry.add(StubProbe("b", outcome=Outcome.FAILURE))

        results = registry.run_once()

        assert {r.probe for r in results} == {"a", "b"}
        assert registry.snapshot() == {"a": Outcome.SUCCESS, "b": Outcome.FAILURE}

    def test_no_probes(self):
        assert ProbeRegistry().run_once() == []

    def test_latest_replaces_previous(self):
        registry = ProbeRegistry()
        registry.add(StubProbe("a"))
        registry.run_once()
        registry.run_once()
        assert registry.latest()["a"].message == "call 2"

    def test_history_is_bounded(self):
        registry = ProbeRegistry(history_size=3)
        registry.add(StubProbe("a"))
        for _ in range(5):
            registry.run_once()

        history = registry.history("a")
        assert [r.message for r in history] == ["call 3", "call 4", "call 5"]

    def test_raising_probe_becomes_failure(self):
        registry = ProbeRegistry()
        registry.add(StubProbe("bad", error=RuntimeError("boom")))
        registry.add(StubProbe("good"))

        registry.run_once()

        latest = registry.latest()
        assert latest["bad"].outcome is Outcome.FAILURE
        assert "RuntimeError: boom" in latest["bad"].message
        assert latest["good"].success

    def test_add_replaces_same_name(self):
        registry = ProbeRegistry()
        registry.add(StubProbe("a"))
        registry.add(StubProbe("a", outcome=Outcome.FAILURE))
        assert len(registry.probes) == 1
        registry.run_once()
        assert registry.snapshot() == {"a": Outcome.FAILURE}


class TestDeferredSetup:
    def test_retried_until_it_succeeds(self):
        attempts = []

        def factory():
            attempts.append(1)
            return [StubProbe("late")] if len(attempts) >= 3 else []

        registry = ProbeRegistry(setup_attempts=10)
        registry.defer(factory)

        registry.run_once()
        registry.run_once()
        assert registry.probes == ()
        assert registry.pending_setups == 1

        registry.run_once()
        assert [p.name for p in registry.probes] == ["late"]
        assert registry.pending_setups == 0
        assert registry.snapshot() == {"late": Outcome.SUCCESS}

    def test_abandoned_after_attempts(self):
        calls = []
        registry = ProbeRegistry(setup_attempts=3)
        registry.defer(lambda: calls.append(1) or [], attempts=1)

        for _ in range(5):
            registry.run_once()

        assert len(calls) == 2
        assert registry.pending_setups == 0

    def test_raising_factory_counts_as_attempt(self):
        def factory():
            raise OSError("unreachable")

        registry = ProbeRegistry(setup_attempts=2)
        registry.defer(factory)
        registry.run_once()
        assert registry.pending_setups == 1
        registry.run_once()
        assert registry.pending_setups == 0


class TestLoop:
    def test_start_and_stop(self):
        registry = ProbeRegistry(interval=0.02)
        registry.add(StubProbe("a"))
        registry.start()
        try:
            assert registry.running
            assert wait_until(lambda: "a" in registry.latest())
        finally:
            registry.stop()

        assert not registry.running
        assert registry.probes == ()

    def test_stop_discards_in_flight_results(self):
        gate = threading.Event()
        probe = StubProbe("slow", gate=gate)
        registry = ProbeRegistry()
        registry.add(probe)

        cycle = threading.Thread(target=registry.run_once)
        cycle.start()
        assert probe.started.wait(5)

        registry.stop()
        gate.set()
        cycle.join(5)

        assert registry.latest() == {}

    def test_stop_drops_pending_setups(self):
        registry = ProbeRegistry()
        registry.defer(lambda: [])
        registry.stop()
        assert registry.pending_setups == 0


class TestClusterMonitor:
    def _provider(self, client):
        return HBaseProvider(HBase(site=SITE_OPTIONS), coordination_factory=lambda: client)

    def test_snapshot_merges_status_and_probes(self, http_server):
        client = FakeCoordinationClient()
        monitor = ClusterMonitor(self._provider(client), ProbeRegistry(interval=60))

        assert monitor.start(ClusterSpecification(), f"{http_server}/status", {}, timeout=2.0)
        try:
            client.publish("/hbase/master", b"m1:16000")
            monitor.registry.run_once()
            snapshot = monitor.snapshot()
        finally:
            monitor.stop()

        assert snapshot == {
            "info.master.address": "m1:16000",
            f"probe.http:{http_server}/status": "success",
            "probe.coordination:/hbase/master": "success",
        }
        assert client.stopped == 1

    def test_unreachable_url_is_deferred(self, closed_port_url):
        client = FakeCoordinationClient()
        monitor = ClusterMonitor(self._provider(client), ProbeRegistry(interval=60))

        monitor.start(ClusterSpecification(), closed_port_url, {}, timeout=1.0)
        try:
            assert monitor.registry.pending_setups == 1
            assert [p.name for p in monitor.registry.probes] == ["coordination:/hbase/master"]
        finally:
            monitor.stop()
        assert monitor.registry.pending_setups == 0

    def test_no_url(self):
        monitor = ClusterMonitor(self._provider(FakeCoordinationClient()), ProbeRegistry(interval=60))
        monitor.start(ClusterSpecification(), None, {})
        try:
            assert monitor.supported
            assert monitor.registry.pending_setups == 0
            assert monitor.snapshot() == {}
        finally:
            monitor.stop()

    @pytest.mark.parametrize("url", ["mailto:ops@example.com", "http://" + "a" * 64 + ".example.com/"])
    def test_malformed_url_is_not_deferred(self, url):
        monitor = ClusterMonitor(self._provider(FakeCoordinationClient()), ProbeRegistry(interval=60))
        monitor.start(ClusterSpecification(), url, {}, timeout=1.0)
        try:
            assert monitor.registry.pending_setups == 0
            assert [p.name for p in monitor.registry.probes] == ["coordination:/hbase/master"]
        finally:
            monitor.stop()
