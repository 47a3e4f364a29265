from slipway.monitoring.probes import (
    CoordinationProbe,
    HttpProbe,
    Outcome,
    Probe,
    ProbeResult,
    create_http_probe,
    normalize_url,
)
from slipway.monitoring.registry import ProbeRegistry
from slipway.monitoring.monitor import ClusterMonitor

__all__ = [
    "ClusterMonitor",
    "CoordinationProbe",
    "HttpProbe",
    "Outcome",
    "Probe",
    "ProbeRegistry",
    "ProbeResult",
    "create_http_probe",
    "normalize_url",
]
