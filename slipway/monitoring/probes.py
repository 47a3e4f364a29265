"""Liveness probes against running role instances.

A probe is one of two kinds:

- HttpProbe: GET a URL and check the status code.
- CoordinationProbe: check that the coordination service names a primary.

Both expose ``name`` and ``execute() -> ProbeResult``. ``execute`` never
raises for the probe's own failures (timeouts, refused connections, bad
status codes); those become failed results.
"""

from __future__ import annotations

from typing import TypeAlias

import socket
import time
from dataclasses import dataclass, field
from enum import StrEnum

import httpx
from loguru import logger

from slipway.constants import PROXY_PATH_SEGMENT, PROXY_RELAY_PREFIX, WEB_PROBE_DEFAULT_CODE
from slipway.coordination import CoordinationWatcher

log = logger.bind(component="probes")


class Outcome(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of one probe execution."""

    probe: str
    outcome: Outcome
    latency: float
    message: str = ""
    timestamp: float = field(default_factory=time.time)

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.SUCCESS


@dataclass(frozen=True, slots=True)
class HttpProbe:
    """Probe that passes when a URL answers with an accepted status code.

    Args:
        url: Absolute http(s) URL to GET.
        timeout: Connect/read timeout in seconds.
        min_code: Lowest accepted status code.
        max_code: Highest accepted status code.
    """

    url: str
    timeout: float
    min_code: int = WEB_PROBE_DEFAULT_CODE
    max_code: int = WEB_PROBE_DEFAULT_CODE

    @property
    def name(self) -> str:
        return f"http:{self.url}"

    def execute(self) -> ProbeResult:
        started = time.monotonic()
        try:
            response = httpx.get(self.url, timeout=self.timeout, follow_redirects=True)
        except httpx.HTTPError as e:
            return ProbeResult(
                self.name,
                Outcome.FAILURE,
                time.monotonic() - started,
                f"Probe {self.url} failed: {type(e).__name__}: {e}",
            )

        latency = time.monotonic() - started
        code = response.status_code
        if not self.min_code <= code <= self.max_code:
            return ProbeResult(self.name, Outcome.FAILURE, latency, f"Probe {self.url} error code: {code}")
        return ProbeResult(self.name, Outcome.SUCCESS, latency, f"HTTP {code}")


@dataclass(frozen=True, slots=True)
class CoordinationProbe:
    """Probe that passes when the watcher knows the current primary."""

    watcher: CoordinationWatcher

    @property
    def name(self) -> str:
        return f"coordination:{self.watcher.path}"

    def execute(self) -> ProbeResult:
        started = time.monotonic()
        if not self.watcher.active:
            return ProbeResult(self.name, Outcome.INDETERMINATE, 0.0, "coordination watcher is not running")
        primary = self.watcher.current_primary()
        latency = time.monotonic() - started
        if primary is None:
            return ProbeResult(self.name, Outcome.FAILURE, latency, f"no primary registered at {self.watcher.path}")
        return ProbeResult(self.name, Outcome.SUCCESS, latency, f"primary at {primary}")


Probe: TypeAlias = HttpProbe | CoordinationProbe


# =============================================================================
# HTTP probe setup
# =============================================================================


def normalize_url(url: str, *, secure: bool) -> str:
    """Route scheme-less proxy paths through the relay.

    ``host:8088/proxy/app_1/`` becomes ``http://proxy/relay/host:8088/proxy/app_1/``
    (``https`` in secure mode). Anything else is returned unchanged.
    """
    if not url.startswith("http") and PROXY_PATH_SEGMENT in url:
        scheme = "https" if secure else "http"
        return f"{scheme}://{PROXY_RELAY_PREFIX}{url}"
    return url


def parse_probe_url(url: str) -> httpx.URL | None:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.host:
        return None
    try:
        parsed.host.encode("idna")
    except UnicodeError:
        return None
    return parsed


def _is_unknown_host(error: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        if isinstance(current, socket.gaierror):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return "name or service not known" in str(error).lower()


def create_http_probe(
    url: str,
    *,
    timeout: float,
    secure: bool = False,
    min_code: int = WEB_PROBE_DEFAULT_CODE,
    max_code: int = WEB_PROBE_DEFAULT_CODE,
) -> HttpProbe | None:
    """Build an HttpProbe for ``url`` if the endpoint can be reached now.

    Returns None (and logs why) for malformed URLs, unknown hosts and hosts
    that are not accepting connections yet.
    """
    target = normalize_url(url, secure=secure)
    parsed = parse_probe_url(target)
    if parsed is None:
        log.error("tracking url: {url} is malformed", url=target)
        return None

    log.info("tracking url: {url}", url=target)
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            response = client.get(parsed)
    except UnicodeError:
        log.error("tracking url: {url} is malformed", url=target)
        return None
    except httpx.HTTPError as e:
        if _is_unknown_host(e):
            log.error("host unknown: {url}", url=target)
        else:
            log.warning("tracking url {url} not reachable yet: {error}", url=target, error=e)
        return None

    log.debug("tracking url {url} answered {code}", url=target, code=response.status_code)
    return HttpProbe(url=str(parsed), timeout=timeout, min_code=min_code, max_code=max_code)
