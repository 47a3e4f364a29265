from __future__ import annotations

import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

from slipway.providers.hbase import HBase
from slipway.providers.hbase.provider import HBaseProvider
from tests.fakes import SITE_OPTIONS, FakeCoordinationClient, write_site_xml


@pytest.fixture
def coordination_client():
    return FakeCoordinationClient()


@pytest.fixture
def hbase_provider(coordination_client):
    return HBaseProvider(HBase(site=SITE_OPTIONS), coordination_factory=lambda: coordination_client)


@pytest.fixture
def site_writer():
    return write_site_xml


@pytest.fixture
def generated_conf_dir(tmp_path: Path):
    conf = tmp_path / "generated"
    conf.mkdir()
    write_site_xml(conf / "hbase-site.xml", SITE_OPTIONS)
    (conf / "log4j.properties").write_text("log4j.rootLogger=INFO,console\n")
    return conf


# ─── HTTP ────────────────────────────────────────────────────────────


class _Handler(BaseHTTPRequestHandler):
    routes = {"/": 200, "/status": 200, "/broken": 500, "/missing": 404}

    def do_GET(self):
        if self.path == "/moved":
            self.send_response(302)
            self.send_header("Location", "/")
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        self.send_response(self.routes.get(self.path, 404))
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, *_args):
        pass


@pytest.fixture
def http_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}"
    server.shutdown()
    server.server_close()


def get_free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def closed_port_url():
    return f"http://127.0.0.1:{get_free_port()}/"
