from pathlib import Path

import pytest
from loguru import logger

from slipway.logging import LogConfig, setup_logging, teardown_logging
from slipway.monitoring.probes import create_http_probe

pytestmark = [pytest.mark.unit]


class TestLogging:
    def test_file_handler_receives_library_logs(self, tmp_path: Path):
        log_file = tmp_path / "slipway.log"
        handlers = setup_logging(LogConfig(level="DEBUG", file=str(log_file), console=False))
        try:
            assert len(handlers) == 1
            create_http_probe("mailto:ops@example.com", timeout=1.0)
            logger.complete()
        finally:
            teardown_logging(handlers)

        content = log_file.read_text()
        assert "tracking url: mailto:ops@example.com is malformed" in content
        assert "component=probes" in content

    def test_console_only(self):
        handlers = setup_logging(LogConfig(console=True))
        try:
            assert len(handlers) == 1
        finally:
            teardown_logging(handlers)

    def test_config_defaults(self):
        config = LogConfig()
        assert (config.level, config.file, config.console) == ("INFO", None, True)

    def test_other_records_are_left_untouched(self):
        seen = []
        sink = logger.add(lambda message: seen.append(dict(message.record["extra"])), format="{message}")
        handlers = setup_logging(LogConfig(console=True))
        try:
            create_http_probe("mailto:ops@example.com", timeout=1.0)
            logger.bind(component="app").info("embedding application record")
        finally:
            teardown_logging(handlers)
            logger.remove(sink)

        assert {"component": "app"} in seen
        assert all("_ctx" not in extra for extra in seen if extra.get("component") == "app")
