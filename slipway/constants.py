"""Centralized constants for Slipway.

Names and paths shared between the launch builder, the monitoring code and
the resource-manager submission layer live here so they stay consistent.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Staging Layout
# =============================================================================

PROPAGATED_CONF_DIR_NAME: Final = "propagatedconf"
LOCAL_TARBALL_INSTALL_SUBDIR: Final = "lib"
PROPAGATED_CONFDIR_ENV: Final = "PROPAGATED_CONFDIR"

# Expanded by the resource manager on the node, not by us.
PWD_EXPANSION: Final = "$PWD"
LOG_DIR_EXPANSION: Final = "<LOG_DIR>"

ENV_PREFIX: Final = "env."
LOGDIR_ENV: Final = "LOGDIR"


# =============================================================================
# Status Keys
# =============================================================================

INFO_MASTER_ADDRESS: Final = "info.master.address"
PROBE_STATUS_PREFIX: Final = "probe."


# =============================================================================
# Monitoring Defaults
# =============================================================================

WEB_PROBE_DEFAULT_CODE: Final = 200
KEY_PROBE_MIN_CODE: Final = "slipway.probe.http.min-code"
KEY_PROBE_MAX_CODE: Final = "slipway.probe.http.max-code"

PROXY_PATH_SEGMENT: Final = "/proxy/"
PROXY_RELAY_PREFIX: Final = "proxy/relay/"

DEFAULT_PROBE_TIMEOUT: Final = 10.0
DEFAULT_MONITOR_INTERVAL: Final = 30.0
DEFAULT_PROBE_HISTORY: Final = 10
DEFAULT_SETUP_ATTEMPTS: Final = 10
