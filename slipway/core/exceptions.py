"""Exception hierarchy for Slipway.

All slipway-specific exceptions inherit from SlipwayError, so a caller can
catch everything raised by the core with a single except clause. The
subclasses split into three kinds:

- input errors (BadArgumentsError, ConfigurationError, ...): the request was
  wrong, report it and do not retry.
- transient errors (AdminConnectionError): the environment was not ready.
- internal errors (InternalStateError): the core is inconsistent, a bug.
"""

from __future__ import annotations


class SlipwayError(Exception):
    """Base exception for all Slipway errors."""


class BadArgumentsError(SlipwayError):
    """Raised when a request or cluster specification is invalid."""


class UnknownRoleError(BadArgumentsError):
    """Raised when a role is not part of the application's role catalog."""

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"Unknown role {role!r}")


class ConfigurationError(SlipwayError):
    """Raised for invalid configuration or missing required settings."""


class BadClusterStateError(SlipwayError):
    """Raised when an action is not valid in the cluster's lifecycle phase."""


class UnsupportedActionError(SlipwayError):
    """Raised for an action name outside the known action set."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unsupported action {name!r}")


class AdminConnectionError(SlipwayError):
    """Raised when the application's administrative API cannot be used."""


class InternalStateError(SlipwayError):
    """Raised when the core reaches a state that indicates a programming error."""
