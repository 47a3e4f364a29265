"""Lifecycle actions that can be applied to a cluster.

The set is closed: every action is a member of Action, and every place that
consumes actions matches over all of them. Names outside the set fail with
UnsupportedActionError.

Example:
    >>> action = Action.parse("flex")
    >>> action.is_valid_in(LifecyclePhase.LIVE)
    True
"""

from __future__ import annotations

from enum import StrEnum
from typing import assert_never

from slipway.core.exceptions import BadClusterStateError, UnsupportedActionError


class LifecyclePhase(StrEnum):
    """Where a cluster is in its life."""

    NOT_CREATED = "not-created"
    BUILDING = "building"
    LIVE = "live"
    FROZEN = "frozen"
    DESTROYED = "destroyed"


class Action(StrEnum):
    """Operator actions, keyed by their command-line name."""

    AM_SUICIDE = "am-suicide"
    BUILD = "build"
    CREATE = "create"
    DESTROY = "destroy"
    ECHO = "echo"
    EMERGENCY_FORCE_KILL = "emergency-force-kill"
    EXISTS = "exists"
    FLEX = "flex"
    FREEZE = "freeze"
    GETCONF = "getconf"
    HELP = "help"
    KILL_CONTAINER = "kill-container"
    LIST = "list"
    MIGRATE = "migrate"
    MONITOR = "monitor"
    PREFLIGHT = "preflight"
    RECONFIGURE = "reconfigure"
    REIMAGE = "reimage"
    STATUS = "status"
    THAW = "thaw"
    USAGE = "usage"
    VERSION = "version"

    @classmethod
    def parse(cls, name: str) -> Action:
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise UnsupportedActionError(name) from None

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def valid_phases(self) -> frozenset[LifecyclePhase]:
        return _valid_phases(self)

    def is_valid_in(self, phase: LifecyclePhase) -> bool:
        return phase in _valid_phases(self)


_ANY_PHASE = frozenset(LifecyclePhase)

_DESCRIPTIONS: dict[Action, str] = {
    Action.AM_SUICIDE: "Tell the application master to simulate a process failure by terminating itself",
    Action.BUILD: "Build a cluster specification but do not start it",
    Action.CREATE: "Create a live cluster",
    Action.DESTROY: "Destroy a frozen cluster",
    Action.ECHO: "Echo a message through the application master",
    Action.EMERGENCY_FORCE_KILL: "Force kill an application by its resource-manager application ID",
    Action.EXISTS: "Probe for a cluster running",
    Action.FLEX: "Flex a cluster",
    Action.FREEZE: "Freeze/suspend a running cluster",
    Action.GETCONF: "Get the configuration of a cluster",
    Action.HELP: "Print help information",
    Action.KILL_CONTAINER: "Kill a container in the cluster",
    Action.LIST: "List running clusters",
    Action.MIGRATE: "Migrate a frozen cluster to the current specification format",
    Action.MONITOR: "Monitor a running cluster",
    Action.PREFLIGHT: "Check that the environment can host a cluster",
    Action.RECONFIGURE: "Push configuration changes to a running cluster",
    Action.REIMAGE: "Replace the image of a frozen cluster",
    Action.STATUS: "Get the status of a cluster",
    Action.THAW: "Thaw a frozen cluster",
    Action.USAGE: "Print usage information",
    Action.VERSION: "Print the version information",
}


def _valid_phases(action: Action) -> frozenset[LifecyclePhase]:
    P = LifecyclePhase
    match action:
        case Action.BUILD | Action.CREATE:
            return frozenset({P.NOT_CREATED, P.DESTROYED})
        case (
            Action.FLEX
            | Action.GETCONF
            | Action.KILL_CONTAINER
            | Action.RECONFIGURE
            | Action.AM_SUICIDE
        ):
            return frozenset({P.LIVE})
        case Action.STATUS | Action.MONITOR | Action.FREEZE:
            return frozenset({P.LIVE, P.BUILDING})
        case Action.THAW | Action.DESTROY | Action.MIGRATE | Action.REIMAGE:
            return frozenset({P.FROZEN})
        case (
            Action.LIST
            | Action.EXISTS
            | Action.PREFLIGHT
            | Action.EMERGENCY_FORCE_KILL
            | Action.ECHO
            | Action.HELP
            | Action.USAGE
            | Action.VERSION
        ):
            return _ANY_PHASE
        case _:
            assert_never(action)


def require_valid(action: Action | str, phase: LifecyclePhase) -> Action:
    """Resolve an action and check it against the cluster's phase.

    Raises:
        UnsupportedActionError: If the name is not a known action.
        BadClusterStateError: If the action is not valid in ``phase``.
    """
    resolved = action if isinstance(action, Action) else Action.parse(action)
    if not resolved.is_valid_in(phase):
        allowed = ", ".join(sorted(p.value for p in resolved.valid_phases))
        raise BadClusterStateError(
            f"Action '{resolved}' is not valid for a cluster in phase '{phase}' "
            f"(valid in: {allowed})"
        )
    return resolved
