"""Checks shared by all providers.

These only look at the cluster specification and the role catalog, so they give the
same answer on the client and inside the running controller.
"""

from __future__ import annotations

from slipway.core.exceptions import BadArgumentsError, ConfigurationError
from slipway.roles import Role, RoleCatalog
from slipway.spec import ClusterSpecification


def validate_node_count(role: Role, count: object) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        raise BadArgumentsError(f"Instance count for role '{role.name}' is not an integer: {count!r}")
    if count < 0:
        raise BadArgumentsError(f"Instance count for role '{role.name}' is negative: {count}")
    if count < role.min_instances:
        raise BadArgumentsError(
            f"requested no of {role.name} nodes: {count} is below the minimum of {role.min_instances}"
        )
    if role.max_instances is not None and count > role.max_instances:
        raise BadArgumentsError(
            f"requested no of {role.name} nodes: {count} is above the maximum of {role.max_instances}"
        )


def validate_roles(catalog: RoleCatalog, spec: ClusterSpecification) -> None:
    """Every requested role is known and every count is within its role's bounds."""
    for name in spec.roles:
        if name not in catalog:
            raise BadArgumentsError(f"There is unknown role: {name}")
    for role in catalog:
        validate_node_count(role, spec.desired_instances(role.name, 0))


def validate_binaries(spec: ClusterSpecification) -> None:
    if not spec.image_path and not spec.application_home:
        raise ConfigurationError(
            "No image path or application home directory set: "
            "one of them is needed to locate the application binaries"
        )
