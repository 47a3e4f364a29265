"""Role descriptions for deployable applications.

A RoleCatalog is the static list of roles an application type supports.
It is built once per provider and never changes afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from slipway.core.exceptions import UnknownRoleError


@dataclass(frozen=True, slots=True)
class Role:
    """A named category of instance within a deployed cluster.

    Args:
        name: Role key, unique within an application type.
        id: Stable numeric key, used by the resource manager as priority.
        info_port: Default port of the role's info/web UI, if it has one.
        min_instances: Lowest instance count a specification may request.
        max_instances: Highest instance count, or None for unbounded.
    """

    name: str
    id: int
    info_port: int | None = None
    min_instances: int = 0
    max_instances: int | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("role name must not be empty")
        if self.min_instances < 0:
            raise ValueError(f"min_instances must be >= 0, got {self.min_instances}")
        if self.max_instances is not None and self.max_instances < self.min_instances:
            raise ValueError(
                f"max_instances ({self.max_instances}) is below "
                f"min_instances ({self.min_instances}) for role '{self.name}'"
            )


class RoleCatalog:
    """Immutable, ordered set of roles keyed by name."""

    __slots__ = ("_roles",)

    def __init__(self, roles: Iterable[Role]) -> None:
        by_name: dict[str, Role] = {}
        for role in roles:
            if role.name in by_name:
                raise ValueError(f"duplicate role '{role.name}'")
            by_name[role.name] = role
        self._roles = by_name

    def __contains__(self, name: object) -> bool:
        return name in self._roles

    def __iter__(self) -> Iterator[Role]:
        return iter(self._roles.values())

    def __len__(self) -> int:
        return len(self._roles)

    def __repr__(self) -> str:
        return f"RoleCatalog({list(self._roles)})"

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._roles)

    def get(self, name: str) -> Role | None:
        return self._roles.get(name)

    def require(self, name: str) -> Role:
        """Look up a role, raising UnknownRoleError if it is not defined."""
        role = self._roles.get(name)
        if role is None:
            raise UnknownRoleError(name)
        return role
