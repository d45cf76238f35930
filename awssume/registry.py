"""In-memory ordered collection of configured Roles."""

from typing import Iterable, Iterator, List, Optional

import structlog

from .errors import RoleExistsError, RoleNotFoundError
from .models import Role

logger = structlog.get_logger(__name__)


class RoleRegistry:
    """Ordered collection of Roles with unique aliases.

    ``add`` keeps the collection sorted by alias in descending order.
    ``update_by_alias`` removes the old entry and appends the new one at the
    end without re-sorting, so order after an update is not guaranteed.
    """

    def __init__(self, roles: Optional[Iterable[Role]] = None):
        self._roles: List[Role] = list(roles or [])

    def __len__(self) -> int:
        return len(self._roles)

    def __iter__(self) -> Iterator[Role]:
        return iter(list(self._roles))

    def all(self) -> List[Role]:
        """Return the configured Roles in their current order."""
        return list(self._roles)

    def by_alias(self, alias: str) -> Role:
        """Return the Role configured under ``alias``.

        Raises:
            RoleNotFoundError: If no Role has that alias
        """
        for role in self._roles:
            if role.alias == alias:
                return role

        raise RoleNotFoundError(alias)

    def add(self, role: Role) -> None:
        """Add a Role and re-sort the collection descending by alias.

        Raises:
            RoleExistsError: If the alias is already configured (nothing is changed)
        """
        if any(r.alias == role.alias for r in self._roles):
            raise RoleExistsError(role.alias)

        roles = self._roles + [role]
        roles.sort(key=lambda r: r.alias, reverse=True)
        self._roles = roles

        logger.debug("Role added", alias=role.alias, arn=str(role.arn))

    def remove_by_alias(self, alias: str) -> None:
        """Remove the Role configured under ``alias``.

        Raises:
            RoleNotFoundError: If no Role has that alias
        """
        for i, role in enumerate(self._roles):
            if role.alias == alias:
                del self._roles[i]
                logger.debug("Role removed", alias=alias)
                return

        raise RoleNotFoundError(alias)

    def update_by_alias(self, alias: str, role: Role) -> None:
        """Replace the Role under ``alias`` with ``role``, appended at the end.

        Raises:
            RoleNotFoundError: If no Role has that alias
            RoleExistsError: If ``role`` is renamed to an alias held by another Role
        """
        self.by_alias(alias)
        if role.alias != alias and any(r.alias == role.alias for r in self._roles):
            raise RoleExistsError(role.alias)

        self.remove_by_alias(alias)
        self._roles.append(role)
