"""
Role catalog - the immutable table the authorization engine reads from.

A catalog holds three relations over role identifiers:
- ranks: total order of privilege (higher integer = more privileged)
- base_permissions: permissions granted directly to a role
- inherits_from: roles whose base permissions a role also receives

The inheritance relation is always stored as its transitive closure, whether
the source lists full ancestry ("flattened") or only immediate parents
("direct"). Construction validates the structure and raises
ConfigurationError on any problem; a catalog that exists is well-formed.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Literal

from pydantic import ValidationError as PydanticValidationError

from ..errors import ConfigurationError
from ..schemas.catalog import CatalogDocument
from . import constants
from .constants import is_wildcard

logger = logging.getLogger("rolegate.catalog")

InheritanceMode = Literal["flattened", "direct"]

_EMPTY: frozenset[str] = frozenset()


@dataclass(frozen=True)
class RoleDisplayInfo:
    name: str
    description: str
    color: str = "gray"
    icon: str = "mdi:account"


def _frozen_mapping(data: dict) -> Mapping:
    return MappingProxyType(dict(data))


@dataclass(frozen=True)
class RoleCatalog:
    ranks: Mapping[str, int]
    base_permissions: Mapping[str, frozenset[str]]
    inherits_from: Mapping[str, frozenset[str]]
    super_admin_role: str | None = None
    admin_role: str | None = None
    display_info: Mapping[str, RoleDisplayInfo] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def roles(self) -> tuple[str, ...]:
        """Catalog roles ordered by rank, least privileged first."""
        return tuple(sorted(self.ranks, key=lambda role: (self.ranks[role], role)))

    def __contains__(self, role: object) -> bool:
        return role in self.ranks

    @classmethod
    def build(
        cls,
        ranks: Mapping[str, int],
        base_permissions: Mapping[str, Iterable[str]],
        inherits_from: Mapping[str, Iterable[str]],
        *,
        inheritance: InheritanceMode = "flattened",
        super_admin_role: str | None = None,
        admin_role: str | None = None,
        display_info: Mapping[str, RoleDisplayInfo | Mapping[str, str]] | None = None,
        validate_acyclic: bool = True,
        enforce_unique_ranks: bool = True,
    ) -> "RoleCatalog":
        """Validate the raw tables and build an immutable catalog.

        Args:
            ranks: Role -> privilege rank (integers >= 1)
            base_permissions: Role -> directly granted permissions
            inherits_from: Role -> inherited roles (full ancestry or parents only,
                see ``inheritance``)
            inheritance: "flattened" when every list already holds the full
                ancestry, "direct" when it holds immediate parents only
            super_admin_role: Role that may assign any role
            admin_role: Role that may assign any role except super_admin_role
            display_info: Optional presentation metadata per role
            validate_acyclic: Reject inheritance cycles
            enforce_unique_ranks: Reject two roles sharing one rank

        Raises:
            ConfigurationError: If the tables are structurally invalid
        """
        if inheritance not in ("flattened", "direct"):
            raise ConfigurationError(f"Unknown inheritance mode '{inheritance}'")

        problems: list[str] = []

        clean_ranks: dict[str, int] = {}
        for role, rank in ranks.items():
            if not isinstance(role, str) or not role:
                problems.append(f"Role identifier must be a non-empty string, got {role!r}")
                continue
            if isinstance(rank, bool) or not isinstance(rank, int):
                problems.append(f"Rank of role '{role}' must be an integer, got {rank!r}")
                continue
            if rank < 1:
                problems.append(f"Rank of role '{role}' must be >= 1, got {rank}")
                continue
            clean_ranks[role] = rank

        if enforce_unique_ranks:
            roles_by_rank: dict[int, list[str]] = {}
            for role, rank in clean_ranks.items():
                roles_by_rank.setdefault(rank, []).append(role)
            for rank, roles in sorted(roles_by_rank.items()):
                if len(roles) > 1:
                    problems.append(
                        f"Rank {rank} is shared by roles: {', '.join(sorted(roles))}"
                    )

        clean_permissions: dict[str, frozenset[str]] = {}
        for role, permissions in base_permissions.items():
            if role not in clean_ranks:
                problems.append(f"Permissions defined for unranked role '{role}'")
                continue
            granted = set()
            for permission in permissions:
                if not isinstance(permission, str) or not permission:
                    problems.append(
                        f"Role '{role}' has a non-string or empty permission: {permission!r}"
                    )
                elif is_wildcard(permission):
                    problems.append(
                        f"Role '{role}' has wildcard permission '{permission}'"
                    )
                else:
                    granted.add(permission)
            clean_permissions[role] = frozenset(granted)

        declared: dict[str, frozenset[str]] = {}
        for role, parents in inherits_from.items():
            if role not in clean_ranks:
                problems.append(f"Inheritance defined for unranked role '{role}'")
                continue
            parents = frozenset(parents)
            for parent in sorted(parents):
                if parent not in clean_ranks:
                    problems.append(f"Role '{role}' inherits from unknown role '{parent}'")
                elif parent == role:
                    problems.append(f"Role '{role}' inherits from itself")
            declared[role] = frozenset(p for p in parents if p in clean_ranks and p != role)

        for label, sentinel in (
            ("super_admin_role", super_admin_role),
            ("admin_role", admin_role),
        ):
            if sentinel is not None and sentinel not in clean_ranks:
                problems.append(f"{label} '{sentinel}' is not a ranked role")

        if problems:
            raise ConfigurationError(problems)

        if validate_acyclic:
            cycle = _find_cycle(declared)
            if cycle:
                raise ConfigurationError(
                    f"Inheritance cycle detected: {' -> '.join(cycle)}"
                )

        closure = _transitive_closure(clean_ranks, declared)

        for role in sorted(declared):
            if closure[role] != declared[role] and inheritance == "flattened":
                missing = sorted(closure[role] - declared[role])
                logger.warning(
                    "Flattened inheritance list of role '%s' is missing ancestors %s; "
                    "using the computed closure",
                    role,
                    missing,
                )
            higher = sorted(
                parent for parent in closure[role]
                if clean_ranks[parent] >= clean_ranks[role]
            )
            if higher:
                logger.warning(
                    "Role '%s' inherits from roles ranked at or above it: %s",
                    role,
                    higher,
                )

        clean_display: dict[str, RoleDisplayInfo] = {}
        for role, info in (display_info or {}).items():
            if role not in clean_ranks:
                continue
            if not isinstance(info, RoleDisplayInfo):
                info = RoleDisplayInfo(**info)
            clean_display[role] = info

        catalog = cls(
            ranks=_frozen_mapping(clean_ranks),
            base_permissions=_frozen_mapping(
                {role: clean_permissions.get(role, _EMPTY) for role in clean_ranks}
            ),
            inherits_from=_frozen_mapping(closure),
            super_admin_role=super_admin_role,
            admin_role=admin_role,
            display_info=_frozen_mapping(clean_display),
        )
        logger.info(
            "Role catalog built: %d roles, %d distinct permissions",
            len(catalog.ranks),
            len(frozenset().union(*catalog.base_permissions.values())),
        )
        return catalog


def _find_cycle(parents: Mapping[str, frozenset[str]]) -> list[str] | None:
    """Return one inheritance cycle as a role path, or None."""
    visiting: set[str] = set()
    done: set[str] = set()

    for start in sorted(parents):
        if start in done:
            continue
        # Iterative DFS; the path stack mirrors the recursion stack.
        path: list[str] = [start]
        iterators = [iter(sorted(parents.get(start, _EMPTY)))]
        visiting.add(start)
        while iterators:
            child = next(iterators[-1], None)
            if child is None:
                iterators.pop()
                finished = path.pop()
                visiting.discard(finished)
                done.add(finished)
                continue
            if child in visiting:
                return path[path.index(child):] + [child]
            if child in done:
                continue
            visiting.add(child)
            path.append(child)
            iterators.append(iter(sorted(parents.get(child, _EMPTY))))
    return None


def _transitive_closure(
    ranks: Mapping[str, int],
    parents: Mapping[str, frozenset[str]],
) -> dict[str, frozenset[str]]:
    closure: dict[str, frozenset[str]] = {}
    for role in ranks:
        seen: set[str] = set()
        pending = list(parents.get(role, _EMPTY))
        while pending:
            ancestor = pending.pop()
            if ancestor in seen or ancestor == role:
                continue
            seen.add(ancestor)
            pending.extend(parents.get(ancestor, _EMPTY))
        closure[role] = frozenset(seen)
    return closure


def default_catalog() -> RoleCatalog:
    """Build the catalog from the built-in dashboard contract."""
    return RoleCatalog.build(
        constants.ROLE_HIERARCHY,
        constants.BASE_ROLE_PERMISSIONS,
        constants.ROLE_INHERITANCE,
        inheritance="flattened",
        super_admin_role=constants.Role.SUPER_ADMIN.value,
        admin_role=constants.Role.ADMIN.value,
        display_info=constants.ROLE_DISPLAY_INFO,
    )


def catalog_from_document(
    document: CatalogDocument,
    *,
    inheritance: InheritanceMode = "flattened",
    validate_acyclic: bool = True,
    enforce_unique_ranks: bool = True,
) -> RoleCatalog:
    """Build a catalog from a parsed document.

    The document's own ``inheritance`` field wins over the ``inheritance``
    argument when present.
    """
    problems = []
    seen: set[str] = set()
    for definition in document.roles:
        if definition.name in seen:
            problems.append(f"Role '{definition.name}' is defined more than once")
        seen.add(definition.name)
    if problems:
        raise ConfigurationError(problems)

    return RoleCatalog.build(
        {definition.name: definition.rank for definition in document.roles},
        {definition.name: definition.permissions for definition in document.roles},
        {definition.name: definition.inherits for definition in document.roles},
        inheritance=document.inheritance or inheritance,
        super_admin_role=document.super_admin_role,
        admin_role=document.admin_role,
        display_info={
            definition.name: definition.display.model_dump()
            for definition in document.roles
            if definition.display is not None
        },
        validate_acyclic=validate_acyclic,
        enforce_unique_ranks=enforce_unique_ranks,
    )


def load_catalog_file(
    path: str | Path,
    *,
    inheritance: InheritanceMode = "flattened",
    validate_acyclic: bool = True,
    enforce_unique_ranks: bool = True,
) -> RoleCatalog:
    """Read a JSON catalog document from disk and build a catalog.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid JSON,
            does not match the document schema, or fails catalog validation
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read catalog file '{path}': {exc}") from exc

    try:
        document = CatalogDocument.model_validate(json.loads(raw))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Catalog file '{path}' is malformed JSON: {exc}") from exc
    except PydanticValidationError as exc:
        raise ConfigurationError(
            [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            ]
        ) from exc

    logger.info("Loading role catalog from %s", path)
    return catalog_from_document(
        document,
        inheritance=inheritance,
        validate_acyclic=validate_acyclic,
        enforce_unique_ranks=enforce_unique_ranks,
    )
