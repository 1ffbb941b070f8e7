"""Static permission store – in-memory grants seeded from YAML or dicts.

Stands in for a remote permission service in local runs and tests.
"""

from __future__ import annotations

from typing import Any

import yaml

from deploy_authz.config.security_config import SecurityConfigError
from deploy_authz.permissions.evaluator import Authorization, ResourceType

_SECTIONS = {"accounts": ResourceType.ACCOUNT, "applications": ResourceType.APPLICATION}


def _username(identity: Any) -> str | None:
    if identity is None:
        return None
    if isinstance(identity, str):
        return identity
    return getattr(identity, "username", None)


class StaticPermissionEvaluator:
    """Grant table keyed by (resource type, resource id) -> set of users.

    ``WRITE`` grants imply ``READ``.  Admins pass every check.  Every call is
    recorded in ``calls`` so callers can assert on what was asked.
    """

    def __init__(self, grants: dict[str, Any] | None = None):
        self._grants: dict[tuple[ResourceType, str], dict[str, set[Authorization]]] = {}
        self._admins: set[str] = set()
        self.calls: list[tuple[str | None, str, ResourceType, Authorization]] = []
        self.preloads: list[str | None] = []
        if grants:
            self.load(grants)

    @classmethod
    def from_yaml(cls, path: str) -> "StaticPermissionEvaluator":
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise SecurityConfigError(f"Permission grants in {path} must be a mapping")
        return cls(data)

    def load(self, grants: dict[str, Any]) -> None:
        """Merge grants shaped as ``{accounts: {name: {WRITE: [users]}}, applications: ..., admins: [...]}``.

        A bare user list is shorthand for a ``WRITE`` grant.
        """
        self._admins.update(grants.get("admins") or [])
        for section, resource_type in _SECTIONS.items():
            for resource_id, entry in (grants.get(section) or {}).items():
                if isinstance(entry, list):
                    entry = {Authorization.WRITE.value: entry}
                if not isinstance(entry, dict):
                    raise SecurityConfigError(f"Invalid grant for {section}.{resource_id}")
                for level, users in entry.items():
                    self.grant(resource_type, str(resource_id), Authorization(level), *users)

    def grant(self, resource_type: ResourceType, resource_id: str, authorization: Authorization, *users: str) -> None:
        table = self._grants.setdefault((resource_type, resource_id), {})
        for user in users:
            table.setdefault(user, set()).add(authorization)

    def preload_bulk_permissions(self, identity: Any) -> None:
        self.preloads.append(_username(identity))

    def has_permission(
        self,
        identity: Any,
        resource_id: str,
        resource_type: ResourceType,
        authorization: Authorization,
    ) -> bool:
        user = _username(identity)
        self.calls.append((user, resource_id, resource_type, authorization))
        if user is None:
            return False
        if user in self._admins:
            return True
        held = self._grants.get((resource_type, resource_id), {}).get(user, set())
        if authorization in held:
            return True
        return authorization == Authorization.READ and Authorization.WRITE in held
