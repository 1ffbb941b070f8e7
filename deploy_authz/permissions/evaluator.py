"""Permission-check service contract consumed by the authorizer."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol


class ResourceType(str, Enum):
    ACCOUNT = "ACCOUNT"
    APPLICATION = "APPLICATION"


class Authorization(str, Enum):
    READ = "READ"
    WRITE = "WRITE"
    EXECUTE = "EXECUTE"


class PermissionEvaluator(Protocol):
    """Answers whether *identity* holds *authorization* on a resource.

    Backends may also expose ``preload_bulk_permissions(identity)``; callers
    treat it as an optional hint and look it up with ``getattr``.
    """

    def has_permission(
        self,
        identity: Any,
        resource_id: str,
        resource_type: ResourceType,
        authorization: Authorization,
    ) -> bool: ...


def preload_bulk_permissions(evaluator: Any, identity: Any) -> bool:
    """Invoke the backend's bulk preload hint if it has one. Returns whether it was called."""
    hook = getattr(evaluator, "preload_bulk_permissions", None)
    if hook is None:
        return False
    hook(identity)
    return True
