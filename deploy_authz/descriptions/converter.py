"""Description converter – turn raw operation payloads into descriptions."""

from __future__ import annotations

from typing import Any

from deploy_authz.descriptions.capabilities import (
    AccountScope,
    ApplicationScope,
    OperationDescription,
    ResourceSetScope,
)

# ---------- registered operation types ----------

# Each entry declares which scopes the operation carries.  ``resources`` lists
# the payload keys holding resource names (``app-stack-detail-vNNN``).
OPERATION_TYPES: dict[str, dict[str, Any]] = {
    "createServerGroup": {"account": True, "applications": True, "resources": []},
    "cloneServerGroup": {"account": True, "applications": True, "resources": ["source.serverGroupName"]},
    "destroyServerGroup": {"account": True, "resources": ["serverGroupName"]},
    "resizeServerGroup": {"account": True, "resources": ["serverGroupName"]},
    "enableServerGroup": {"account": True, "resources": ["serverGroupName"]},
    "disableServerGroup": {"account": True, "resources": ["serverGroupName"]},
    "terminateInstances": {"account": True, "resources": ["serverGroupName"]},
    "upsertLoadBalancer": {"account": True, "applications": True, "resources": ["loadBalancerName"]},
    "deleteLoadBalancer": {"account": True, "resources": ["loadBalancerName", "loadBalancerNames"]},
    "upsertSecurityGroup": {"account": True, "applications": True, "resources": ["securityGroupName"]},
    "deleteManifest": {"account": True, "applications": True, "resources": ["manifestNames"]},
    # Images are shared across applications.
    "upsertImageTags": {"account": True, "application_restriction": False, "resources": []},
    "saveSnapshot": {"applications": True, "resources": []},
    "restoreSnapshot": {"applications": True, "resources": []},
}


def application_of(resource_name: str | None) -> str | None:
    """Return the application encoded in a ``app-stack-detail-vNNN`` name."""
    if resource_name is None:
        return None
    if not isinstance(resource_name, str):
        raise ValueError(f"Resource name must be a string, got {type(resource_name).__name__}")
    app = resource_name.split("-", 1)[0].strip()
    return app or None


def _lookup(payload: dict[str, Any], dotted: str) -> Any:
    value: Any = payload
    for part in dotted.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _detect_account(payload: dict[str, Any]) -> str | None:
    return payload.get("account") or payload.get("credentials")


def _detect_applications(payload: dict[str, Any]) -> list[str | None] | None:
    apps = payload.get("applications")
    if apps is None and "application" in payload:
        apps = [payload["application"]]
    if apps is None:
        return None
    if isinstance(apps, str):
        apps = [apps]
    if not isinstance(apps, (list, tuple)):
        raise ValueError(f"'applications' must be a list, got {type(apps).__name__}")
    for app in apps:
        if app is not None and not isinstance(app, str):
            raise ValueError(f"Application name must be a string, got {type(app).__name__}")
    return list(apps)


def _detect_resource_applications(payload: dict[str, Any], keys: list[str]) -> list[str | None]:
    apps: list[str | None] = []
    for key in keys:
        value = _lookup(payload, key)
        if value is None:
            continue
        names = value if isinstance(value, (list, tuple)) else [value]
        apps.extend(application_of(n) for n in names)
    return apps


def convert_operation(payload: dict[str, Any], operation_types: dict[str, dict[str, Any]] | None = None) -> OperationDescription:
    """Convert a raw ``{"type": ..., ...}`` payload into an ``OperationDescription``.

    Unregistered types yield a description with no scopes at all.
    """
    registry = operation_types if operation_types is not None else OPERATION_TYPES
    description_type = payload.get("type")
    if not description_type:
        raise ValueError("Operation payload is missing 'type'")

    shape = registry.get(description_type, {})
    description = OperationDescription(description_type=description_type, payload=dict(payload))

    if shape.get("account"):
        description.account_scope = AccountScope(
            account=_detect_account(payload),
            application_restriction=shape.get("application_restriction", True),
        )
    if shape.get("applications"):
        description.application_scope = ApplicationScope(_detect_applications(payload))
    if shape.get("resources"):
        description.resource_scope = ResourceSetScope(
            _detect_resource_applications(payload, shape["resources"])
        )
    return description
