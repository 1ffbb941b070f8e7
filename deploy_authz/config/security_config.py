"""Operations security config – YAML-backed policy deciding which operations need authorization."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Protocol

import yaml

_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "..", "..", "data", "security_config.yaml")
CONFIG_ENV_VAR = "DEPLOY_AUTHZ_SECURITY_CONFIG"

TRUE_VALUES = {"1", "true", "yes", "y", "on"}
FALSE_VALUES = {"0", "false", "no", "n", "off"}


class SecurityConfigError(ValueError):
    pass


class AuthorizationPolicy(Protocol):
    def requires_authorization(self, description_type: str, account: str | None) -> bool: ...


@dataclass(frozen=True)
class OperationsSecurityConfig:
    enabled: bool = True
    skip_description_types: tuple[str, ...] = ()
    skip_accounts: tuple[str, ...] = ()

    def requires_authorization(self, description_type: str, account: str | None) -> bool:
        if not self.enabled:
            return False
        if description_type in self.skip_description_types:
            return False
        if account is not None and account in self.skip_accounts:
            return False
        return True


def _env(name: str, default: str = "") -> str:
    return str(os.getenv(name, default)).strip()


def _parse_bool(raw: Any, key: str, default: bool) -> bool:
    # Unrecognised values raise rather than read as false.
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        value = raw.strip().lower()
        if not value:
            return default
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
    raise SecurityConfigError(f"'{key}' must be a boolean, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    return _parse_bool(os.getenv(name), name, default)


def _names(raw: Any, key: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise SecurityConfigError(f"'{key}' must be a list, got {type(raw).__name__}")
    return tuple(str(item).strip() for item in raw if item is not None)


def _load_yaml(path: str) -> dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SecurityConfigError(f"Security config {path} must be a mapping")
    return data


def config_from_dict(data: dict[str, Any]) -> OperationsSecurityConfig:
    skip = data.get("skip_authorization") or {}
    if not isinstance(skip, dict):
        raise SecurityConfigError("'skip_authorization' must be a mapping")
    return OperationsSecurityConfig(
        enabled=_parse_bool(data.get("enabled"), "enabled", True),
        skip_description_types=_names(skip.get("description_types"), "skip_authorization.description_types"),
        skip_accounts=_names(skip.get("accounts"), "skip_authorization.accounts"),
    )


def load_security_config(path: str | None = None) -> OperationsSecurityConfig:
    """Load the operations security config.

    Resolution order: explicit *path*, ``DEPLOY_AUTHZ_SECURITY_CONFIG``, then the
    bundled default.  ``DEPLOY_AUTHZ_ENABLED`` overrides the file's ``enabled``.
    """
    path = path or _env(CONFIG_ENV_VAR) or _CONFIG_PATH
    data = _load_yaml(path)
    if os.getenv("DEPLOY_AUTHZ_ENABLED") is not None:
        data["enabled"] = _env_bool("DEPLOY_AUTHZ_ENABLED", True)
    return config_from_dict(data)


def validate_security_config(config: OperationsSecurityConfig) -> list[str]:
    issues: list[str] = []
    for label, names in (
        ("skip_authorization.description_types", config.skip_description_types),
        ("skip_authorization.accounts", config.skip_accounts),
    ):
        if any(not n for n in names):
            issues.append(f"{label} contains a blank entry")
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            issues.append(f"{label} lists duplicates: {', '.join(dupes)}")
    return issues
