"""Operation descriptions and the optional scopes the authorizer probes for.

A description carries any subset of three facets:

* ``AccountScope`` – the account the operation mutates;
* ``ApplicationScope`` – applications named directly on the operation;
* ``ResourceSetScope`` – applications derived from the resources it touches.

Facets are plain optional fields set when the description is built, so the
authorizer checks presence instead of inspecting the description's type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from deploy_authz.config.security_config import AuthorizationPolicy


@dataclass(frozen=True)
class AccountScope:
    account: str | None
    application_restriction: bool = True
    # Per-type override of the policy gate; receives the policy.
    authorization_rule: Callable[[AuthorizationPolicy], bool] | None = None

    def requires_application_restriction(self) -> bool:
        return self.application_restriction

    def requires_authorization(self, policy: AuthorizationPolicy, description_type: str) -> bool:
        if self.authorization_rule is not None:
            return self.authorization_rule(policy)
        return policy.requires_authorization(description_type, self.account)


@dataclass(frozen=True)
class ApplicationScope:
    applications: list[str | None] | None = None


@dataclass(frozen=True)
class ResourceSetScope:
    resource_applications: list[str | None] | None = None


@dataclass
class OperationDescription:
    description_type: str
    account_scope: AccountScope | None = None
    application_scope: ApplicationScope | None = None
    resource_scope: ResourceSetScope | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def has_account_scope(self) -> bool:
        return self.account_scope is not None

    @property
    def has_application_scope(self) -> bool:
        return self.application_scope is not None

    @property
    def has_resource_scope(self) -> bool:
        return self.resource_scope is not None
