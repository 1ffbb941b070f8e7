"""Policy engine – decide whether an operation description may proceed.

The authorizer checks WRITE access on the target account and on every
application the operation touches.  Denials are reported through the error
collector, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from deploy_authz.config.security_config import AuthorizationPolicy
from deploy_authz.descriptions.capabilities import OperationDescription
from deploy_authz.errors.collector import ErrorCollector
from deploy_authz.observability.metrics import AuthorizationMetrics, default_metrics
from deploy_authz.permissions.evaluator import (
    Authorization,
    PermissionEvaluator,
    ResourceType,
    preload_bulk_permissions,
)

logger = structlog.get_logger(__name__)

AUTHORIZATION_CODE = "authorization"


@dataclass
class EvaluationContext:
    account: str | None = None
    applications: list[str] = field(default_factory=list)
    requires_application_restriction: bool = True
    skipped: bool = False

    def add_applications(self, applications: list[str | None] | None) -> None:
        # Null entries are dropped; duplicates keep their first position.
        for app in applications or []:
            if app is not None and app not in self.applications:
                self.applications.append(app)


@dataclass
class AuthorizationDecision:
    description_type: str
    account: str | None
    account_allowed: bool = True
    application_results: dict[str, bool] = field(default_factory=dict)
    skipped: bool = False

    @property
    def allowed(self) -> bool:
        return self.account_allowed and all(self.application_results.values())


def build_context(description: OperationDescription, policy: AuthorizationPolicy) -> EvaluationContext:
    """Derive the per-call evaluation context from the scopes on *description*."""
    ctx = EvaluationContext()

    scope = description.account_scope
    if scope is not None:
        ctx.requires_application_restriction = scope.requires_application_restriction()
        if scope.requires_authorization(policy, description.description_type):
            ctx.account = scope.account
        else:
            ctx.skipped = True

    if description.application_scope is not None:
        ctx.add_applications(description.application_scope.applications)
    if description.resource_scope is not None:
        ctx.add_applications(description.resource_scope.resource_applications)
    return ctx


class DescriptionAuthorizer:
    def __init__(
        self,
        permission_evaluator: PermissionEvaluator | None,
        policy: AuthorizationPolicy,
        metrics: AuthorizationMetrics | None = None,
    ):
        self.permission_evaluator = permission_evaluator
        self.policy = policy
        self.metrics = metrics if metrics is not None else default_metrics()

    def authorize(
        self,
        description: OperationDescription | None,
        identity: Any,
        errors: ErrorCollector,
    ) -> AuthorizationDecision | None:
        """Check *identity* against the account and applications of *description*.

        Returns ``None`` without recording anything when no permission evaluator
        is wired or there is no description; the operation is then implicitly
        authorized.
        """
        if self.permission_evaluator is None or description is None:
            return None

        evaluator = self.permission_evaluator
        description_class = description.description_type
        ctx = build_context(description, self.policy)
        decision = AuthorizationDecision(description_class, ctx.account, skipped=ctx.skipped)

        if ctx.skipped:
            skipped_account = description.account_scope.account
            self.metrics.record_skip(description_class, skipped_account)
            logger.info(
                "authorization.skipped",
                description_class=description_class,
                account=skipped_account,
            )

        if ctx.account is not None:
            if not evaluator.has_permission(identity, ctx.account, ResourceType.ACCOUNT, Authorization.WRITE):
                decision.account_allowed = False
                self._deny(errors, description_class, f"Access denied to account {ctx.account}")

        if ctx.applications:
            preload_bulk_permissions(evaluator, identity)
            # Every application is checked so all offenders are reported at once.
            for application in ctx.applications:
                allowed = evaluator.has_permission(
                    identity, application, ResourceType.APPLICATION, Authorization.WRITE
                )
                decision.application_results[application] = allowed
                if not allowed:
                    self._deny(errors, description_class, f"Access denied to application {application}")

        if ctx.requires_application_restriction and ctx.account is not None and not ctx.applications:
            self.metrics.record_missing_application(description_class, ctx.account)
            logger.warning(
                "authorization.missing_application",
                description_class=description_class,
                account=ctx.account,
            )

        self.metrics.record_decision(description_class, decision.allowed)
        return decision

    def _deny(self, errors: ErrorCollector, description_class: str, message: str) -> None:
        errors.reject(AUTHORIZATION_CODE, message)
        logger.info("authorization.denied", description_class=description_class, reason=message)
