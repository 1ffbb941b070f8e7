"""Operations pipeline – vet submitted operations before they are executed.

Flow: raw payload → convert to description → authorize → accepted / denied
"""

from __future__ import annotations

from typing import Any

import structlog

from deploy_authz.config.security_config import load_security_config
from deploy_authz.descriptions.converter import convert_operation
from deploy_authz.errors.collector import OperationErrors
from deploy_authz.observability.log_config import configure_logging
from deploy_authz.observability.metrics import AuthorizationMetrics
from deploy_authz.permissions.evaluator import PermissionEvaluator
from deploy_authz.policy.engine import AuthorizationDecision, DescriptionAuthorizer

logger = structlog.get_logger(__name__)


def create_authorizer(
    permission_evaluator: PermissionEvaluator | None,
    config_path: str | None = None,
    metrics: AuthorizationMetrics | None = None,
    log_level: str = "INFO",
    json_logs: bool = False,
) -> DescriptionAuthorizer:
    """Process start-up: configure logging, load the security config and build the authorizer."""
    configure_logging(log_level, json=json_logs)
    return DescriptionAuthorizer(permission_evaluator, load_security_config(config_path), metrics)


def _decision_summary(decision: AuthorizationDecision | None) -> dict[str, Any] | None:
    if decision is None:
        return None
    return {
        "account": decision.account,
        "account_allowed": decision.account_allowed,
        "applications": dict(decision.application_results),
        "skipped": decision.skipped,
        "allowed": decision.allowed,
    }


def submit_operation(
    payload: dict[str, Any],
    identity: Any,
    authorizer: DescriptionAuthorizer,
) -> dict[str, Any]:
    """Authorize a single operation payload on behalf of *identity*.

    Returns a JSON-serialisable result dict.  ``status`` is ``denied`` whenever
    the authorizer rejected anything, ``invalid`` when the payload cannot be
    converted, and ``accepted`` otherwise.
    """
    try:
        description = convert_operation(payload)
    except ValueError as exc:
        return {"status": "invalid", "errors": [str(exc)]}

    errors = OperationErrors()
    decision = authorizer.authorize(description, identity, errors)

    result = {
        "description_type": description.description_type,
        "decision": _decision_summary(decision),
        "errors": errors.messages,
    }
    if errors.has_errors:
        logger.info(
            "operation.denied",
            description_class=description.description_type,
            rejections=len(errors.rejections),
        )
        return {"status": "denied", **result}
    return {"status": "accepted", **result}


def submit_operations(
    payloads: list[dict[str, Any]],
    identity: Any,
    authorizer: DescriptionAuthorizer,
) -> list[dict[str, Any]]:
    """Authorize each operation of a task independently."""
    return [submit_operation(p, identity, authorizer) for p in payloads]
