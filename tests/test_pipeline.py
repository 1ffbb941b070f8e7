"""Tests for the operations pipeline."""

import pytest
from prometheus_client import CollectorRegistry

from deploy_authz.config.security_config import load_security_config
from deploy_authz.observability.log_config import configure_logging, is_configured
from deploy_authz.observability.metrics import AuthorizationMetrics
from deploy_authz.permissions.store import StaticPermissionEvaluator
from deploy_authz.policy.engine import DescriptionAuthorizer
from deploy_authz.operations.pipeline import create_authorizer, submit_operation, submit_operations


@pytest.fixture(scope="module")
def authorizer():
    evaluator = StaticPermissionEvaluator(
        {
            "accounts": {"prod": ["alice"], "test": ["alice", "bob"]},
            "applications": {"shop": ["alice", "bob"], "cart": ["alice"]},
        }
    )
    return create_authorizer(evaluator, metrics=AuthorizationMetrics(CollectorRegistry()), log_level="WARNING")


def test_accepted_deploy(authorizer):
    result = submit_operation(
        {"type": "createServerGroup", "account": "prod", "application": "shop"}, "alice", authorizer
    )
    assert result["status"] == "accepted"
    assert result["errors"] == []
    assert result["decision"]["applications"] == {"shop": True}


def test_denied_lists_every_offender(authorizer):
    result = submit_operation(
        {
            "type": "upsertLoadBalancer",
            "account": "prod",
            "applications": ["shop", "cart"],
            "loadBalancerName": "cart-frontend",
        },
        "bob",
        authorizer,
    )
    assert result["status"] == "denied"
    assert result["errors"] == ["Access denied to account prod", "Access denied to application cart"]
    assert result["decision"]["allowed"] is False


def test_skipped_operation_type(authorizer):
    result = submit_operation({"type": "upsertImageTags", "account": "prod"}, "mallory", authorizer)
    assert result["status"] == "accepted"
    assert result["decision"]["skipped"] is True


def test_unregistered_type_is_accepted(authorizer):
    result = submit_operation({"type": "runJob", "account": "prod"}, "mallory", authorizer)
    assert result["status"] == "accepted"
    assert result["decision"]["account"] is None


def test_invalid_payload(authorizer):
    result = submit_operation({"account": "prod"}, "alice", authorizer)
    assert result["status"] == "invalid"


def test_batch(authorizer):
    results = submit_operations(
        [
            {"type": "resizeServerGroup", "account": "test", "serverGroupName": "shop-main-v002"},
            {"type": "resizeServerGroup", "account": "test", "serverGroupName": "cart-main-v002"},
        ],
        "bob",
        authorizer,
    )
    assert [r["status"] for r in results] == ["accepted", "denied"]


def test_unwired_authorizer_accepts_everything():
    authorizer = DescriptionAuthorizer(None, load_security_config(), AuthorizationMetrics(CollectorRegistry()))
    result = submit_operation({"type": "createServerGroup", "account": "prod", "application": "shop"}, None, authorizer)
    assert result["status"] == "accepted"
    assert result["decision"] is None


def test_single_string_applications(authorizer):
    result = submit_operation({"type": "saveSnapshot", "applications": "shop"}, "alice", authorizer)
    assert result["status"] == "accepted"
    assert result["decision"]["applications"] == {"shop": True}


def test_malformed_names_are_invalid(authorizer):
    result = submit_operation({"type": "saveSnapshot", "applications": 5}, "alice", authorizer)
    assert result["status"] == "invalid"
    result = submit_operation(
        {"type": "resizeServerGroup", "account": "test", "serverGroupName": ["shop-v001", 3]}, "bob", authorizer
    )
    assert result["status"] == "invalid"
    assert "Resource name must be a string" in result["errors"][0]


def test_create_authorizer_configures_logging(tmp_path):
    path = tmp_path / "security.yaml"
    path.write_text("enabled: false\n")
    authorizer = create_authorizer(StaticPermissionEvaluator(), config_path=str(path), metrics=AuthorizationMetrics(CollectorRegistry()))
    assert is_configured()
    assert not authorizer.policy.enabled
    result = submit_operation({"type": "createServerGroup", "account": "prod", "application": "shop"}, "mallory", authorizer)
    assert result["status"] == "denied"
    assert result["errors"] == ["Access denied to application shop"]


def test_configure_logging_force_reconfigures():
    configure_logging("DEBUG", force=True)
    assert is_configured()
    configure_logging("WARNING", force=True)
