"""Tests for the description converter."""

import pytest

from deploy_authz.descriptions.converter import application_of, convert_operation


def test_create_server_group_scopes():
    d = convert_operation({"type": "createServerGroup", "account": "prod", "application": "shop"})
    assert d.has_account_scope
    assert d.account_scope.account == "prod"
    assert d.application_scope.applications == ["shop"]
    assert not d.has_resource_scope


def test_credentials_alias_for_account():
    d = convert_operation({"type": "resizeServerGroup", "credentials": "test", "serverGroupName": "shop-main-v003"})
    assert d.account_scope.account == "test"
    assert d.resource_scope.resource_applications == ["shop"]
    assert not d.has_application_scope


def test_nested_resource_key():
    d = convert_operation(
        {"type": "cloneServerGroup", "account": "prod", "application": "shop", "source": {"serverGroupName": "cart-v001"}}
    )
    assert d.application_scope.applications == ["shop"]
    assert d.resource_scope.resource_applications == ["cart"]


def test_resource_name_lists():
    d = convert_operation({"type": "deleteLoadBalancer", "account": "prod", "loadBalancerNames": ["a-frontend", None, "b"]})
    assert d.resource_scope.resource_applications == ["a", None, "b"]


def test_image_tags_disable_application_restriction():
    d = convert_operation({"type": "upsertImageTags", "account": "prod"})
    assert d.account_scope.requires_application_restriction() is False


def test_application_only_operation():
    d = convert_operation({"type": "saveSnapshot", "applications": ["shop", "cart"]})
    assert not d.has_account_scope
    assert d.application_scope.applications == ["shop", "cart"]


def test_unknown_type_has_no_scopes():
    d = convert_operation({"type": "runJob", "account": "prod"})
    assert not (d.has_account_scope or d.has_application_scope or d.has_resource_scope)
    assert d.payload["account"] == "prod"


def test_missing_type_raises():
    with pytest.raises(ValueError, match="missing 'type'"):
        convert_operation({"account": "prod"})


def test_application_of():
    assert application_of("shop-main-v001") == "shop"
    assert application_of("shop") == "shop"
    assert application_of("") is None
    assert application_of(None) is None


def test_single_string_applications_is_one_application():
    d = convert_operation({"type": "saveSnapshot", "applications": "shop"})
    assert d.application_scope.applications == ["shop"]


def test_non_list_applications_raises():
    with pytest.raises(ValueError, match="'applications' must be a list"):
        convert_operation({"type": "saveSnapshot", "applications": {"name": "shop"}})
    with pytest.raises(ValueError, match="Application name must be a string"):
        convert_operation({"type": "saveSnapshot", "applications": ["shop", 42]})


def test_non_string_resource_name_raises():
    with pytest.raises(ValueError, match="Resource name must be a string"):
        convert_operation({"type": "resizeServerGroup", "account": "prod", "serverGroupName": 7})
