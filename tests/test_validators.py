"""Tests for the input validators."""

import pytest

from serveradmin.core.validators import (
    normalize_service_name,
    password_warnings,
    validate_domain,
    validate_password,
    validate_port,
    validate_service_name,
    validate_username,
)


def _nobody_exists(_name):
    return False


@pytest.mark.parametrize("username", ["deploy_01", "abc", "web-admin", "a" * 32, "x-_9"])
def test_valid_usernames_are_accepted(username):
    assert validate_username(username, _nobody_exists) == (True, "")


def test_username_too_short():
    ok, reason = validate_username("ab", _nobody_exists)
    assert not ok
    assert "between 3 and 32" in reason


def test_username_too_long():
    ok, reason = validate_username("a" * 33, _nobody_exists)
    assert not ok
    assert "between 3 and 32" in reason


@pytest.mark.parametrize("username", ["Administrator", "1user", "_svc", "-dash", "user name", "user.name"])
def test_username_with_invalid_characters_is_rejected(username):
    ok, reason = validate_username(username, _nobody_exists)
    assert not ok
    assert "lowercase" in reason


def test_empty_username_is_rejected():
    ok, reason = validate_username("", _nobody_exists)
    assert not ok
    assert "empty" in reason


def test_existing_username_is_rejected():
    ok, reason = validate_username("deploy_01", lambda name: name == "deploy_01")
    assert not ok
    assert "already exists" in reason


def test_password_length_decides_acceptance():
    assert validate_password("short") == (False, "Password must be at least 8 characters long!")
    assert validate_password("")[0] is False
    assert validate_password("aaaaaaaa") == (True, "")


def test_weak_password_only_warns():
    assert validate_password("aaaaaaaa")[0] is True
    warnings = password_warnings("aaaaaaaa")
    assert len(warnings) == 3
    assert any("uppercase" in w for w in warnings)
    assert any("number" in w for w in warnings)
    assert any("special" in w for w in warnings)


def test_strong_password_has_no_warnings():
    assert password_warnings("Str0ng!Pass") == []


@pytest.mark.parametrize("value", ["1", "80", "8080", "65535"])
def test_valid_ports(value):
    assert validate_port(value) == (True, "")


@pytest.mark.parametrize("value", ["0", "99999", "65536", "-1", "80a", "", "8 0"])
def test_invalid_ports(value):
    ok, reason = validate_port(value)
    assert not ok
    assert "between 1 and 65535" in reason


@pytest.mark.parametrize("domain", ["app.example.com", "localhost", "my-app.internal", "a1.b2.c3"])
def test_valid_domains(domain):
    assert validate_domain(domain)[0]


@pytest.mark.parametrize("domain", ["", "-app.example.com", "app..example.com", "app_example.com",
                                    "app.example.com;", "APP.example.com"])
def test_invalid_domains(domain):
    assert not validate_domain(domain)[0]


def test_service_name_is_normalized_and_checked():
    assert normalize_service_name(" My Service ") == "my-service"
    assert validate_service_name("my-service")[0]
    assert not validate_service_name("../etc")[0]
    assert not validate_service_name("")[0]
    assert not validate_service_name("a/b")[0]
