"""Tests for admin token verification."""
import pytest

from helpers import AdminAuthorizer, AuthorizationError


def test_verify_valid_token():
    authorizer = AdminAuthorizer("topsecret")
    assert authorizer.configured
    assert authorizer.verify("topsecret") is True


@pytest.mark.parametrize("token", ["wrong", "", "topsecret ", "TOPSECRET", None, 123, ["topsecret"]])
def test_verify_rejects_anything_else(token):
    assert AdminAuthorizer("topsecret").verify(token) is False


@pytest.mark.parametrize("secret", [None, ""])
def test_unconfigured_secret_fails_closed(secret):
    authorizer = AdminAuthorizer(secret)
    assert not authorizer.configured
    assert authorizer.verify("") is False
    assert authorizer.verify("anything") is False


def test_require_error_is_identical_for_unset_and_wrong():
    with pytest.raises(AuthorizationError) as unset:
        AdminAuthorizer(None).require("guess")
    with pytest.raises(AuthorizationError) as wrong:
        AdminAuthorizer("topsecret").require("guess")
    assert unset.value.message == wrong.value.message == "Unauthorized."


def test_multiple_configurations_coexist():
    first, second = AdminAuthorizer("one"), AdminAuthorizer("two")
    assert first.verify("one") and not first.verify("two")
    assert second.verify("two") and not second.verify("one")


def test_non_ascii_token():
    authorizer = AdminAuthorizer("clé-secrète")
    assert authorizer.verify("clé-secrète")
    assert not authorizer.verify("cle-secrete")
