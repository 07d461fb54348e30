"""Tests for targets.py — required-field validation and binding resolution."""

import pytest

from kvctl.exceptions import (
    BindingNotFoundError,
    CliError,
    ConfigurationError,
    DuplicateBindingError,
    SetupError,
)
from kvctl.models import NamespaceBinding, Target
from kvctl.targets import get_namespace_id, validate_target


def _target(*bindings, account_id="fake-account"):
    return Target(
        name="test-target",
        account_id=account_id,
        kv_namespaces=tuple(NamespaceBinding(binding=b, id=i) for b, i in bindings),
    )


class TestValidateTarget:
    def test_empty_account_id_is_reported(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_target(_target(account_id=""))
        assert exc_info.value.missing_fields == ("account_id",)
        assert "account_id" in str(exc_info.value)

    def test_configuration_error_is_setup_error(self):
        with pytest.raises(SetupError) as exc_info:
            validate_target(_target(account_id=""))
        assert exc_info.value.exit_code == 2

    def test_account_id_present_passes(self):
        assert validate_target(_target(account_id="abc123")) is None

    def test_no_namespaces_still_valid(self):
        validate_target(Target(name="t", account_id="abc123"))


class TestGetNamespaceId:
    def test_returns_id_of_single_binding(self):
        assert get_namespace_id(_target(("B", "fake")), "B") == "fake"

    def test_returns_matching_binding_among_several(self):
        target = _target(("KV", "kv-id"), ("CACHE", "cache-id"), ("SESSIONS", "sess-id"))
        assert get_namespace_id(target, "CACHE") == "cache-id"

    def test_match_is_exact(self):
        with pytest.raises(BindingNotFoundError):
            get_namespace_id(_target(("KV", "kv-id")), "kv")

    def test_missing_binding_raises_not_found(self):
        with pytest.raises(BindingNotFoundError) as exc_info:
            get_namespace_id(_target(("KV", "kv-id")), "OTHER")
        assert exc_info.value.binding == "OTHER"
        assert exc_info.value.target_name == "test-target"
        assert 'Namespace binding "OTHER" not found in "test-target"' in str(exc_info.value)

    def test_no_namespaces_raises_not_found(self):
        with pytest.raises(BindingNotFoundError):
            get_namespace_id(Target(name="t", account_id="a"), "KV")

    def test_empty_namespaces_raises_not_found(self):
        with pytest.raises(BindingNotFoundError):
            get_namespace_id(Target(name="t", account_id="a", kv_namespaces=()), "KV")

    def test_detects_duplicate_bindings(self):
        target = Target(
            name="test-target",
            account_id="",
            kv_namespaces=(
                NamespaceBinding(binding="KV", id="fake"),
                NamespaceBinding(binding="KV", id="fake"),
            ),
        )
        with pytest.raises(CliError):
            get_namespace_id(target, "")

    @pytest.mark.parametrize("requested", ["KV", "OTHER", "MISSING", ""])
    def test_duplicates_fail_regardless_of_requested_name(self, requested):
        target = _target(("KV", "a"), ("OTHER", "b"), ("KV", "c"))
        with pytest.raises(DuplicateBindingError) as exc_info:
            get_namespace_id(target, requested)
        assert exc_info.value.binding == "KV"
        assert exc_info.value.target_name == "test-target"

    def test_duplicate_with_different_ids_never_resolves(self):
        target = _target(("KV", "first"), ("KV", "second"))
        with pytest.raises(DuplicateBindingError) as exc_info:
            get_namespace_id(target, "KV")
        assert 'Namespace binding "KV" is duplicated in "test-target"' in str(exc_info.value)

    def test_duplicate_is_not_a_not_found(self):
        target = _target(("KV", "a"), ("KV", "b"))
        with pytest.raises(DuplicateBindingError):
            get_namespace_id(target, "NOT_THERE")
        assert not issubclass(DuplicateBindingError, BindingNotFoundError)
