"""Tests for diagnostics.py — remote failure translation."""

import pytest

from kvctl.diagnostics import (
    ERROR_CODE_HINTS,
    STATUS_CODE_CONTEXT,
    format_error,
    help_for_code,
    status_code_context,
)
from kvctl.models import ApiError, ApiFailure, TransportFailure


class TestHelpForCode:
    @pytest.mark.parametrize("code", [7000, 7003])
    def test_account_id_codes(self, code):
        assert "account_id" in help_for_code(code)

    @pytest.mark.parametrize("code", [10010, 10011, 10012, 10013, 10014, 10018])
    def test_namespace_codes(self, code):
        assert "kvctl namespace list" in help_for_code(code)

    def test_key_code(self):
        assert "kvctl key list" in help_for_code(10009)

    @pytest.mark.parametrize("code", [10022, 10024, 10030])
    def test_limit_codes(self, code):
        assert "limits" in help_for_code(code)

    @pytest.mark.parametrize("code", [10021, 10035, 10038])
    def test_legacy_namespace_codes(self, code):
        assert help_for_code(code) == "Consider moving this namespace"

    @pytest.mark.parametrize("code", [10017, 10026])
    def test_paid_feature_codes(self, code):
        assert "paid feature" in help_for_code(code)

    def test_unmapped_code_is_empty(self):
        assert help_for_code(99999) == ""

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            ERROR_CODE_HINTS[1] = "nope"  # type: ignore[index]
        with pytest.raises(TypeError):
            STATUS_CODE_CONTEXT[500] = "nope"  # type: ignore[index]


class TestStatusCodeContext:
    def test_payload_too_large(self):
        assert "Payload Too Large" in status_code_context(413)
        assert "100MB" in status_code_context(413)

    def test_gateway_timeout(self):
        assert "Gateway Timeout" in status_code_context(504)

    @pytest.mark.parametrize("status", [400, 404, 500, 502])
    def test_other_statuses_empty(self, status):
        assert status_code_context(status) == ""


class TestFormatError:
    def test_payload_too_large_advisory(self):
        text = format_error(ApiFailure(413, ()))
        assert "Payload Too Large" in text
        assert "less than 100MB" in text

    def test_gateway_advisory_precedes_structured_errors(self):
        text = format_error(ApiFailure(504, (ApiError(10009, "key not found"),)))
        lines = text.splitlines()
        assert len(lines) == 2
        assert "Gateway Timeout" in lines[0]
        assert "key not found" in lines[1]

    def test_account_id_advisory(self):
        text = format_error(ApiFailure(400, (ApiError(7003, "Could not route"),)))
        assert "Could not route" in text
        assert "7003" in text
        assert '"account_id"' in text

    def test_two_errors_two_lines_in_order(self):
        failure = ApiFailure(
            400,
            (ApiError(10013, "namespace not found"), ApiError(10009, "key not found")),
        )
        lines = format_error(failure).splitlines()
        assert len(lines) == 2
        assert "namespace not found" in lines[0]
        assert "kvctl namespace list" in lines[0]
        assert "key not found" in lines[1]
        assert "kvctl key list" in lines[1]

    def test_multiline_message_stays_on_one_line(self):
        failure = ApiFailure(400, (ApiError(1, "a\nb"), ApiError(2, "c")))
        lines = format_error(failure).splitlines()
        assert lines == ["[ERROR] Code 1: a b", "[ERROR] Code 2: c"]

    def test_message_whitespace_collapsed(self):
        failure = ApiFailure(400, (ApiError(12345, "  too \t many\r\n  spaces "),))
        assert format_error(failure) == "[ERROR] Code 12345: too many spaces"

    def test_multiline_transport_reason_is_one_line(self):
        text = format_error(TransportFailure("reset\nby peer"))
        assert text == "[ERROR] Connection failed: reset by peer"

    def test_unmapped_code_is_message_only(self):
        text = format_error(ApiFailure(400, (ApiError(12345, "something odd"),)))
        assert text == "[ERROR] Code 12345: something odd"

    def test_mapped_code_has_hint(self):
        text = format_error(ApiFailure(404, (ApiError(10009, "key not found"),)))
        assert text == (
            "[ERROR] Code 10009: key not found Hint: Run `kvctl key list` to see your existing keys"
        )

    def test_status_without_codes_still_produces_text(self):
        assert format_error(ApiFailure(500, ())) == "[ERROR] Request failed with HTTP 500"

    def test_transport_failure_single_line(self):
        text = format_error(TransportFailure("Name or service not known"))
        assert text == "[ERROR] Connection failed: Name or service not known"
        assert "\n" not in text

    def test_unknown_shape_does_not_raise(self):
        assert format_error("weird") == "[ERROR] weird"
