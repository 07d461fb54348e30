"""
Turn remote failures into actionable text.

Workers KV reports problems as numeric error codes inside the API envelope;
the gateway in front of it reports some problems only through the HTTP
status. Both are mapped to suggestions here. Everything in this module is
pure: no printing, no I/O.
"""

import re
from types import MappingProxyType

from kvctl.models import ApiFailure, TransportFailure

_ACCOUNT_ID_HINT = (
    'Your kvctl.toml is likely missing the field "account_id", '
    "which is required to write to Workers KV."
)
_NAMESPACE_HINT = "Run `kvctl namespace list` to see your existing namespaces with IDs"
_KEY_HINT = "Run `kvctl key list` to see your existing keys"
_LIMITS_HINT = "See the Workers KV limits documentation"
_LEGACY_NAMESPACE_HINT = "Consider moving this namespace"
_PAID_FEATURE_HINT = (
    "Workers KV is a paid feature, please upgrade your account "
    "(https://www.cloudflare.com/products/workers-kv/)"
)


def _expand(groups):
    table = {}
    for codes, hint in groups:
        for code in codes:
            table[code] = hint
    return MappingProxyType(table)


# https://api.cloudflare.com/#workers-kv-namespace-errors
ERROR_CODE_HINTS = _expand(
    [
        ((7000, 7003), _ACCOUNT_ID_HINT),
        ((10010, 10011, 10012, 10013, 10014, 10018), _NAMESPACE_HINT),
        ((10009,), _KEY_HINT),
        ((10022, 10024, 10030), _LIMITS_HINT),
        ((10021, 10035, 10038), _LEGACY_NAMESPACE_HINT),
        ((10017, 10026), _PAID_FEATURE_HINT),
    ]
)

STATUS_CODE_CONTEXT = MappingProxyType(
    {
        413: (
            "Returned status code 413, Payload Too Large. "
            "Please make sure your upload is less than 100MB in size"
        ),
        504: "Returned status code 504, Gateway Timeout. Please try again in a few seconds",
    }
)


def help_for_code(code):
    """Return the suggestion for a KV error code, or "" when unmapped."""
    return ERROR_CODE_HINTS.get(code, "")


def status_code_context(status):
    """Return the advisory for a gateway-origin HTTP status, or "" for any other."""
    return STATUS_CODE_CONTEXT.get(status, "")


_WHITESPACE_RE = re.compile(r"\s+")


def _clean_message(message):
    """Collapse whitespace so one store error always renders as one line."""
    return _WHITESPACE_RE.sub(" ", message or "").strip()


def _format_api_error(error):
    line = f"[ERROR] Code {error.code}: {_clean_message(error.message)}"
    suggestion = help_for_code(error.code)
    if suggestion:
        line += f" Hint: {suggestion}"
    return line


def format_error(failure):
    """Render *failure* as one or more lines of diagnostics.

    ApiFailure: an optional gateway advisory line, then one line per error
    in the order the store reported them. TransportFailure: a single line.
    """
    if isinstance(failure, TransportFailure):
        return f"[ERROR] Connection failed: {_clean_message(failure.reason)}"

    if isinstance(failure, ApiFailure):
        lines = []
        context = status_code_context(failure.status)
        if context:
            lines.append(f"[WARN] {context}")
        lines.extend(_format_api_error(e) for e in failure.errors)
        if not lines:
            lines.append(f"[ERROR] Request failed with HTTP {failure.status}")
        return "\n".join(lines)

    return f"[ERROR] {failure}"
