"""Output formatting for kvctl (stdlib only)."""

import datetime
import json
import re

_CONTROL_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]|[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# ---------------------------------------------------------------------------
# Table helpers
# ---------------------------------------------------------------------------


def _trunc(s, maxlen):
    """Truncate string with ellipsis indicator."""
    if not s:
        return ""
    return s[: maxlen - 1] + "…" if len(s) > maxlen else s


def _sanitize_str(s):
    """Strip ANSI escape sequences and control chars from table output.
    Preserves newlines (\\n) and tabs (\\t)."""
    if not s:
        return s
    return _CONTROL_RE.sub("", str(s))


def _table(columns, rows, footer=None):
    """Build a formatted table string.
    columns: list of (name, width) tuples. Last column has no width (fills).
    rows: list of tuples matching columns."""
    parts = []
    for i, (name, width) in enumerate(columns):
        parts.append(name if i == len(columns) - 1 else f"{name:<{width}}")
    header = " ".join(parts)
    lines = [header, "-" * max(len(header), 60)]
    for row in rows:
        parts = []
        for i, val in enumerate(row):
            safe = _sanitize_str(val) if isinstance(val, str) else str(val)
            parts.append(safe if i == len(columns) - 1 else f"{safe:<{columns[i][1]}}")
        lines.append(" ".join(parts))
    if footer:
        lines.append(f"\n{footer}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Entity formatters
# ---------------------------------------------------------------------------


def format_namespaces_table(namespaces):
    """Format the result of KvClient.list_namespaces()."""
    if not namespaces:
        return "No namespaces found."
    cols = [("Title", 40), ("ID", 0)]
    rows = [(_trunc(ns.get("title", ""), 40), ns.get("id", "")) for ns in namespaces]
    return _table(cols, rows, f"Total: {len(namespaces)} namespaces")


def _format_expiration(ts):
    if not ts:
        return "-"
    try:
        return datetime.datetime.fromtimestamp(int(ts), tz=datetime.timezone.utc).strftime(
            "%Y-%m-%d %H:%M:%SZ"
        )
    except (TypeError, ValueError, OverflowError):
        return str(ts)


def format_keys_table(page):
    """Format one page returned by KvClient.list_keys()."""
    keys = page.get("keys") or []
    if not keys:
        return "No keys found."
    cols = [("Expires", 22), ("Key", 0)]
    rows = [(_format_expiration(k.get("expiration")), k.get("name", "")) for k in keys]
    footer = f"Total: {len(keys)} keys"
    if page.get("cursor"):
        footer += f"\nMore keys available: --cursor {page['cursor']}"
    return _table(cols, rows, footer)


# ---------------------------------------------------------------------------
# Output dispatchers
# ---------------------------------------------------------------------------


def output(data, formatter=None, fmt="json"):
    """Output data in requested format."""
    if fmt == "table" and formatter:
        print(formatter(data))
    else:
        print(json.dumps(data, indent=2, ensure_ascii=False))


def mutation_response(action, details=None, data=None, fmt="json"):
    """Print a mutation confirmation."""
    if fmt == "json":
        payload = {"ok": True, "mutation": {"action": action, "details": details}}
        if data:
            payload["data"] = data
        print(json.dumps(payload, ensure_ascii=False))
        return
    summary = f"{action}: {details}" if details else action
    print(f"OK: {summary}")
