"""MCP server exposing kvctl operations as tools.

Each tool call is one invocation of the usual pipeline: load and validate
the target, resolve the namespace, build a client, make one request.
Destructive tools take ``confirm=True`` in place of the interactive prompt.

Run: python -m kvctl.mcp_server
Requires: pip install .[mcp]
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from kvctl import config
from kvctl.client import api_client, load_user
from kvctl.diagnostics import format_error
from kvctl.exceptions import CliError, RemoteError, SetupError
from kvctl.targets import get_namespace_id, validate_target

mcp = FastMCP(
    "kvctl",
    instructions=(
        "Workers KV administration tools. "
        "Select a namespace with either `binding` (from kvctl.toml) or `namespace_id`, "
        "never both. Deleting requires confirm=True; ask the user first. "
        "Values are returned as UTF-8 text with undecodable bytes replaced."
    ),
)

# ---------------------------------------------------------------------------
# Response contract
# ---------------------------------------------------------------------------


def _contract_error(message: str, error_type: str = "error") -> dict:
    return {
        "ok": False,
        "schema_version": config.CONTRACT_SCHEMA_VERSION,
        "error_detail": {"type": error_type, "message": message},
    }


def _contract_ok(data) -> dict:
    return {"ok": True, "schema_version": config.CONTRACT_SCHEMA_VERSION, "data": data}


def _call(fn, *args, **kwargs) -> dict:
    """Run one tool body, converting exceptions to error dicts."""
    try:
        return _contract_ok(fn(*args, **kwargs))
    except RemoteError as e:
        return _contract_error(format_error(e.failure), "remote")
    except SetupError as e:
        return _contract_error(str(e), "setup")
    except CliError as e:
        return _contract_error(str(e), "error")
    except Exception as e:
        return _contract_error(f"Unexpected error: {e}", "error")


def _account_and_namespace(binding: str | None, namespace_id: str | None) -> tuple[str, str]:
    target = config.load_target()
    validate_target(target)
    if bool(binding) == bool(namespace_id):
        raise CliError("[ERROR] Pass exactly one of binding or namespace_id.")
    if namespace_id:
        return target.account_id, namespace_id
    return target.account_id, get_namespace_id(target, binding)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


def list_namespaces() -> dict:
    """List the account's KV namespaces (first page).

    Returns:
        Dict with ok and data: a list of {id, title}.
    """

    def _run():
        target = config.load_target()
        validate_target(target)
        return api_client(load_user()).list_namespaces(target.account_id)

    return _call(_run)


def list_keys(
    binding: str | None = None,
    namespace_id: str | None = None,
    prefix: str | None = None,
    cursor: str | None = None,
    limit: int | None = None,
) -> dict:
    """List one page of keys in a namespace.

    Args:
        binding: Binding name from kvctl.toml.
        namespace_id: Remote namespace id (instead of binding).
        prefix: Only keys starting with this text.
        cursor: Cursor returned by a previous call.
        limit: Page size.
    """

    def _run():
        account_id, ns_id = _account_and_namespace(binding, namespace_id)
        return api_client(load_user()).list_keys(
            account_id, ns_id, prefix=prefix, cursor=cursor, limit=limit
        )

    return _call(_run)


def get_value(key: str, binding: str | None = None, namespace_id: str | None = None) -> dict:
    """Read the value stored under *key*."""

    def _run():
        account_id, ns_id = _account_and_namespace(binding, namespace_id)
        raw = api_client(load_user()).get_value(account_id, ns_id, key)
        return {"key": key, "value": raw.decode("utf-8", errors="replace")}

    return _call(_run)


def put_value(
    key: str,
    value: str,
    binding: str | None = None,
    namespace_id: str | None = None,
    expiration_ttl: int | None = None,
) -> dict:
    """Write *value* (UTF-8 text) under *key*, optionally expiring after N seconds."""

    def _run():
        account_id, ns_id = _account_and_namespace(binding, namespace_id)
        api_client(load_user()).put_value(
            account_id, ns_id, key, value.encode("utf-8"), expiration_ttl=expiration_ttl
        )
        return {"key": key, "bytes": len(value.encode("utf-8"))}

    return _call(_run)


def delete_key(
    key: str,
    binding: str | None = None,
    namespace_id: str | None = None,
    confirm: bool = False,
) -> dict:
    """Delete *key*. Refused unless confirm=True."""

    def _run():
        account_id, ns_id = _account_and_namespace(binding, namespace_id)
        if not confirm:
            raise CliError(f'[ERROR] Deleting key "{key}" requires confirm=True.')
        api_client(load_user()).delete_key(account_id, ns_id, key)
        return {"key": key, "deleted": True}

    return _call(_run)


for _tool in (list_namespaces, list_keys, get_value, put_value, delete_key):
    mcp.tool()(_tool)


def main():
    """Run the MCP server (stdio transport)."""
    mcp.run()


if __name__ == "__main__":
    main()
