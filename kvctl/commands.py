"""
Command implementations for kvctl.
Each cmd_*() function receives an argparse.Namespace and handles one CLI command.

Every command follows the same pipeline: load and validate the target,
resolve the namespace, confirm if destructive, build a client, make one
remote call. Remote failures are translated into diagnostics before they
reach the user.
"""

import os
import re
import sys

from kvctl import config
from kvctl.api import _safe_json_parse
from kvctl.bucket import directory_keys, directory_pairs
from kvctl.client import api_client, load_user
from kvctl.diagnostics import format_error
from kvctl.exceptions import CliError, RemoteError
from kvctl.formatters import format_keys_table, format_namespaces_table, mutation_response, output
from kvctl.models import BulkPayload
from kvctl.prompts import interactive_delete
from kvctl.targets import get_namespace_id, validate_target

_BINDING_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _info(message):
    """Print a status line to stderr unless --quiet."""
    if not config.RUNTIME_QUIET:
        print(message, file=sys.stderr)


def _remote(fn, *args, **kwargs):
    """Run one remote call, turning RemoteError into translated CliError."""
    try:
        return fn(*args, **kwargs)
    except RemoteError as e:
        raise CliError(format_error(e.failure)) from e


def _load_target(ns):
    target = config.load_target(environment=getattr(ns, "env", None))
    validate_target(target)
    return target


def _resolve_namespace_id(ns, target):
    """Namespace id from --namespace-id, or resolved from --binding."""
    binding = getattr(ns, "binding", None)
    namespace_id = getattr(ns, "namespace_id", None)
    if bool(binding) == bool(namespace_id):
        raise CliError("[ERROR] Pass exactly one of --binding or --namespace-id.")
    if namespace_id:
        return namespace_id
    return get_namespace_id(target, binding)


def _confirmed(ns, prompt):
    if getattr(ns, "force", False):
        return True
    return interactive_delete(prompt)


def _read_file_bytes(path):
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise CliError(f"[ERROR] Cannot read {path}: {e.strerror or e}") from e


def _write_raw(data):
    """Write raw bytes to stdout, bypassing text encoding."""
    sys.stdout.flush()
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        sys.stdout.write(data.decode("utf-8", errors="replace"))
        return
    buffer.write(data)
    buffer.flush()


# ---------------------------------------------------------------------------
# Namespace commands
# ---------------------------------------------------------------------------


def cmd_namespace_create(ns):
    target = _load_target(ns)
    binding = ns.binding
    if not _BINDING_RE.match(binding):
        raise CliError(
            f'[ERROR] Invalid binding name "{binding}". Use letters, digits and '
            "underscores, not starting with a digit."
        )
    user = load_user()
    title = f"{target.name}-{binding}"
    client = api_client(user)
    result = _remote(client.create_namespace, target.account_id, title) or {}
    namespace_id = result.get("id", "")
    mutation_response(
        "Created namespace",
        f'{title} ({namespace_id})',
        {"binding": binding, "id": namespace_id, "title": title},
        ns.format,
    )
    _info(
        "Add the following to your kvctl.toml:\n"
        "[[kv_namespaces]]\n"
        f'binding = "{binding}"\n'
        f'id = "{namespace_id}"'
    )


def cmd_namespace_delete(ns):
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    user = load_user()
    if not _confirmed(ns, f"Are you sure you want to delete namespace {namespace_id}?"):
        _info(f"Not deleting namespace {namespace_id}")
        return
    client = api_client(user)
    _remote(client.delete_namespace, target.account_id, namespace_id)
    mutation_response("Deleted namespace", namespace_id, fmt=ns.format)
    if getattr(ns, "binding", None):
        _info(f'Remove the "{ns.binding}" entry from kv_namespaces in your kvctl.toml.')


def cmd_namespace_list(ns):
    target = _load_target(ns)
    client = api_client(load_user())
    output(_remote(client.list_namespaces, target.account_id), format_namespaces_table, ns.format)


def cmd_namespace_rename(ns):
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    title = (ns.title or "").strip()
    if not title:
        raise CliError("[ERROR] Namespace title cannot be empty.")
    client = api_client(load_user())
    _remote(client.rename_namespace, target.account_id, namespace_id, title)
    mutation_response("Renamed namespace", f"{namespace_id} -> {title}", fmt=ns.format)


# ---------------------------------------------------------------------------
# Key commands
# ---------------------------------------------------------------------------


def cmd_key_put(ns):
    if (ns.value is None) == (ns.path is None):
        raise CliError("[ERROR] Pass either a value argument or --path, not both.")
    if ns.expiration is not None and ns.ttl is not None:
        raise CliError("[ERROR] Use either --expiration or --ttl, not both.")
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    value = _read_file_bytes(ns.path) if ns.path is not None else ns.value.encode("utf-8")
    client = api_client(load_user())
    _remote(
        client.put_value,
        target.account_id,
        namespace_id,
        ns.key,
        value,
        expiration=ns.expiration,
        expiration_ttl=ns.ttl,
    )
    mutation_response("Wrote key", ns.key, {"bytes": len(value)}, ns.format)


def cmd_key_get(ns):
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    client = api_client(load_user())
    _write_raw(_remote(client.get_value, target.account_id, namespace_id, ns.key))


def cmd_key_delete(ns):
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    user = load_user()
    if not _confirmed(ns, f'Are you sure you want to delete key "{ns.key}"?'):
        _info(f'Not deleting key "{ns.key}"')
        return
    client = api_client(user)
    _remote(client.delete_key, target.account_id, namespace_id, ns.key)
    mutation_response("Deleted key", ns.key, fmt=ns.format)


def cmd_key_list(ns):
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    client = api_client(load_user())
    page = _remote(
        client.list_keys,
        target.account_id,
        namespace_id,
        prefix=ns.prefix,
        cursor=ns.cursor,
        limit=ns.limit,
    )
    output(page, format_keys_table, ns.format)


# ---------------------------------------------------------------------------
# Bulk commands
# ---------------------------------------------------------------------------


def _read_bulk_file(path):
    raw = _read_file_bytes(path)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CliError(f"[ERROR] {path} is not valid UTF-8.") from e
    return _safe_json_parse(text, path)


def cmd_bulk_put(ns):
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    payload = BulkPayload.for_put(_read_bulk_file(ns.file), ns.file)
    client = api_client(load_user())
    _remote(client.bulk_put, target.account_id, namespace_id, payload.items)
    mutation_response("Wrote keys", f"{len(payload.items)} from {ns.file}", fmt=ns.format)


def cmd_bulk_delete(ns):
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    payload = BulkPayload.for_delete(_read_bulk_file(ns.file), ns.file)
    user = load_user()
    if not _confirmed(ns, f"Are you sure you want to delete all keys in {ns.file}?"):
        _info(f"Not deleting keys in {ns.file}")
        return
    client = api_client(user)
    _remote(client.bulk_delete, target.account_id, namespace_id, payload.items)
    mutation_response("Deleted keys", f"{len(payload.items)} from {ns.file}", fmt=ns.format)


# ---------------------------------------------------------------------------
# Bucket commands
# ---------------------------------------------------------------------------


def _bucket_directory(ns, target):
    """Directory argument, or the binding's ``bucket`` relative to kvctl.toml."""
    if ns.directory:
        return ns.directory
    binding = getattr(ns, "binding", None)
    for namespace in target.kv_namespaces or ():
        if binding and namespace.binding == binding and namespace.bucket:
            project_dir = os.path.dirname(os.path.abspath(config.PROJECT_FILE))
            return os.path.join(project_dir, namespace.bucket)
    raise CliError('[ERROR] Pass a directory, or set "bucket" on the binding in kvctl.toml.')


def cmd_bucket_upload(ns):
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    directory = _bucket_directory(ns, target)
    pairs = directory_pairs(directory)
    client = api_client(load_user())
    _remote(client.bulk_put, target.account_id, namespace_id, pairs)
    mutation_response("Uploaded files", f"{len(pairs)} from {directory}", fmt=ns.format)


def cmd_bucket_delete(ns):
    target = _load_target(ns)
    namespace_id = _resolve_namespace_id(ns, target)
    directory = _bucket_directory(ns, target)
    keys = directory_keys(directory)
    user = load_user()
    if not _confirmed(ns, f"Are you sure you want to delete all files in {directory}?"):
        _info(f"Not deleting files in {directory}")
        return
    client = api_client(user)
    _remote(client.bulk_delete, target.account_id, namespace_id, keys)
    mutation_response("Deleted files", f"{len(keys)} from {directory}", fmt=ns.format)
