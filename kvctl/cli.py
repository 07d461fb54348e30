"""
kvctl — administer Workers KV namespaces and keys from the command line
"""

import argparse
import json
import sys

from kvctl import config
from kvctl.commands import (
    cmd_bucket_delete,
    cmd_bucket_upload,
    cmd_bulk_delete,
    cmd_bulk_put,
    cmd_key_delete,
    cmd_key_get,
    cmd_key_list,
    cmd_key_put,
    cmd_namespace_create,
    cmd_namespace_delete,
    cmd_namespace_list,
    cmd_namespace_rename,
)
from kvctl.exceptions import CliError

HELP_TEXT = """\
Usage: kvctl <command> <subcommand> [args...]

Global flags:
  --format table          Output as readable text instead of JSON (default: json)
  --env <name>            Use the [env.<name>] section of kvctl.toml
  --quiet, -q             Suppress status messages
  --verbose, -v           Enable HTTP request logging
  --version               Show version number

Namespace selection (key, bulk and bucket commands, exactly one):
  --binding, -b <name>    Binding name from kv_namespaces in kvctl.toml
  --namespace-id, -n <id> Remote namespace id

Commands:
  namespace create <binding>        - Create a namespace titled <name>-<binding>
  namespace delete                  - Delete a namespace (asks for confirmation)
    --force                           Skip the confirmation prompt
  namespace list                    - List namespaces of the account
  namespace rename <title>          - Rename a namespace
  key put <key> [value]             - Write a value
    --path <file>                     Read the value from a file instead
    --expiration <unix-seconds>       Absolute expiry time
    --ttl <seconds>                   Expiry relative to now
  key get <key>                     - Print a value to stdout
  key delete <key>                  - Delete a key (asks for confirmation)
    --force                           Skip the confirmation prompt
  key list                          - List one page of keys
    --prefix <text>                   Only keys starting with <text>
    --cursor <cursor>                 Continue from a previous page
    --limit <n>                       Page size
  bulk put <file.json>              - Write all pairs from a JSON array in one request
  bulk delete <file.json>           - Delete all keys in a JSON array (asks for confirmation)
    --force                           Skip the confirmation prompt
  bucket upload [dir]               - Write every file under dir (default: the binding's bucket)
  bucket delete [dir]               - Delete the keys of files under dir (asks for confirmation)
    --force                           Skip the confirmation prompt
  version                           - Show version number
"""


# ---------------------------------------------------------------------------
# Global flag extraction (before argparse, so flags work after subcommand)
# ---------------------------------------------------------------------------


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (format_str, environment, quiet, verbose, remaining_argv).
    Handles --version directly.
    """
    fmt = "json"
    environment = None
    quiet = False
    verbose = False
    remaining = []
    i = 0
    while i < len(argv):
        if argv[i] == "--version":
            print(f"kvctl {config.VERSION}")
            sys.exit(0)
        elif argv[i] in ("--quiet", "-q"):
            quiet = True
        elif argv[i] in ("--verbose", "-v"):
            verbose = True
        elif argv[i] == "--format" and i + 1 < len(argv):
            fmt = argv[i + 1]
            if fmt not in ("json", "table"):
                raise CliError(f"[ERROR] Invalid format '{fmt}'. Use: json, table")
            i += 1
        elif argv[i] == "--env" and i + 1 < len(argv):
            environment = argv[i + 1]
            i += 1
        else:
            remaining.append(argv[i])
        i += 1
    if quiet and verbose:
        raise CliError("[ERROR] --quiet and --verbose are mutually exclusive.")
    return fmt, environment, quiet, verbose, remaining


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _SubcommandParser(argparse.ArgumentParser):
    """Subparser that raises CliError instead of printing full help text."""

    def error(self, message):
        raise CliError(f"[ERROR] {message}")


def _positive_int(value):
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a positive integer") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return parsed


def _add_namespace_selector(p):
    p.add_argument("--binding", "-b")
    p.add_argument("--namespace-id", "-n", dest="namespace_id")


def build_parser():
    parser = _SubcommandParser(
        prog="kvctl",
        description="Administer Workers KV namespaces and keys",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("--help", "-h", action="store_true", dest="show_help")
    sub = parser.add_subparsers(dest="command", parser_class=_SubcommandParser)

    # --- namespace ---
    group = sub.add_parser("namespace").add_subparsers(
        dest="subcommand", parser_class=_SubcommandParser, required=True
    )
    p = group.add_parser("create")
    p.add_argument("binding")
    p.set_defaults(func=cmd_namespace_create)

    p = group.add_parser("delete")
    _add_namespace_selector(p)
    p.add_argument("--force", "-f", action="store_true")
    p.set_defaults(func=cmd_namespace_delete)

    group.add_parser("list").set_defaults(func=cmd_namespace_list)

    p = group.add_parser("rename")
    p.add_argument("title")
    _add_namespace_selector(p)
    p.set_defaults(func=cmd_namespace_rename)

    # --- key ---
    group = sub.add_parser("key").add_subparsers(
        dest="subcommand", parser_class=_SubcommandParser, required=True
    )
    p = group.add_parser("put")
    p.add_argument("key")
    p.add_argument("value", nargs="?")
    p.add_argument("--path")
    p.add_argument("--expiration", type=_positive_int)
    p.add_argument("--ttl", type=_positive_int)
    _add_namespace_selector(p)
    p.set_defaults(func=cmd_key_put)

    p = group.add_parser("get")
    p.add_argument("key")
    _add_namespace_selector(p)
    p.set_defaults(func=cmd_key_get)

    p = group.add_parser("delete")
    p.add_argument("key")
    p.add_argument("--force", "-f", action="store_true")
    _add_namespace_selector(p)
    p.set_defaults(func=cmd_key_delete)

    p = group.add_parser("list")
    p.add_argument("--prefix")
    p.add_argument("--cursor")
    p.add_argument("--limit", type=_positive_int)
    _add_namespace_selector(p)
    p.set_defaults(func=cmd_key_list)

    # --- bulk ---
    group = sub.add_parser("bulk").add_subparsers(
        dest="subcommand", parser_class=_SubcommandParser, required=True
    )
    p = group.add_parser("put")
    p.add_argument("file")
    _add_namespace_selector(p)
    p.set_defaults(func=cmd_bulk_put)

    p = group.add_parser("delete")
    p.add_argument("file")
    p.add_argument("--force", "-f", action="store_true")
    _add_namespace_selector(p)
    p.set_defaults(func=cmd_bulk_delete)

    # --- bucket ---
    group = sub.add_parser("bucket").add_subparsers(
        dest="subcommand", parser_class=_SubcommandParser, required=True
    )
    p = group.add_parser("upload")
    p.add_argument("directory", nargs="?")
    _add_namespace_selector(p)
    p.set_defaults(func=cmd_bucket_upload)

    p = group.add_parser("delete")
    p.add_argument("directory", nargs="?")
    p.add_argument("--force", "-f", action="store_true")
    _add_namespace_selector(p)
    p.set_defaults(func=cmd_bucket_delete)

    # --- version (bare word) ---
    sub.add_parser("version").set_defaults(func=None)

    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------


def _error_type_from_message(message):
    if message.startswith("[SETUP_NEEDED]"):
        return "setup_needed"
    if message.startswith("[ERROR]") or message.startswith("[WARN]"):
        return "error"
    return "cli_error"


def _emit_cli_error(err, fmt):
    msg = str(err)
    if fmt == "json":
        payload = {
            "ok": False,
            "schema_version": config.CONTRACT_SCHEMA_VERSION,
            "error": {
                "type": _error_type_from_message(msg),
                "message": msg,
                "exit_code": getattr(err, "exit_code", 1),
            },
        }
        print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
        return
    print(msg, file=sys.stderr)


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    argv = sys.argv[1:] if argv is None else argv
    fmt = "json"
    try:
        fmt, environment, quiet, verbose, remaining_argv = _extract_global_flags(argv)
        config.RUNTIME_QUIET = quiet
        config.RUNTIME_VERBOSE = verbose
        if verbose:
            config.HTTP_LOG_ENABLED = True

        if not remaining_argv:
            print(HELP_TEXT)
            sys.exit(0)

        parser = build_parser()
        ns = parser.parse_args(remaining_argv)
        ns.format = fmt
        ns.env = environment

        if ns.show_help or not ns.command:
            print(HELP_TEXT)
            sys.exit(0)

        if ns.command == "version":
            print(f"kvctl {config.VERSION}")
            sys.exit(0)

        handler = getattr(ns, "func", None)
        if handler:
            handler(ns)
        else:
            raise CliError(f"[ERROR] Unknown command: {ns.command}")

    except CliError as e:
        _emit_cli_error(e, fmt)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
