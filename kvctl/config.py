"""
kvctl shared configuration, constants, and module-level state.
Imports only models/exceptions from the project.
"""

import os
import tomllib

from kvctl.exceptions import ConfigurationError, SetupError
from kvctl.models import Target

# ---------------------------------------------------------------------------
# .env path and helpers
# ---------------------------------------------------------------------------

ENV_PATH = os.path.join(os.getcwd(), ".env")

# Keys read from os.environ when the .env file does not define them.
_KNOWN_ENV_KEYS = (
    "CF_API_TOKEN",
    "CF_API_KEY",
    "CF_EMAIL",
    "CF_ACCOUNT_ID",
    "KVCTL_API_BASE_URL",
    "KVCTL_HTTP_MAX_RESPONSE_BYTES",
    "KVCTL_HTTP_LOG",
    "KVCTL_HTTP_LOG_SAMPLE_RATE",
    "KVCTL_PROJECT_FILE",
)


def load_env():
    env = {}
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, val = line.split("=", 1)
                    env[key.strip()] = val.strip().strip('"').strip("'")
    for key in _KNOWN_ENV_KEYS:
        if key not in env and os.environ.get(key):
            env[key] = os.environ[key]
    return env


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(key, default):
    """Parse float env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.3.0"
CONTRACT_SCHEMA_VERSION = "1.0"

DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"

# Bulk uploads can take minutes; the usual 30s default cancels them early.
BULK_HTTP_TIMEOUT_SECONDS = 5 * 60

DEFAULT_PROJECT_FILE = "kvctl.toml"

# ---------------------------------------------------------------------------
# Module-level state (loaded from .env)
# ---------------------------------------------------------------------------

env = load_env()

API_TOKEN = env.get("CF_API_TOKEN", "")
API_KEY = env.get("CF_API_KEY", "")
EMAIL = env.get("CF_EMAIL", "")
ACCOUNT_ID_OVERRIDE = env.get("CF_ACCOUNT_ID", "")
BASE_URL = env.get("KVCTL_API_BASE_URL", "") or DEFAULT_BASE_URL
PROJECT_FILE = env.get("KVCTL_PROJECT_FILE", "") or DEFAULT_PROJECT_FILE
HTTP_MAX_RESPONSE_BYTES = _env_int("KVCTL_HTTP_MAX_RESPONSE_BYTES", 25_000_000)
HTTP_LOG_ENABLED = _env_bool("KVCTL_HTTP_LOG", False)
HTTP_LOG_SAMPLE_RATE = min(1.0, max(0.0, _env_float("KVCTL_HTTP_LOG_SAMPLE_RATE", 1.0)))

# Set by cli.main() from global flags.
RUNTIME_QUIET = False
RUNTIME_VERBOSE = False

# ---------------------------------------------------------------------------
# Project file
# ---------------------------------------------------------------------------

_TARGET_KEYS = ("name", "account_id", "kv_namespaces")


def load_target(path=None, environment=None):
    """Read the project file and return the Target for *environment*.

    A ``[env.<name>]`` table overrides the top-level name, account_id and
    kv_namespaces. CF_ACCOUNT_ID, when set, overrides account_id last.
    """
    path = path or PROJECT_FILE
    if not os.path.exists(path):
        raise SetupError(
            f"[SETUP_NEEDED] No project file found at {path}.\n"
            "  Create one with name, account_id and [[kv_namespaces]] entries."
        )
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"[SETUP_NEEDED] Invalid TOML in {path}: {e}") from e

    merged = {k: data[k] for k in _TARGET_KEYS if k in data}
    context = os.path.basename(path)
    if environment:
        envs = data.get("env") or {}
        if environment not in envs:
            available = ", ".join(sorted(envs)) or "none"
            raise ConfigurationError(
                f'[SETUP_NEEDED] Environment "{environment}" not found in {context}. '
                f"Available: {available}"
            )
        overrides = envs[environment]
        if not isinstance(overrides, dict):
            raise ConfigurationError(f"[SETUP_NEEDED] [env.{environment}] must be a table.")
        merged.update({k: overrides[k] for k in _TARGET_KEYS if k in overrides})
        context = f"{context} [env.{environment}]"

    if ACCOUNT_ID_OVERRIDE:
        merged["account_id"] = ACCOUNT_ID_OVERRIDE
    return Target.from_dict(merged, context)
