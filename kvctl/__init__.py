"""kvctl — CLI tool for administering Workers KV namespaces and keys."""

from kvctl.client import GlobalUser, KvClient, api_client
from kvctl.config import VERSION
from kvctl.diagnostics import format_error
from kvctl.exceptions import (
    BindingNotFoundError,
    CliError,
    ConfigurationError,
    DuplicateBindingError,
    RemoteError,
    SetupError,
    UserInputError,
)
from kvctl.models import ApiError, ApiFailure, NamespaceBinding, Target, TransportFailure
from kvctl.targets import get_namespace_id, validate_target
from kvctl.types import BulkPair, KeyPage, KeyRow, NamespaceRow

__all__ = [
    "VERSION",
    "ApiError",
    "ApiFailure",
    "BindingNotFoundError",
    "BulkPair",
    "CliError",
    "ConfigurationError",
    "DuplicateBindingError",
    "GlobalUser",
    "KeyPage",
    "KeyRow",
    "KvClient",
    "NamespaceBinding",
    "NamespaceRow",
    "RemoteError",
    "SetupError",
    "Target",
    "TransportFailure",
    "UserInputError",
    "api_client",
    "format_error",
    "get_namespace_id",
    "validate_target",
]
