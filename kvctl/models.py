"""
Typed models for project targets, command payloads, and remote failures.
"""

from dataclasses import dataclass

from kvctl.exceptions import CliError, ConfigurationError

# ---------------------------------------------------------------------------
# Project targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NamespaceBinding:
    """One ``kv_namespaces`` entry: a local binding name mapped to a remote id."""

    binding: str
    id: str
    bucket: str | None = None

    @classmethod
    def from_value(cls, value, context):
        if not isinstance(value, dict):
            raise ConfigurationError(
                f"[SETUP_NEEDED] Invalid kv_namespaces entry in {context}: "
                f"expected table, got {type(value).__name__}."
            )
        binding = value.get("binding")
        ns_id = value.get("id")
        if not isinstance(binding, str) or not isinstance(ns_id, str):
            raise ConfigurationError(
                f"[SETUP_NEEDED] Every kv_namespaces entry in {context} "
                'needs string "binding" and "id" fields.'
            )
        bucket = value.get("bucket")
        return cls(binding=binding, id=ns_id, bucket=bucket if isinstance(bucket, str) else None)


@dataclass(frozen=True)
class Target:
    """A deployable configuration unit: account identity plus namespace bindings."""

    name: str
    account_id: str = ""
    kv_namespaces: tuple[NamespaceBinding, ...] | None = None

    @classmethod
    def from_dict(cls, data, context="kvctl.toml"):
        name = data.get("name", "")
        account_id = data.get("account_id", "")
        if not isinstance(name, str) or not isinstance(account_id, str):
            raise ConfigurationError(
                f'[SETUP_NEEDED] "name" and "account_id" in {context} must be strings.'
            )
        raw = data.get("kv_namespaces")
        namespaces = None
        if raw is not None:
            if not isinstance(raw, list):
                raise ConfigurationError(
                    f'[SETUP_NEEDED] "kv_namespaces" in {context} must be an array of tables.'
                )
            namespaces = tuple(NamespaceBinding.from_value(v, context) for v in raw)
        return cls(name=name, account_id=account_id, kv_namespaces=namespaces)


# ---------------------------------------------------------------------------
# Remote failures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ApiError:
    code: int
    message: str


@dataclass(frozen=True)
class ApiFailure:
    """The store answered with an HTTP error status and zero or more error codes."""

    status: int
    errors: tuple[ApiError, ...] = ()

    def __str__(self):
        if not self.errors:
            return f"HTTP {self.status}"
        codes = ", ".join(str(e.code) for e in self.errors)
        return f"HTTP {self.status} (codes: {codes})"


@dataclass(frozen=True)
class TransportFailure:
    """The store could not be reached or did not answer in time."""

    reason: str

    def __str__(self):
        return self.reason


# ---------------------------------------------------------------------------
# Bulk payloads
# ---------------------------------------------------------------------------

_BULK_PAIR_FIELDS = {"key", "value", "expiration", "expiration_ttl", "base64"}


@dataclass(frozen=True)
class BulkPayload:
    """Validated array read from a bulk put/delete file."""

    items: list

    @classmethod
    def for_put(cls, value, context):
        if not isinstance(value, list):
            raise CliError(
                f"[ERROR] Invalid JSON in {context}: expected array, got {type(value).__name__}."
            )
        for i, pair in enumerate(value):
            if not isinstance(pair, dict):
                raise CliError(f"[ERROR] Entry {i} in {context} must be an object.")
            if not isinstance(pair.get("key"), str) or not isinstance(pair.get("value"), str):
                raise CliError(
                    f'[ERROR] Entry {i} in {context} needs string "key" and "value" fields.'
                )
            unknown = set(pair) - _BULK_PAIR_FIELDS
            if unknown:
                raise CliError(
                    f"[ERROR] Entry {i} in {context} has unknown field(s): "
                    f"{', '.join(sorted(unknown))}"
                )
        return cls(items=value)

    @classmethod
    def for_delete(cls, value, context):
        """Accept either an array of key strings or the same array used for bulk put."""
        if not isinstance(value, list):
            raise CliError(
                f"[ERROR] Invalid JSON in {context}: expected array, got {type(value).__name__}."
            )
        keys = []
        for i, entry in enumerate(value):
            if isinstance(entry, str):
                keys.append(entry)
            elif isinstance(entry, dict) and isinstance(entry.get("key"), str):
                keys.append(entry["key"])
            else:
                raise CliError(
                    f'[ERROR] Entry {i} in {context} must be a key string or an object with "key".'
                )
        return cls(items=keys)
