"""Typed response definitions for KvClient methods.

These TypedDicts document the shape of dicts returned by public API methods.
They are optional — runtime behavior is unchanged (plain dicts).
"""

from __future__ import annotations

from typing import TypedDict


class NamespaceRow(TypedDict, total=False):
    """One entry of KvClient.list_namespaces()."""

    id: str
    title: str
    supports_url_encoding: bool


class KeyRow(TypedDict, total=False):
    """One key as returned by the keys listing endpoint."""

    name: str
    expiration: int
    metadata: dict


class KeyPage(TypedDict):
    """Return type of KvClient.list_keys()."""

    keys: list[KeyRow]
    cursor: str | None


class BulkPair(TypedDict, total=False):
    """One element of a bulk put file."""

    key: str
    value: str
    expiration: int
    expiration_ttl: int
    base64: bool
