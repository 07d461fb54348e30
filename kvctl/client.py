"""
KvClient — authenticated access to the Workers KV REST API.

Every method issues exactly one request and returns plain, JSON-serializable
values. Failures surface as RemoteError carrying an ApiFailure or
TransportFailure; translating them into text is the caller's job.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from kvctl import config
from kvctl._utils import url_encode_key
from kvctl.api import _http_request, _mask_token, parse_failure, unwrap_envelope
from kvctl.exceptions import HTTPError, RemoteError, SetupError
from kvctl.types import KeyPage, NamespaceRow

# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GlobalUser:
    """Either a scoped API token or a legacy global API key plus account e-mail."""

    api_token: str = ""
    email: str = ""
    api_key: str = ""

    def to_headers(self) -> dict[str, str]:
        if self.api_token:
            return {"Authorization": f"Bearer {self.api_token}"}
        return {"X-Auth-Email": self.email, "X-Auth-Key": self.api_key}

    def __repr__(self):
        if self.api_token:
            return f"GlobalUser(api_token={_mask_token(self.api_token)!r})"
        return f"GlobalUser(email={self.email!r}, api_key={_mask_token(self.api_key)!r})"


def load_user() -> GlobalUser:
    """Build credentials from CF_API_TOKEN, or CF_EMAIL + CF_API_KEY."""
    if config.API_TOKEN:
        return GlobalUser(api_token=config.API_TOKEN)
    if config.EMAIL and config.API_KEY:
        return GlobalUser(email=config.EMAIL, api_key=config.API_KEY)
    raise SetupError(
        "[SETUP_NEEDED] No Cloudflare credentials found.\n"
        "  Set CF_API_TOKEN (or CF_EMAIL and CF_API_KEY) in .env or the environment."
    )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class KvClient:
    """Thin wrapper over the KV endpoints of one account."""

    def __init__(self, user: GlobalUser, *, timeout: float, base_url: str | None = None):
        self.user = user
        self.timeout = timeout
        self.base_url = (base_url or config.BASE_URL).rstrip("/")

    # -- transport ----------------------------------------------------------

    def _headers(self, content_type: str = "application/json") -> dict[str, str]:
        headers = {
            "Content-Type": content_type,
            "Accept": "application/json",
            "User-Agent": f"kvctl/{config.VERSION}",
            "X-Request-Id": str(uuid.uuid4()),
        }
        headers.update(self.user.to_headers())
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        data: Any = None,
        raw_body: bytes | None = None,
        params: dict[str, Any] | None = None,
        expect_raw: bool = False,
        full_envelope: bool = False,
    ) -> Any:
        url = self.base_url + path
        query = {k: v for k, v in (params or {}).items() if v is not None}
        if query:
            url += "?" + urlencode(query)
        content_type = "application/octet-stream" if raw_body is not None else "application/json"
        try:
            response = _http_request(
                url,
                data=data,
                headers=self._headers(content_type),
                method=method,
                timeout=self.timeout,
                raw_body=raw_body,
                expect_raw=expect_raw,
            )
        except HTTPError as e:
            raise RemoteError(parse_failure(e)) from e
        if expect_raw:
            return response
        result = unwrap_envelope(response)
        return response if full_envelope else result

    @staticmethod
    def _namespaces_path(account_id: str) -> str:
        return f"/accounts/{account_id}/storage/kv/namespaces"

    def _namespace_path(self, account_id: str, namespace_id: str) -> str:
        return f"{self._namespaces_path(account_id)}/{namespace_id}"

    # -- namespaces ---------------------------------------------------------

    def list_namespaces(self, account_id: str) -> list[NamespaceRow]:
        """Return the first page of namespaces (no pagination)."""
        result = self._request("GET", self._namespaces_path(account_id))
        return list(result or [])

    def create_namespace(self, account_id: str, title: str) -> dict[str, Any]:
        return self._request("POST", self._namespaces_path(account_id), data={"title": title})

    def delete_namespace(self, account_id: str, namespace_id: str) -> None:
        self._request("DELETE", self._namespace_path(account_id, namespace_id))

    def rename_namespace(self, account_id: str, namespace_id: str, title: str) -> None:
        self._request(
            "PUT", self._namespace_path(account_id, namespace_id), data={"title": title}
        )

    # -- keys ---------------------------------------------------------------

    def list_keys(
        self,
        account_id: str,
        namespace_id: str,
        *,
        prefix: str | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> KeyPage:
        """Return one page of keys plus the cursor for the next page, if any."""
        path = self._namespace_path(account_id, namespace_id) + "/keys"
        params = {"prefix": prefix, "cursor": cursor, "limit": limit}
        response = self._request("GET", path, params=params, full_envelope=True)
        keys = response.get("result") or []
        info = response.get("result_info") or {}
        return {"keys": list(keys), "cursor": info.get("cursor") or None}

    def get_value(self, account_id: str, namespace_id: str, key: str) -> bytes:
        path = f"{self._namespace_path(account_id, namespace_id)}/values/{url_encode_key(key)}"
        return self._request("GET", path, expect_raw=True)

    def put_value(
        self,
        account_id: str,
        namespace_id: str,
        key: str,
        value: bytes,
        *,
        expiration: int | None = None,
        expiration_ttl: int | None = None,
    ) -> None:
        path = f"{self._namespace_path(account_id, namespace_id)}/values/{url_encode_key(key)}"
        self._request(
            "PUT",
            path,
            raw_body=value,
            params={"expiration": expiration, "expiration_ttl": expiration_ttl},
        )

    def delete_key(self, account_id: str, namespace_id: str, key: str) -> None:
        path = f"{self._namespace_path(account_id, namespace_id)}/values/{url_encode_key(key)}"
        self._request("DELETE", path)

    # -- bulk ---------------------------------------------------------------

    def bulk_put(self, account_id: str, namespace_id: str, pairs: list[dict[str, Any]]) -> Any:
        """Write all *pairs* in a single request. The caller owns any chunking."""
        return self._request(
            "PUT", self._namespace_path(account_id, namespace_id) + "/bulk", data=pairs
        )

    def bulk_delete(self, account_id: str, namespace_id: str, keys: list[str]) -> Any:
        """Delete all *keys* in a single request. The caller owns any chunking."""
        return self._request(
            "DELETE", self._namespace_path(account_id, namespace_id) + "/bulk", data=keys
        )


def api_client(user: GlobalUser) -> KvClient:
    """Build a client for *user* with the long timeout bulk uploads need."""
    return KvClient(user, timeout=config.BULK_HTTP_TIMEOUT_SECONDS)
