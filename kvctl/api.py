"""
HTTP request layer, security helpers, and failure parsing for kvctl.
"""

import hashlib
import http.client
import json
import sys
import time
import urllib.error
import urllib.parse
import urllib.request

from kvctl import config
from kvctl.exceptions import CliError, HTTPError, RemoteError
from kvctl.models import ApiError, ApiFailure, TransportFailure

# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------


def _mask_token(token):
    """Show only first 6 chars of a token for safe logging."""
    return token[:6] + "..." if len(token) > 6 else token


def _safe_json_parse(text, context="input"):
    """Parse JSON with friendly error message on failure."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise CliError(f"[ERROR] Invalid JSON in {context}: {e.msg} at position {e.pos}") from None


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def _sanitize_url_for_log(url):
    """Mask sensitive query params in URLs before logging."""
    parsed = urllib.parse.urlsplit(url)
    if not parsed.query:
        return url
    pairs = urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
    masked = []
    for key, value in pairs:
        if key.lower() in {"token", "key", "api_key"}:
            masked.append((key, "***"))
        else:
            masked.append((key, value))
    safe_query = urllib.parse.urlencode(masked, doseq=True)
    return urllib.parse.urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, safe_query, parsed.fragment)
    )


def _log_http_event(**fields):
    """Emit structured HTTP logs to stderr when enabled."""
    if not config.HTTP_LOG_ENABLED:
        return
    print("[HTTP] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def _is_sampled_request(request_id):
    """Decide if a request should be logged based on sample rate."""
    rate = config.HTTP_LOG_SAMPLE_RATE
    if rate <= 0:
        return False
    if rate >= 1:
        return True
    if not request_id:
        return False
    digest = hashlib.sha256(request_id.encode("utf-8")).digest()
    bucket = int.from_bytes(digest[:4], "big") / 4294967295.0
    return bucket < rate


# ---------------------------------------------------------------------------
# HTTP request layer
# ---------------------------------------------------------------------------


def _http_request(
    url, data=None, headers=None, method="GET", timeout=30, raw_body=None, expect_raw=False
):
    """Make one HTTP request. There is no retry.

    Returns parsed JSON, or the raw response bytes when *expect_raw* is set.
    Raises HTTPError for HTTP error statuses (caller parses the body),
    RemoteError(TransportFailure) for timeouts and connection failures,
    CliError for oversized or unparseable responses.
    """
    if raw_body is not None:
        body = raw_body
    elif data is not None:
        body = json.dumps(data).encode("utf-8")
    else:
        body = None
    request_id = (headers or {}).get("X-Request-Id")
    safe_url = _sanitize_url_for_log(url)
    sampled = _is_sampled_request(request_id)
    start = time.perf_counter()
    req = urllib.request.Request(url, data=body, headers=headers or {}, method=method)
    if sampled:
        _log_http_event(
            phase="request",
            method=method,
            url=safe_url,
            bytes=len(body) if body else 0,
            request_id=request_id,
            timeout_seconds=timeout,
        )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            content_type = resp.headers.get("Content-Type", "")
            raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
            if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
                raise CliError(
                    "[ERROR] Response too large from the KV API "
                    f"(>{config.HTTP_MAX_RESPONSE_BYTES} bytes)."
                )
            if sampled:
                _log_http_event(
                    phase="response",
                    method=method,
                    url=safe_url,
                    status=getattr(resp, "status", 200),
                    content_type=content_type,
                    bytes=len(raw),
                    latency_ms=round((time.perf_counter() - start) * 1000, 2),
                    request_id=request_id,
                )
            if expect_raw:
                return raw
            try:
                return json.loads(raw.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                if content_type and "json" not in content_type.lower():
                    raise CliError(
                        f"[ERROR] Unexpected Content-Type from server "
                        f"({content_type}). This may be a proxy or network issue."
                    ) from None
                raise CliError(
                    "[ERROR] Unexpected response from the KV API (not valid JSON)."
                ) from None
    except urllib.error.HTTPError as e:
        error_body = (
            e.read(config.HTTP_MAX_RESPONSE_BYTES).decode("utf-8", errors="replace")
            if e.fp
            else ""
        )
        if sampled:
            _log_http_event(
                phase="response",
                method=method,
                url=safe_url,
                status=e.code,
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
                request_id=request_id,
            )
        raise HTTPError(e.code, e.reason, error_body, headers=e.headers) from e
    except TimeoutError as e:
        if sampled:
            _log_http_event(
                phase="network_error",
                method=method,
                url=safe_url,
                error="timeout",
                request_id=request_id,
            )
        raise RemoteError(
            TransportFailure(f"Request timed out after {timeout} seconds. Is the KV API reachable?")
        ) from e
    except urllib.error.URLError as e:
        if sampled:
            _log_http_event(
                phase="network_error",
                method=method,
                url=safe_url,
                error=f"url_error: {e.reason}",
                request_id=request_id,
            )
        raise RemoteError(TransportFailure(str(e.reason))) from e
    except (http.client.HTTPException, ConnectionError) as e:
        # urllib does not wrap these in URLError (closed socket, truncated body).
        if sampled:
            _log_http_event(
                phase="network_error",
                method=method,
                url=safe_url,
                error=f"{type(e).__name__}: {e}",
                request_id=request_id,
            )
        raise RemoteError(TransportFailure(str(e) or type(e).__name__)) from e


# ---------------------------------------------------------------------------
# API envelope parsing
# ---------------------------------------------------------------------------


def _parse_api_errors(payload):
    """Extract (code, message) pairs from an API envelope, keeping their order."""
    if not isinstance(payload, dict):
        return ()
    errors = []
    for item in payload.get("errors") or []:
        if not isinstance(item, dict):
            continue
        try:
            code = int(item.get("code"))
        except (TypeError, ValueError):
            continue
        errors.append(ApiError(code=code, message=str(item.get("message", ""))))
    return tuple(errors)


def parse_failure(err):
    """Convert an HTTPError into an ApiFailure.

    Gateway responses (HTML, empty bodies) carry no KV error codes and yield
    an ApiFailure with an empty error tuple.
    """
    try:
        payload = json.loads(err.body) if err.body else None
    except json.JSONDecodeError:
        payload = None
    return ApiFailure(status=err.code, errors=_parse_api_errors(payload))


def unwrap_envelope(payload, status=200):
    """Return the ``result`` of a successful envelope, raising RemoteError otherwise."""
    if not isinstance(payload, dict):
        raise CliError(
            "[ERROR] Unexpected response shape: "
            f"expected JSON object, got {type(payload).__name__}."
        )
    if payload.get("success") is False:
        raise RemoteError(ApiFailure(status=status, errors=_parse_api_errors(payload)))
    return payload.get("result")
