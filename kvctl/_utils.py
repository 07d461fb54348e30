"""
Shared pure-utility functions for kvctl.

These helpers have no business logic and no side effects.
"""

from urllib.parse import quote

# RFC 3986 pchar minus unreserved (always safe): sub-delims, ":" and "@".
# "/" and "%" are never in this set, so a key stays one path segment.
_PATH_SEGMENT_SAFE = "!$&'()*+,;=:@"


def url_encode_key(key):
    """Percent-encode *key* (as UTF-8) for use as a single URL path segment."""
    return quote(key, safe=_PATH_SEGMENT_SAFE, encoding="utf-8", errors="strict")
