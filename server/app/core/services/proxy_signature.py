"""Shopify App Proxy request signatures.

The proxy appends a ``signature`` query parameter: the hex HMAC-SHA256 of the
remaining parameters, formatted as ``key=value`` pairs sorted by key and
joined with ``&``. Repeated keys have their values joined with ``,``.
"""

import hashlib
import hmac
from typing import Iterable, Optional

SIGNATURE_PARAM = "signature"


def canonical_query(params: Iterable[tuple[str, str]]) -> str:
    grouped: dict[str, list[str]] = {}
    for key, value in params:
        if key == SIGNATURE_PARAM:
            continue
        grouped.setdefault(key, []).append(value)
    return "&".join(f"{key}={','.join(grouped[key])}" for key in sorted(grouped))


def compute_signature(params: Iterable[tuple[str, str]], secret: str) -> str:
    payload = canonical_query(params)
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(params: Iterable[tuple[str, str]], secret: Optional[str]) -> bool:
    """Check a request's signature. Always passes when no secret is configured."""
    if not secret:
        return True

    params = list(params)
    provided = next((value for key, value in params if key == SIGNATURE_PARAM), None)
    if not provided:
        return False

    expected = compute_signature(params, secret)
    return hmac.compare_digest(provided, expected)
