import hashlib
import hmac

from app.core.services.proxy_signature import canonical_query, compute_signature, verify_signature

SECRET = "shpss_test_secret"


def _signed(params):
    return params + [("signature", compute_signature(params, SECRET))]


def test_canonical_query_sorts_and_drops_signature():
    params = [("shop", "store.myshopify.com"), ("action", "data"), ("signature", "abc")]
    assert canonical_query(params) == "action=data&shop=store.myshopify.com"


def test_canonical_query_joins_repeated_values():
    params = [("ids", "1"), ("ids", "2"), ("a", "x")]
    assert canonical_query(params) == "a=x&ids=1,2"


def test_compute_signature_is_hmac_sha256_hex():
    params = [("path_prefix", "/apps/greywater-directory"), ("timestamp", "1700000000")]
    expected = hmac.new(
        SECRET.encode(),
        b"path_prefix=/apps/greywater-directory&timestamp=1700000000",
        hashlib.sha256,
    ).hexdigest()
    assert compute_signature(params, SECRET) == expected


def test_verify_accepts_valid_signature():
    params = _signed([("shop", "store.myshopify.com"), ("action", "stats")])
    assert verify_signature(params, SECRET) is True


def test_verify_rejects_tampered_and_missing_signatures():
    params = _signed([("shop", "store.myshopify.com"), ("action", "stats")])
    tampered = [(k, "list" if k == "action" else v) for k, v in params]

    assert verify_signature(tampered, SECRET) is False
    assert verify_signature([("action", "stats")], SECRET) is False
    assert verify_signature([("action", "stats"), ("signature", "")], SECRET) is False


def test_verify_passes_without_secret():
    assert verify_signature([("action", "stats")], None) is True
    assert verify_signature([("action", "stats")], "") is True
