# tests/test_security.py
import base64
import hashlib
import hmac

from security import compute_webhook_hmac, verify_webhook_hmac


def test_signature_matches_shopify_scheme():
    body = b'{"id":1}'
    expected = base64.b64encode(hmac.new(b"hush", body, hashlib.sha256).digest()).decode()
    assert compute_webhook_hmac("hush", body) == expected


def test_verify_rejects_tampered_or_missing_signature():
    body = b'{"id":1}'
    signature = compute_webhook_hmac("hush", body)
    assert verify_webhook_hmac("hush", body, signature)
    assert not verify_webhook_hmac("hush", b'{"id":2}', signature)
    assert not verify_webhook_hmac("other", body, signature)
    assert not verify_webhook_hmac("hush", body, None)
