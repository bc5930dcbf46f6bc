import base64
import hashlib
import hmac


def compute_webhook_hmac(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_webhook_hmac(secret: str, body: bytes, signature: str | None) -> bool:
    if not signature:
        return False
    expected = compute_webhook_hmac(secret, body)
    return hmac.compare_digest(expected, signature.strip())
