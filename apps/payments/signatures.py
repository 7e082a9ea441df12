"""HMAC-SHA256 signatures for inbound payment webhooks.

Header format: ``X-Payment-Signature: sha256=<hex digest of the raw body>``.
"""

import hashlib
import hmac

SIGNATURE_HEADER = 'X-Payment-Signature'
SCHEME = 'sha256'


def sign_payload(body: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"{SCHEME}={digest}"


def verify_signature(body: bytes, header_value: str, secret: str) -> bool:
    """Constant-time check of ``header_value`` against the body's signature."""
    if not secret or not header_value:
        return False
    scheme, _, received = header_value.partition('=')
    if scheme != SCHEME or not received:
        return False
    return hmac.compare_digest(sign_payload(body, secret), f"{SCHEME}={received.strip()}")
