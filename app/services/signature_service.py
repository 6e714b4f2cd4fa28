import base64
import hashlib
import hmac


def compute_line_signature(channel_secret: str, raw_body: bytes) -> str:
    digest = hmac.new(channel_secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_line_signature(channel_secret: str | None, raw_body: bytes, signature: str | None) -> bool:
    """Check the x-line-signature header against the raw request body.

    The body must be the exact bytes received; re-serialized JSON will not match.
    """
    if not channel_secret:
        return False
    if not signature:
        return False

    expected = compute_line_signature(channel_secret, raw_body).encode("ascii")
    try:
        received = signature.encode("ascii")
    except UnicodeEncodeError:
        return False
    if len(expected) != len(received):
        return False
    return hmac.compare_digest(expected, received)
