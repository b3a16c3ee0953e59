"""
Verification of the `mux-signature` webhook header.

Header format: ``t=<unix-seconds>,v1=<hex hmac-sha256>``. The HMAC is
computed with the shared webhook secret over ``"<t>.<raw body>"``.
"""
import hashlib
import hmac
import logging
import time
from typing import List, Optional, Tuple

from videodiary.core.config import WEBHOOK_TOLERANCE_SECONDS

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "mux-signature"


class WebhookSignatureError(Exception):
    """Missing, malformed, stale or mismatching webhook signature."""


def parse_signature_header(header: Optional[str]) -> Tuple[int, List[str]]:
    if not header:
        raise WebhookSignatureError("Missing signature header")

    timestamp = None
    signatures: List[str] = []
    for part in header.split(","):
        key, sep, value = part.strip().partition("=")
        if not sep:
            continue
        if key == "t":
            timestamp = value
        elif key == "v1" and value:
            signatures.append(value)

    if timestamp is None or not signatures:
        raise WebhookSignatureError("Malformed signature header")
    try:
        return int(timestamp), signatures
    except ValueError:
        raise WebhookSignatureError("Malformed signature timestamp")


def compute_signature(secret: str, timestamp: int, body: bytes) -> str:
    signed_payload = f"{timestamp}.".encode() + body
    return hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()


def verify_signature(
    body: bytes,
    header: Optional[str],
    secret: str,
    tolerance: int = WEBHOOK_TOLERANCE_SECONDS,
    now: Optional[float] = None,
) -> int:
    """
    Checks a webhook delivery against the shared secret.

    Args:
        body (bytes): Raw request body, exactly as received.
        header (str): Value of the `mux-signature` header.
        secret (str): Shared webhook signing secret.
        tolerance (int): Maximum signature age in seconds.
        now (float, optional): Current unix time, for tests.

    Returns:
        int: The verified signature timestamp.

    Raises:
        WebhookSignatureError: If the header is absent or malformed, the
            timestamp is older than `tolerance`, or no signature matches.
    """
    timestamp, signatures = parse_signature_header(header)

    now = time.time() if now is None else now
    if int(now) - timestamp > tolerance:
        raise WebhookSignatureError("Signature timestamp outside tolerance")

    expected = compute_signature(secret, timestamp, body)
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        raise WebhookSignatureError("Signature mismatch")

    return timestamp


def build_signature_header(secret: str, body: bytes, timestamp: Optional[int] = None) -> str:
    """Produces a header value the way the platform does."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    return f"t={timestamp},v1={compute_signature(secret, timestamp, body)}"
