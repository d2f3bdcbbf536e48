import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from jose import jwt

from tasklink.core.config import settings

SIGNATURE_PREFIX = "sha256="


def _as_bytes(value: Union[str, bytes]) -> bytes:
    return value.encode() if isinstance(value, str) else value


def compute_signature(secret: Union[str, bytes], raw_body: bytes) -> str:
    """Return the X-Hub-Signature-256 value GitHub sends for ``raw_body``"""
    digest = hmac.new(_as_bytes(secret), raw_body, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_signature(
    secret: Union[str, bytes], raw_body: bytes, provided: Optional[str]
) -> bool:
    """
    Check a webhook signature header against the raw request body.

    ``raw_body`` must be the bytes exactly as received; re-serialized JSON
    produces a different digest. The comparison is constant time.
    """
    if not provided:
        return False

    try:
        provided_bytes = provided.encode("ascii")
    except UnicodeEncodeError:
        return False

    expected = compute_signature(secret, raw_body).encode("ascii")
    return hmac.compare_digest(provided_bytes, expected)


def create_access_token(
    user_id: int, expires_delta: Optional[timedelta] = None
) -> str:
    """Issue a bearer token whose ``sub`` is the user id"""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    claims = {"sub": str(user_id), "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
