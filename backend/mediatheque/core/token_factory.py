"""HS256 bearer tokens shared with the admin panel's auth service.

The auth service issues tokens; this API only needs ``read_token``.
``issue_token`` exists for management scripts and tests.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

_HEADER = {"alg": "HS256", "typ": "JWT"}


@dataclass(frozen=True)
class TokenClaims:
    """Verified token claims."""
    sub: str
    role: str
    exp: datetime


def issue_token(subject: str, role: str, secret: str, expires_hours: int = 24) -> str:
    """Sign a token for *subject* valid for *expires_hours*."""
    now = int(time.time())
    claims = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": now + expires_hours * 3600,
    }
    head = _encode_segment(_HEADER)
    body = _encode_segment(claims)
    return f"{head}.{body}.{_sign(f'{head}.{body}', secret)}"


def read_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenClaims]:
    """Verify signature and expiry. Returns ``None`` for any invalid token."""
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    try:
        head, body, signature = token.split(".")
    except ValueError:
        return None

    if not hmac.compare_digest(_sign(f"{head}.{body}", secret), signature):
        return None

    try:
        claims = json.loads(_b64decode(body))
    except (ValueError, UnicodeDecodeError):
        return None

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or time.time() > exp:
        return None

    subject = claims.get("sub")
    if not subject:
        return None

    return TokenClaims(
        sub=str(subject),
        role=str(claims.get("role", "")),
        exp=datetime.fromtimestamp(exp, tz=timezone.utc),
    )


def _sign(signing_input: str, secret: str) -> str:
    digest = hmac.new(secret.encode(), signing_input.encode(), hashlib.sha256).digest()
    return _b64encode(digest)


def _encode_segment(data: dict) -> str:
    return _b64encode(json.dumps(data, separators=(",", ":")).encode())


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
