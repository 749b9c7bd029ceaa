"""
Hub token creation and verification.

Tokens are base64-encoded JSON payloads signed with HMAC-SHA256.
Secret key is loaded from ``config.hub_auth_secret`` (env var:
``HUB_AUTH_SECRET``).  Payload claims: ``sub`` (hub user id), ``eml``
(user email), ``exp`` (unix expiry).
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from base64 import b64decode, b64encode
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, status

from config.settings import config

_TOKEN_EXPIRY_SECONDS = 3600


@dataclass(frozen=True)
class HubPrincipal:
    subject: str
    email: Optional[str] = None


def _sign(raw: bytes) -> str:
    return hmac.new(config.hub_auth_secret.encode(), raw, hashlib.sha256).hexdigest()


def create_hub_token(subject: str, email: Optional[str] = None, expires_in: int = _TOKEN_EXPIRY_SECONDS) -> str:
    """Create a signed hub token (used by tests and local tooling)."""
    payload = {
        "sub": subject,
        "eml": email,
        "exp": int(time.time()) + expires_in,
    }
    raw = json.dumps(payload).encode()
    return b64encode(raw).decode() + "." + _sign(raw)


def verify_hub_token(authorization: Optional[str]) -> HubPrincipal:
    """
    Verify an ``Authorization: Bearer <token>`` value.

    Raises ``HTTPException(401)`` on missing, invalid or expired tokens.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Bearer token",
        )
    token = authorization[7:].strip()
    try:
        parts = token.split(".", 1)
        if len(parts) != 2:
            raise ValueError("bad format")
        raw = b64decode(parts[0])
        if not hmac.compare_digest(parts[1], _sign(raw)):
            raise ValueError("bad signature")
        payload = json.loads(raw)
        if payload.get("exp", 0) < time.time():
            raise ValueError("token expired")
        return HubPrincipal(subject=payload["sub"], email=payload.get("eml"))
    except (ValueError, KeyError, TypeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid or expired token: {exc}",
        )
