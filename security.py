"""
Password hashing and bearer tokens.

Tokens are signed with itsdangerous (HMAC over a timestamped payload), so
they cannot be forged or altered and stop verifying once older than the
configured TTL. Verification is stateless: only the shared secret is needed.
"""

import base64
import hashlib
from datetime import timedelta
from typing import Optional

import bcrypt
from fastapi import Request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from errors import Unauthorized

TOKEN_SALT = "scaffolder-auth-token"
TOKEN_TTL = timedelta(days=7)


def _prehash(password: str) -> bytes:
    # bcrypt only takes 72 bytes; a fixed-size digest keeps every byte significant
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


class TokenSigner:
    def __init__(self, secret: str, ttl: timedelta = TOKEN_TTL):
        if not secret:
            raise ValueError("A token secret is required")
        self.ttl = ttl
        self._serializer = URLSafeTimedSerializer(secret_key=secret, salt=TOKEN_SALT)

    def issue(self, user_id: str) -> str:
        return self._serializer.dumps({"user_id": user_id})

    def verify(self, token: str) -> str:
        """Return the user id carried by `token` or raise Unauthorized."""
        try:
            data = self._serializer.loads(token, max_age=self.ttl.total_seconds())
        except (SignatureExpired, BadSignature):
            raise Unauthorized("Invalid token")
        if not isinstance(data, dict) or not isinstance(data.get("user_id"), str):
            raise Unauthorized("Invalid token")
        return data["user_id"]


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization") or ""
    if not header.startswith("Bearer "):
        return None
    token = header[len("Bearer "):].strip()
    return token or None


def require_user(request: Request) -> str:
    """
    FastAPI dependency guarding a route.

    Reads `Authorization: Bearer <token>`, verifies it with the app's
    TokenSigner and stores the user id on request.state.
    """
    token = _bearer_token(request)
    if not token:
        raise Unauthorized("Unauthorized")
    signer: TokenSigner = request.app.state.signer
    user_id = signer.verify(token)
    request.state.user_id = user_id
    return user_id
