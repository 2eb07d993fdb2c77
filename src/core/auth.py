from __future__ import annotations

import datetime as dt
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from src.core.config import AppConfig
from src.utils.time import utcnow


# bcrypt only looks at the first 72 bytes; newer releases refuse longer input.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(plaintext: str) -> bytes:
    return (plaintext or "").encode("utf-8")[:_BCRYPT_MAX_BYTES]


class AuthService:
    """
    Password hashing and session-token signing.

    The signing secret comes from the config the service is built with; a new
    secret invalidates every token issued under the old one.
    """

    def __init__(self, config: AppConfig) -> None:
        self._secret = config.jwt_secret
        self._algorithm = config.jwt_algorithm
        self._ttl = dt.timedelta(hours=config.token_ttl_hours)
        self._rounds = max(4, min(31, int(config.bcrypt_rounds)))
        self._dummy_hash: Optional[str] = None

    @property
    def token_ttl(self) -> dt.timedelta:
        return self._ttl

    def hash_password(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_password_bytes(plaintext), salt).decode("utf-8")

    def verify_password(self, plaintext: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(_password_bytes(plaintext), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def dummy_hash(self) -> str:
        """A throwaway hash so lookups of unknown users still pay for one bcrypt check."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash_password("unknown-user")
        return self._dummy_hash

    def issue_token(self, user_id: int, *, now: Optional[dt.datetime] = None) -> str:
        issued = now or utcnow()
        claims = {
            "sub": str(user_id),
            "iat": int(issued.timestamp()),
            "exp": int((issued + self._ttl).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify_token(self, token: str) -> Optional[int]:
        """Return the user id carried by a valid token, or None for any failure."""
        if not token:
            return None
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
            return int(claims["sub"])
        except (JWTError, KeyError, TypeError, ValueError):
            return None
