"""Password hashing, sessions and the FastAPI dependency guarding the API."""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from models import User

logger = logging.getLogger(__name__)

SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1

SESSION_TTL = timedelta(hours=24)
REMEMBER_ME_TTL = timedelta(days=30)

security = HTTPBearer(auto_error=False)


def hash_password(password: str, salt: str | None = None) -> tuple[str, str]:
    """Return (hash, salt) for a plaintext password."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
    ).hex()
    return digest, salt


def verify_password(user: User, password: str) -> bool:
    digest, _ = hash_password(password, user.salt)
    return hmac.compare_digest(digest, user.password_hash)


@dataclass
class Session:
    token: str
    user: User
    expires_at: datetime


class SessionStore:
    """In-process bearer token sessions."""

    def __init__(self, clock=None):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def create(self, user: User, remember_me: bool = False) -> Session:
        ttl = REMEMBER_ME_TTL if remember_me else SESSION_TTL
        session = Session(
            token=secrets.token_urlsafe(32),
            user=user,
            expires_at=self._clock() + ttl,
        )
        with self._lock:
            self._purge_expired()
            self._sessions[session.token] = session
        return session

    def _purge_expired(self) -> None:
        """Drop every expired session. Caller holds the lock."""
        now = self._clock()
        for token in [t for t, s in self._sessions.items() if s.expires_at <= now]:
            del self._sessions[token]

    def get(self, token: str) -> Session | None:
        """Look up a live session; expired ones are dropped."""
        with self._lock:
            session = self._sessions.get(token)
            if session and session.expires_at <= self._clock():
                del self._sessions[token]
                return None
            return session

    def revoke(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(security),
) -> Session:
    """Resolve the bearer token to a session or reject the request with 401."""
    if credentials is None:
        raise unauthorized()
    sessions: SessionStore = request.app.state.sessions
    session = sessions.get(credentials.credentials)
    if session is None:
        logger.info("Rejected request with unknown or expired token")
        raise unauthorized()
    return session


def get_current_user(session: Session = Depends(get_current_session)) -> User:
    return session.user
