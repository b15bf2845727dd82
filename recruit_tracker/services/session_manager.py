"""
Bearer-token session resolution. Turns the Authorization header into the
explicit SessionContext every handler receives.
"""
from datetime import datetime, timezone
from typing import Optional

from fastapi import Header

from recruit_tracker.models.schemas import AuthSession, SessionContext
from recruit_tracker.services.db import auth_sessions_coll, to_dict
from recruit_tracker.utils.exceptions import AuthenticationError, ExceptionContext
from recruit_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


def extract_token(authorization: Optional[str]) -> str:
    if not authorization:
        return ""
    if authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip()
    return authorization.strip()


class SessionManager:
    """Resolves access tokens against the auth_sessions collection"""

    @staticmethod
    async def resolve(token: str, now: datetime = None) -> SessionContext:
        if not token:
            raise AuthenticationError("Missing access token")

        with ExceptionContext("resolve_session", logger):
            doc = await auth_sessions_coll.find_one({"access_token": token})

        if not doc:
            logger.warning("Rejected unknown access token")
            raise AuthenticationError("Invalid token")

        session = AuthSession(**to_dict(doc))
        now = now or datetime.now(timezone.utc)
        expires_at = session.expires_at
        if expires_at is not None:
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            if expires_at <= now:
                logger.info(f"Rejected expired session for user {session.user_id}")
                raise AuthenticationError("Session expired")

        return SessionContext(user_id=session.user_id, access_token=token)


async def get_session_context(authorization: Optional[str] = Header(default=None)) -> SessionContext:
    """FastAPI dependency giving routes the caller's identity"""
    return await SessionManager.resolve(extract_token(authorization))
