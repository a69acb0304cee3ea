# quizapp/auth.py
from typing import Optional
from jose import jwt, JWTError
from loguru import logger
from .settings import settings

def user_id_from_auth_header(authorization: Optional[str]) -> Optional[str]:
    """
    Opaque user id from a bearer token, or None for anonymous callers.
    Generation and explanation never require an identity.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        return None

    secret = (settings.AUTH_JWT_SECRET or "").strip()
    if not secret:
        return None

    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            options={"verify_aud": False},
        )
        uid = payload.get("sub") or payload.get("user_id")
        if not uid:
            logger.warning(f"[auth] decoded JWT but no sub/user_id; payload keys: {list(payload.keys())}")
        return uid
    except JWTError as e:
        logger.warning(f"[auth] JWT decode failed: {e}")
        return None
