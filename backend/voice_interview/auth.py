from fastapi import HTTPException
from jose import JWTError, jwt
import logging

from voice_interview.core import config

logger = logging.getLogger("voice_interview.auth")


def _resolve_payload_from_token(token: str) -> dict:
    if config.JWT_SECRET:
        try:
            return jwt.decode(token, config.JWT_SECRET, algorithms=["HS256"], options={"verify_aud": False})
        except JWTError:
            raise HTTPException(401, "Invalid token")

    if config.ENVIRONMENT == "production":
        raise HTTPException(500, "JWT_SECRET is not configured")
    if not config.ALLOW_UNVERIFIED_JWT_DEV:
        raise HTTPException(
            401,
            "Token verification unavailable in development; configure JWT_SECRET or set ALLOW_UNVERIFIED_JWT_DEV=true",
        )
    try:
        payload = jwt.get_unverified_claims(token)
        logger.warning("ALLOW_UNVERIFIED_JWT_DEV enabled; using unverified token claims in non-production mode")
    except JWTError:
        raise HTTPException(401, "Invalid token")
    return payload


def resolve_user_id_from_token(token: str) -> str:
    if not str(token or "").strip():
        raise HTTPException(401, "Unauthorized")
    payload = _resolve_payload_from_token(token)
    user_id = (payload or {}).get("sub")
    if not user_id:
        raise HTTPException(401, "Invalid token")
    return str(user_id)


def extract_bearer_token(authorization: str | None, query_token: str | None = None) -> str:
    auth_header = str(authorization or "").strip()
    if auth_header.lower().startswith("bearer "):
        return auth_header[len("bearer "):].strip()
    return str(query_token or "").strip()
