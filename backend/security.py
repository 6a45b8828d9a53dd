import time
from typing import Any

import jwt
from fastapi import Depends, Header, HTTPException

from backend.config import AUTH_TOKEN_TTL_SECONDS, JWT_ALGORITHM, JWT_SECRET


def issue_session_token(user_id: int) -> tuple[str, dict[str, Any]]:
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "user_id": int(user_id),
        "iat": now,
        "exp": now + AUTH_TOKEN_TTL_SECONDS,
    }
    token = jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)
    return token, payload


def decode_session_token(token: str) -> dict[str, Any] | None:
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError:
        return None

    user_id = payload.get("user_id")
    if not isinstance(user_id, int) or user_id <= 0:
        return None
    if payload.get("sub") != str(user_id):
        return None

    return payload


def require_session(authorization: str | None = Header(default=None)) -> dict[str, Any]:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing bearer token.")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Invalid authorization scheme.")

    payload = decode_session_token(token.strip())
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired session token.")

    return payload


def current_user_id(session: dict = Depends(require_session)) -> int:
    return int(session["user_id"])
