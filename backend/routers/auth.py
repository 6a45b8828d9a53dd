import logging
import sqlite3
import time

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from backend.errors import InvalidCredentials
from backend.security import issue_session_token, require_session
from database.db import create_tables, create_user, get_user_by_id, verify_user_credentials

logger = logging.getLogger(__name__)

router = APIRouter()


class UserRegister(BaseModel):
    nome: str
    email: str
    password: str


class UserLogin(BaseModel):
    email: str
    password: str


@router.post("/auth/register", status_code=201)
def register_user(payload: UserRegister):
    nome = payload.nome.strip()
    email = payload.email.strip()

    if not nome or not email or not payload.password:
        raise HTTPException(status_code=400, detail="Name, email and password are required.")
    if "@" not in email:
        raise HTTPException(status_code=400, detail="Invalid email address.")

    try:
        user_id = create_user(nome, email, payload.password)
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=409, detail="Email already registered.")

    logger.info("User %s registered", user_id)
    return {"message": "User created successfully", "id": user_id}


@router.post("/auth/login")
def login(payload: UserLogin):
    email = payload.email.strip()

    if not email:
        raise HTTPException(status_code=400, detail="Email is required.")
    if not payload.password:
        raise HTTPException(status_code=400, detail="Password is required.")

    try:
        user = verify_user_credentials(email, payload.password)
    except sqlite3.OperationalError:
        # Self-heal when the schema is missing (e.g., lifespan skipped).
        try:
            create_tables()
            user = verify_user_credentials(email, payload.password)
        except sqlite3.OperationalError:
            raise HTTPException(
                status_code=503,
                detail="Authentication service unavailable. Please retry.",
            )

    if not user:
        raise InvalidCredentials()

    token, claims = issue_session_token(user["id"])
    now = int(time.time())
    return {
        "access_token": token,
        "token_type": "bearer",
        "user_id": claims["user_id"],
        "expires_at": claims["exp"],
        "expires_in": max(0, int(claims["exp"]) - now),
    }


@router.get("/auth/me")
def auth_me(session: dict = Depends(require_session)):
    user = get_user_by_id(int(session["user_id"]))
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired session token.")
    return {
        "user_id": user["id"],
        "nome": user["nome"],
        "email": user["email"],
        "expires_at": session.get("exp"),
        "issued_at": session.get("iat"),
    }
