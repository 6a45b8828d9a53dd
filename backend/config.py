import os
import secrets
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]

DB_PATH = Path(os.getenv("PONTO_DB_PATH", BASE_DIR / "database" / "ponto.db"))
JWT_SECRET = (
    os.getenv("PONTO_JWT_SECRET", "").strip()
    or os.getenv("JWT_SECRET", "").strip()
    or secrets.token_urlsafe(32)
)
JWT_ALGORITHM = "HS256"
AUTH_TOKEN_TTL_SECONDS = int(os.getenv("PONTO_AUTH_TOKEN_TTL_SECONDS", "86400"))
LOG_LEVEL = os.getenv("PONTO_LOG_LEVEL", "INFO").strip().upper() or "INFO"


def _parse_bool(value: str | None, fallback: bool) -> bool:
    if value is None:
        return fallback
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return fallback


def _parse_csv(value: str | None, fallback: list[str]) -> list[str]:
    if not value:
        return fallback
    parsed = [item.strip() for item in value.split(",") if item.strip()]
    return parsed or fallback


CORS_ALLOW_ORIGINS = _parse_csv(
    os.getenv("PONTO_CORS_ALLOW_ORIGINS"),
    ["http://localhost:5173", "http://127.0.0.1:5173"],
)
CORS_ALLOW_METHODS = _parse_csv(
    os.getenv("PONTO_CORS_ALLOW_METHODS"),
    ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
)
CORS_ALLOW_HEADERS = _parse_csv(
    os.getenv("PONTO_CORS_ALLOW_HEADERS"),
    ["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
)
CORS_ALLOW_CREDENTIALS = _parse_bool(os.getenv("PONTO_CORS_ALLOW_CREDENTIALS"), True)
ENABLE_DEBUG_ENDPOINTS = _parse_bool(os.getenv("PONTO_ENABLE_DEBUG_ENDPOINTS"), False)

# Day boundaries for listing and totals are civil midnights in this zone.
TIMEZONE = os.getenv("PONTO_TIMEZONE", "UTC").strip() or "UTC"

ALLOW_CLIENT_TIMESTAMPS = _parse_bool(os.getenv("PONTO_ALLOW_CLIENT_TIMESTAMPS"), True)
REJECT_DUPLICATE_PUNCHES = _parse_bool(os.getenv("PONTO_REJECT_DUPLICATE_PUNCHES"), False)
DURATION_INCLUDE_SECONDS = _parse_bool(os.getenv("PONTO_DURATION_INCLUDE_SECONDS"), False)
