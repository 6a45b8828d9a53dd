import hashlib
import hmac
import logging
import secrets
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from backend.config import DB_PATH
from backend.errors import StorageFailure
from backend.models import Punch

logger = logging.getLogger(__name__)

PASSWORD_HASH_ALGO = "pbkdf2_sha256"
PASSWORD_HASH_ITERATIONS = 120_000


def _hash_password(password: str, *, salt: str | None = None) -> str:
    salt_value = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt_value.encode("utf-8"),
        PASSWORD_HASH_ITERATIONS,
    ).hex()
    return f"{PASSWORD_HASH_ALGO}${PASSWORD_HASH_ITERATIONS}${salt_value}${digest}"


def _verify_password(password: str, password_hash: str) -> bool:
    try:
        algo, rounds_text, salt_value, expected_digest = password_hash.split("$", 3)
        rounds = int(rounds_text)
    except (ValueError, TypeError):
        return False

    if algo != PASSWORD_HASH_ALGO or rounds <= 0:
        return False

    candidate_digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt_value.encode("utf-8"),
        rounds,
    ).hex()
    return hmac.compare_digest(candidate_digest, expected_digest)


def connect_db(db_path: str | Path | None = None):
    conn = sqlite3.connect(str(db_path or DB_PATH), check_same_thread=False)
    # punches cascade with their user
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def create_tables(db_path: str | Path | None = None):
    conn = connect_db(db_path)
    cursor = conn.cursor()

    cursor.execute(
        """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nome TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE COLLATE NOCASE,
        password_hash TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """
    )

    cursor.execute("""
    CREATE TABLE IF NOT EXISTS punches (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        punched_at TEXT NOT NULL,        -- UTC ISO-8601, microseconds
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """)

    cursor.execute("""
    CREATE INDEX IF NOT EXISTS idx_punches_user_time
    ON punches (user_id, punched_at, id)
    """)

    conn.commit()
    conn.close()
    logger.info("Database initialized and tables are ready (%s).", db_path or DB_PATH)


# -----------------------------
# Users
# -----------------------------
def create_user(nome: str, email: str, password: str, *, db_path: str | Path | None = None) -> int:
    clean_nome = nome.strip()
    clean_email = email.strip()
    if not clean_nome or not clean_email or not password:
        raise ValueError("Name, email and password are required.")

    conn = connect_db(db_path)
    cur = conn.cursor()
    try:
        cur.execute(
            """
            INSERT INTO users (nome, email, password_hash)
            VALUES (?, ?, ?)
            """,
            (clean_nome, clean_email, _hash_password(password)),
        )
        user_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()
    return user_id


def verify_user_credentials(email: str, password: str, *, db_path: str | Path | None = None) -> dict | None:
    clean_email = email.strip()
    if not clean_email or not password:
        return None

    conn = connect_db(db_path)
    cur = conn.cursor()
    cur.execute(
        """
        SELECT id, nome, email, password_hash
        FROM users
        WHERE email = ? COLLATE NOCASE
        """,
        (clean_email,),
    )
    row = cur.fetchone()
    conn.close()

    if not row:
        return None

    user_id, nome, stored_email, password_hash = row
    if not _verify_password(password, str(password_hash)):
        return None
    return {"id": int(user_id), "nome": str(nome), "email": str(stored_email)}


def get_user_by_id(user_id: int, *, db_path: str | Path | None = None) -> dict | None:
    conn = connect_db(db_path)
    cur = conn.cursor()
    cur.execute(
        """
        SELECT id, nome, email
        FROM users
        WHERE id = ?
        """,
        (user_id,),
    )
    row = cur.fetchone()
    conn.close()
    if not row:
        return None
    return {"id": int(row[0]), "nome": str(row[1]), "email": str(row[2])}


# -----------------------------
# Punches
# -----------------------------
def to_stored_timestamp(value: datetime) -> str:
    # Fixed-width UTC text (YYYY-MM-DDTHH:MM:SS.ffffff+00:00) keeps lexicographic
    # order equal to chronological order. isoformat pads the year to four digits.
    if value.tzinfo is None:
        raise ValueError("Punch timestamps must be timezone-aware.")
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_stored_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value).astimezone(timezone.utc)


def _punch_from_row(row) -> Punch:
    punch_id, user_id, punched_at = row
    return Punch(id=int(punch_id), owner=int(user_id), timestamp=from_stored_timestamp(str(punched_at)))


class SQLitePunchStore:
    """
    Punch persistence on a SQLite file.

    Each method opens its own connection and runs a single statement (or a
    read followed by one write), so SQLite's own locking provides atomicity.
    Any sqlite3.Error is logged and re-raised as StorageFailure.
    """

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path or DB_PATH)

    def _run(self, operation: str, sql: str, params: tuple, *, fetch: str | None = None):
        conn = None
        try:
            conn = connect_db(self.db_path)
            cur = conn.cursor()
            cur.execute(sql, params)
            if fetch == "one":
                result = cur.fetchone()
            elif fetch == "all":
                result = cur.fetchall()
            else:
                result = (cur.rowcount, cur.lastrowid)
            conn.commit()
            return result
        except sqlite3.Error as exc:
            logger.exception("punch store: %s failed", operation)
            raise StorageFailure() from exc
        finally:
            if conn is not None:
                conn.close()

    def insert(self, owner: int, timestamp: datetime, *, unique: bool = False) -> Punch | None:
        """Returns None when ``unique`` is set and the owner already has a punch at that instant."""
        stamp = to_stored_timestamp(timestamp)
        if unique:
            rowcount, lastrowid = self._run(
                "insert",
                """
                INSERT INTO punches (user_id, punched_at)
                SELECT ?, ?
                WHERE NOT EXISTS (
                    SELECT 1 FROM punches WHERE user_id = ? AND punched_at = ?
                )
                """,
                (owner, stamp, owner, stamp),
            )
        else:
            rowcount, lastrowid = self._run(
                "insert",
                "INSERT INTO punches (user_id, punched_at) VALUES (?, ?)",
                (owner, stamp),
            )
        if rowcount == 0:
            return None
        return Punch(id=int(lastrowid), owner=owner, timestamp=timestamp.astimezone(timezone.utc))

    def get(self, owner: int, punch_id: int) -> Punch | None:
        row = self._run(
            "get",
            """
            SELECT id, user_id, punched_at
            FROM punches
            WHERE id = ? AND user_id = ?
            """,
            (punch_id, owner),
            fetch="one",
        )
        return _punch_from_row(row) if row else None

    def select_between(self, owner: int, start: datetime, end: datetime) -> list[Punch]:
        rows = self._run(
            "select_between",
            """
            SELECT id, user_id, punched_at
            FROM punches
            WHERE user_id = ?
              AND punched_at >= ?
              AND punched_at < ?
            ORDER BY punched_at ASC, id ASC
            """,
            (owner, to_stored_timestamp(start), to_stored_timestamp(end)),
            fetch="all",
        )
        return [_punch_from_row(r) for r in rows]

    def update_timestamp(self, owner: int, punch_id: int, timestamp: datetime, *, unique: bool = False) -> bool:
        stamp = to_stored_timestamp(timestamp)
        if unique:
            rowcount, _ = self._run(
                "update_timestamp",
                """
                UPDATE punches
                SET punched_at = ?
                WHERE id = ? AND user_id = ?
                  AND NOT EXISTS (
                      SELECT 1 FROM punches
                      WHERE user_id = ? AND punched_at = ? AND id <> ?
                  )
                """,
                (stamp, punch_id, owner, owner, stamp, punch_id),
            )
        else:
            rowcount, _ = self._run(
                "update_timestamp",
                "UPDATE punches SET punched_at = ? WHERE id = ? AND user_id = ?",
                (stamp, punch_id, owner),
            )
        return rowcount > 0

    def delete(self, owner: int, punch_id: int) -> bool:
        rowcount, _ = self._run(
            "delete",
            "DELETE FROM punches WHERE id = ? AND user_id = ?",
            (punch_id, owner),
        )
        return rowcount > 0
