from __future__ import annotations

from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import Engine

from jobboard.auth import hash_password
from jobboard.config import Settings, settings as default_settings


def _ensure_admin(conn, username: str, password: str) -> None:
    existing = conn.execute(
        text("SELECT id FROM users WHERE username = :username"),
        {"username": username},
    ).fetchone()
    if existing:
        return
    conn.execute(
        text(
            "INSERT INTO users (username, full_name, password_hash, role, is_active) "
            "VALUES (:username, :full_name, :password_hash, 'admin', :is_active)"
        ),
        {
            "username": username,
            "full_name": "Administrator",
            "password_hash": hash_password(password),
            "is_active": True,
        },
    )
    logger.info(f"Created default admin account '{username}'")


def _backfill_student_profiles(conn) -> int:
    result = conn.execute(
        text(
            """
            INSERT INTO student_profiles (user_id, full_name)
            SELECT users.id, users.full_name FROM users
            WHERE users.role = 'student'
              AND NOT EXISTS (
                  SELECT 1 FROM student_profiles WHERE student_profiles.user_id = users.id
              )
            """
        )
    )
    return int(result.rowcount or 0)


def run_bootstrap(engine: Engine, settings: Settings | None = None) -> None:
    settings = settings or default_settings
    with engine.begin() as conn:
        _ensure_admin(
            conn,
            settings.default_admin_username.strip().lower(),
            settings.default_admin_password,
        )
        created = _backfill_student_profiles(conn)
    if created:
        logger.info(f"Backfilled {created} student profiles")
