from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_ms
from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"
DEFAULT_ADMIN_ID = "admin-001"


def _statements(sql: str) -> Iterable[str]:
    """Split schema.sql into statements; the file holds no ';' inside literals."""

    body = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))
    for stmt in body.split(";"):
        if stmt.strip():
            yield stmt.strip()


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    sql = Path(schema_path).read_text(encoding="utf-8")

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied to %s", target.describe())


def ensure_admin(db_config: dict, *, email: str, password: str) -> bool:
    """Create the default admin unless ``email`` or its fixed id is already taken.

    Returns True when an account was created.
    """

    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT id, email FROM users WHERE email=%s OR id=%s", (email, DEFAULT_ADMIN_ID))
        existing = cur.fetchall()
        if existing:
            if any(row["email"] == email for row in existing):
                logger.info("admin account %s already exists", email)
            else:
                logger.warning(
                    "not seeding %s: id %s already belongs to %s", email, DEFAULT_ADMIN_ID, existing[0]["email"]
                )
            return False

        cur.execute(
            """
            INSERT INTO users(id, name, email, password_hash, role, created_at)
            VALUES(%s,%s,%s,%s,'ADMIN',%s)
            """,
            (DEFAULT_ADMIN_ID, "System Admin", email, generate_password_hash(password), now_ms()),
        )
        conn.commit()
        logger.info("admin account %s created", email)
        return True
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
