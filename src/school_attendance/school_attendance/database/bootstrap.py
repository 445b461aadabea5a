from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..app_logger import get_logger
from .connection import DBConfig

log = get_logger("bootstrap")

# (table, email, password) for the demo accounts created by seed.sql.
DEMO_ACCOUNTS = (
    ("admins", "admin@ecole.fr", "admin123"),
    ("teachers", "fatou.kone@mail.com", "1234"),
    ("teachers", "ibrahim.traore@mail.com", "4567"),
    ("teachers", "mariama.diop@mail.com", "7890"),
    ("teachers", "modou.ba@mail.com", "1011"),
    ("parents", "awa.ndiaye@mail.com", "password1"),
    ("parents", "moussa.diallo@mail.com", "password2"),
    ("parents", "amina.kane@mail.com", "password3"),
    ("parents", "abdoul.sow@mail.com", "password4"),
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _exec_sql_file(db_config: dict, path: str | Path) -> int:
    target = DBConfig.from_dict(db_config)
    sql = _strip_line_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))

    conn = _connect(target)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


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


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    n = _exec_sql_file(db_config, schema_path)
    log.info("schema applied (%d statements) from %s", n, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    n = _exec_sql_file(db_config, seed_path)
    log.info("seed applied (%d statements) from %s", n, seed_path)


def ensure_demo_accounts(db_config: dict) -> None:
    """Replace placeholder passwords of the demo accounts with real hashes."""

    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for table, email, password in DEMO_ACCOUNTS:
            cur.execute(
                f"UPDATE {table} SET password_hash=%s WHERE email=%s AND password_hash='CHANGE_ME'",
                (generate_password_hash(password), email),
            )
        conn.commit()
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
