import os
import sqlite3
from typing import Optional

from db.models import Config

CURRENT_DB_VERSION = 2

def initialize_database(app_data_dir: str) -> sqlite3.Connection:
    os.makedirs(app_data_dir, exist_ok=True)
    sqlite_path = os.path.join(app_data_dir, "db.sqlite3")
    print(f"Database file path: {sqlite_path}")

    return connect_database(sqlite_path)

def connect_database(sqlite_path: str) -> sqlite3.Connection:
    db = sqlite3.connect(sqlite_path)
    db.row_factory = sqlite3.Row

    existing_version = db.execute("PRAGMA user_version").fetchone()[0]
    upgrade_database_if_needed(db, existing_version)

    return db

def upgrade_database_if_needed(db: sqlite3.Connection, existing_version: int):
    print(f"Existing database version: {existing_version}")

    if existing_version < CURRENT_DB_VERSION:
        if existing_version <= 0:
            print("Migrate database version 1...")
            db.execute("PRAGMA journal_mode=WAL")
            db.execute("PRAGMA user_version=1")
            db.executescript("""
                CREATE TABLE kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT
                );
                CREATE TABLE config_data (
                    id INTEGER PRIMARY KEY,
                    search_base_url TEXT DEFAULT 'https://itunes.apple.com/search',
                    country TEXT DEFAULT 'US',
                    page_size INTEGER DEFAULT 50,
                    max_attempts INTEGER DEFAULT 5
                );
                INSERT INTO config_data (id) VALUES (1);
            """)
            db.commit()

        if existing_version <= 1:
            print("Migrate database version 2...")
            db.execute("PRAGMA user_version=2")
            db.executescript("""
                ALTER TABLE config_data ADD COLUMN default_term TEXT DEFAULT 'Top 100';
                ALTER TABLE config_data ADD COLUMN request_timeout_s FLOAT DEFAULT 15;
            """)
            db.commit()

# -------------------------------
# KEY / VALUE
# -------------------------------
def kv_get(db: sqlite3.Connection, key: str) -> Optional[str]:
    row = db.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else None


def kv_set(db: sqlite3.Connection, key: str, value: str):
    db.execute(
        "INSERT INTO kv_store (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
        (key, value),
    )
    db.commit()


def kv_remove(db: sqlite3.Connection, key: str):
    db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
    db.commit()

# -------------------------------
# CONFIG
# -------------------------------
def get_config(db: sqlite3.Connection) -> Config:
    row = db.execute("""
        SELECT search_base_url,
               country,
               page_size,
               max_attempts,
               default_term,
               request_timeout_s
        FROM config_data
        LIMIT 1
    """).fetchone()
    if row is None:
        return Config()
    return Config(
        search_base_url=row["search_base_url"],
        country=row["country"],
        page_size=int(row["page_size"]),
        max_attempts=int(row["max_attempts"]),
        default_term=row["default_term"],
        request_timeout_s=float(row["request_timeout_s"]),
    )


def set_config(db: sqlite3.Connection, config: Config):
    db.execute("""
        UPDATE config_data
        SET search_base_url = ?,
            country = ?,
            page_size = ?,
            max_attempts = ?,
            default_term = ?,
            request_timeout_s = ?
        WHERE 1
    """, (
        config.search_base_url,
        config.country,
        config.page_size,
        config.max_attempts,
        config.default_term,
        config.request_timeout_s,
    ))
    db.commit()
