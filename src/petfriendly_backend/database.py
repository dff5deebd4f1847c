"""
SQLite database for the PetFriendly domain model.

This module owns the schema (users, foundations, pets, pet images, adoption
requests and contact messages) and hands out short-lived connections. Each
``connect()`` block is one transaction: it commits on success and rolls back
if the block raises.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

# Default database path
DEFAULT_DB_PATH = Path("data/petfriendly.db")

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL UNIQUE,
        password TEXT NOT NULL,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        role TEXT NOT NULL,
        phone TEXT,
        city TEXT,
        active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_user_role ON users(role)",
    "CREATE INDEX IF NOT EXISTS idx_user_active ON users(active)",
    """
    CREATE TABLE IF NOT EXISTS foundations (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        city TEXT NOT NULL,
        state TEXT,
        description TEXT,
        contact_email TEXT NOT NULL UNIQUE,
        website TEXT,
        address TEXT,
        phone_number TEXT,
        verified INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS pets (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        species TEXT NOT NULL,
        breed TEXT,
        age INTEGER,
        gender TEXT,
        size TEXT,
        description TEXT,
        status TEXT NOT NULL,
        foundation_id TEXT NOT NULL REFERENCES foundations(id) ON DELETE CASCADE,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_pets_species ON pets(species)",
    "CREATE INDEX IF NOT EXISTS idx_pets_status ON pets(status)",
    "CREATE INDEX IF NOT EXISTS idx_pets_foundation ON pets(foundation_id)",
    """
    CREATE TABLE IF NOT EXISTS pet_images (
        id TEXT PRIMARY KEY,
        image_url TEXT NOT NULL,
        is_primary INTEGER NOT NULL DEFAULT 0,
        alt_text TEXT,
        pet_id TEXT NOT NULL REFERENCES pets(id) ON DELETE CASCADE,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_pet_images_pet ON pet_images(pet_id)",
    "CREATE INDEX IF NOT EXISTS idx_pet_images_is_primary ON pet_images(is_primary)",
    """
    CREATE TABLE IF NOT EXISTS adoption_requests (
        id TEXT PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        pet_id TEXT NOT NULL REFERENCES pets(id) ON DELETE CASCADE,
        message TEXT NOT NULL,
        status TEXT NOT NULL,
        experience TEXT,
        living_situation TEXT,
        review_notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        reviewed_at TEXT
    )
    """,
    # One request per (user, pet); closes the gap between the existence check and the insert.
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_adoption_requests_user_pet ON adoption_requests(user_id, pet_id)",
    "CREATE INDEX IF NOT EXISTS idx_adoption_requests_pet ON adoption_requests(pet_id)",
    "CREATE INDEX IF NOT EXISTS idx_adoption_requests_status ON adoption_requests(status)",
    """
    CREATE TABLE IF NOT EXISTS contact_messages (
        id TEXT PRIMARY KEY,
        sender_name TEXT NOT NULL,
        sender_email TEXT NOT NULL,
        subject TEXT,
        message TEXT NOT NULL,
        foundation_id TEXT NOT NULL REFERENCES foundations(id) ON DELETE CASCADE,
        is_read INTEGER NOT NULL DEFAULT 0,
        read_at TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_contact_messages_foundation ON contact_messages(foundation_id)",
    "CREATE INDEX IF NOT EXISTS idx_contact_messages_email ON contact_messages(sender_email)",
)

TABLES = ("contact_messages", "adoption_requests", "pet_images", "pets", "foundations", "users")


def _ensure_db_dir(db_path: Path) -> None:
    """Ensure the database directory exists."""
    db_path.parent.mkdir(parents=True, exist_ok=True)


def serialize_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Serialize datetime to ISO format string."""
    return dt.isoformat() if dt else None


def deserialize_datetime(s: Optional[str]) -> Optional[datetime]:
    """Deserialize ISO format string to datetime."""
    if not s:
        return None
    return datetime.fromisoformat(s)


class Database:
    """
    SQLite database holding every PetFriendly table.

    Thread-safe: every caller gets its own connection and SQLite serializes
    writers (WAL mode).
    """

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        _ensure_db_dir(self.db_path)
        self._init_db()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection with proper settings."""
        conn = sqlite3.connect(str(self.db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self.connect() as conn:
            for statement in SCHEMA:
                conn.execute(statement)
        logger.info(f"Database ready at {self.db_path}")

    def ping(self) -> bool:
        """Return True when a trivial query succeeds."""
        try:
            with self.connect() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as exc:
            logger.error(f"Database health check failed: {exc}")
            return False

    def truncate(self) -> None:
        """Delete every row from every table, children first."""
        with self.connect() as conn:
            for table in TABLES:
                conn.execute(f"DELETE FROM {table}")
