"""
Database layer for the gallery index
Holds the schema registry and the drop/migrate operations used by the reset tooling
"""

import sqlite3
import logging
from typing import List, Dict, Optional, Tuple

from werkzeug.security import generate_password_hash, check_password_hash

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
ADMIN_USERNAME = 'admin'

# Tables in creation order; parents before the tables that reference them.
TABLES: List[Tuple[str, str]] = [
    ('users', """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            password_hash TEXT,
            role TEXT NOT NULL DEFAULT 'user',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
    ('cameras', """
        CREATE TABLE IF NOT EXISTS cameras (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            camera_make TEXT,
            camera_model TEXT,
            UNIQUE(camera_make, camera_model)
        )
    """),
    ('photos', """
        CREATE TABLE IF NOT EXISTS photos (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            uid TEXT UNIQUE NOT NULL,
            title TEXT,
            description TEXT,
            camera_id INTEGER,
            taken_at TIMESTAMP,
            is_favorite BOOLEAN DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (camera_id) REFERENCES cameras(id) ON DELETE SET NULL
        )
    """),
    ('files', """
        CREATE TABLE IF NOT EXISTS files (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            photo_id INTEGER NOT NULL,
            filepath TEXT UNIQUE NOT NULL,
            file_hash TEXT,
            file_size INTEGER,
            media_type TEXT DEFAULT 'image',
            width INTEGER,
            height INTEGER,
            is_primary BOOLEAN DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (photo_id) REFERENCES photos(id) ON DELETE CASCADE
        )
    """),
    ('albums', """
        CREATE TABLE IF NOT EXISTS albums (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            uid TEXT UNIQUE NOT NULL,
            title TEXT NOT NULL,
            description TEXT,
            cover_photo_id INTEGER,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (cover_photo_id) REFERENCES photos(id) ON DELETE SET NULL
        )
    """),
    ('photos_albums', """
        CREATE TABLE IF NOT EXISTS photos_albums (
            photo_id INTEGER NOT NULL,
            album_id INTEGER NOT NULL,
            added_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (photo_id, album_id),
            FOREIGN KEY (photo_id) REFERENCES photos(id) ON DELETE CASCADE,
            FOREIGN KEY (album_id) REFERENCES albums(id) ON DELETE CASCADE
        )
    """),
    ('labels', """
        CREATE TABLE IF NOT EXISTS labels (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            slug TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
    ('photos_labels', """
        CREATE TABLE IF NOT EXISTS photos_labels (
            photo_id INTEGER NOT NULL,
            label_id INTEGER NOT NULL,
            uncertainty INTEGER DEFAULT 0,
            source TEXT,
            PRIMARY KEY (photo_id, label_id),
            FOREIGN KEY (photo_id) REFERENCES photos(id) ON DELETE CASCADE,
            FOREIGN KEY (label_id) REFERENCES labels(id) ON DELETE CASCADE
        )
    """),
]

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_photos_taken ON photos(taken_at)",
    "CREATE INDEX IF NOT EXISTS idx_photos_favorite ON photos(is_favorite)",
    "CREATE INDEX IF NOT EXISTS idx_files_photo ON files(photo_id)",
    "CREATE INDEX IF NOT EXISTS idx_files_hash ON files(file_hash)",
    "CREATE INDEX IF NOT EXISTS idx_photos_albums_album ON photos_albums(album_id)",
    "CREATE INDEX IF NOT EXISTS idx_photos_labels_label ON photos_labels(label_id)",
]


class Database:
    def __init__(self, db_path: str = "data/gallery.db"):
        self.db_path = db_path
        self.migrate()

    def get_connection(self):
        """Get database connection with row factory and timeout"""
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    # ============ SCHEMA ============

    def schema_version(self) -> int:
        conn = self.get_connection()
        try:
            return conn.execute("PRAGMA user_version").fetchone()[0]
        finally:
            conn.close()

    def table_names(self) -> List[str]:
        """Names of the registered tables that currently exist"""
        conn = self.get_connection()
        try:
            rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
        finally:
            conn.close()

        existing = {row['name'] for row in rows}
        return [name for name, _ in TABLES if name in existing]

    def migrate(self, force: bool = False, quiet: bool = True):
        """
        Apply the current schema.

        Args:
            force: Re-run every statement even if the stored version is current
            quiet: Only log when something goes wrong
        """
        conn = self.get_connection()

        try:
            version = conn.execute("PRAGMA user_version").fetchone()[0]

            if version >= SCHEMA_VERSION and not force:
                logger.debug(f"migrate: schema version {version} is current")
                return

            for name, ddl in TABLES:
                conn.execute(ddl)
                if not quiet:
                    logger.info(f"migrate: table {name}")

            for statement in INDEXES:
                conn.execute(statement)

            # Default admin account, credential set separately
            conn.execute(
                "INSERT OR IGNORE INTO users (username, role) VALUES (?, 'admin')",
                (ADMIN_USERNAME,)
            )

            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
            conn.commit()

            if not quiet:
                logger.info(f"migrate: schema version {SCHEMA_VERSION} applied")
        finally:
            conn.close()

    def drop_all(self) -> List[str]:
        """Drop every registered table, children first. Returns the dropped table names."""
        conn = self.get_connection()
        dropped = []

        try:
            for name, _ in reversed(TABLES):
                logger.debug(f"drop: table {name}")
                conn.execute(f"DROP TABLE IF EXISTS {name}")
                dropped.append(name)

            conn.execute("PRAGMA user_version = 0")
            conn.commit()
        finally:
            conn.close()

        return dropped

    # ============ ADMIN ACCOUNT ============

    def init_admin_password(self, password: str):
        """Set the admin credential, creating the account if needed"""
        password_hash = generate_password_hash(password)

        conn = self.get_connection()
        try:
            conn.execute("""
                INSERT INTO users (username, password_hash, role)
                VALUES (?, ?, 'admin')
                ON CONFLICT(username) DO UPDATE SET
                    password_hash = excluded.password_hash,
                    updated_at = CURRENT_TIMESTAMP
            """, (ADMIN_USERNAME, password_hash))
            conn.commit()
        finally:
            conn.close()

    def get_user(self, username: str) -> Optional[Dict]:
        conn = self.get_connection()
        try:
            row = conn.execute("SELECT * FROM users WHERE username = ?", (username,)).fetchone()
            return dict(row) if row else None
        finally:
            conn.close()

    def check_admin_password(self, password: str) -> bool:
        user = self.get_user(ADMIN_USERNAME)
        if not user or not user['password_hash']:
            return False
        return check_password_hash(user['password_hash'], password)

    # ============ STATISTICS ============

    def get_stats(self) -> Dict:
        """Get database statistics"""
        conn = self.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT COUNT(*) as count FROM photos")
            total_photos = cursor.fetchone()['count']

            cursor.execute("SELECT COUNT(*) as count FROM files")
            total_files = cursor.fetchone()['count']

            cursor.execute("SELECT COUNT(*) as count FROM albums")
            total_albums = cursor.fetchone()['count']

            cursor.execute("SELECT COUNT(*) as count FROM labels")
            total_labels = cursor.fetchone()['count']
        finally:
            conn.close()

        return {
            'schema_version': self.schema_version(),
            'total_photos': total_photos,
            'total_files': total_files,
            'total_albums': total_albums,
            'total_labels': total_labels
        }

