from __future__ import annotations

from database import Database


def add_photo(db: Database, uid: str, filepath: str, title: str = None) -> int:
    """Index a photo with its primary file"""
    conn = db.get_connection()
    try:
        photo_id = conn.execute("INSERT INTO photos (uid, title) VALUES (?, ?)", (uid, title)).lastrowid
        conn.execute(
            "INSERT INTO files (photo_id, filepath, is_primary) VALUES (?, ?, 1)",
            (photo_id, filepath)
        )
        conn.commit()
        return photo_id
    finally:
        conn.close()


def add_album(db: Database, uid: str, title: str) -> int:
    conn = db.get_connection()
    try:
        album_id = conn.execute("INSERT INTO albums (uid, title) VALUES (?, ?)", (uid, title)).lastrowid
        conn.commit()
        return album_id
    finally:
        conn.close()
