"""Local SQLite cache of tag search history and signed-in accounts."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from os import PathLike
from typing import Iterable

TAG_HISTORY_LIMIT = 20

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS tags ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL UNIQUE, translated TEXT)",
    "CREATE TABLE IF NOT EXISTS tags_history ("
    "tag_id INTEGER PRIMARY KEY, frequency INTEGER DEFAULT 1, "
    "FOREIGN KEY(tag_id) REFERENCES tags(id))",
    "CREATE TABLE IF NOT EXISTS accounts (id INTEGER PRIMARY KEY, name TEXT, account TEXT, pfp TEXT)",
)


@dataclass
class Tag:
    """A tag with its optional translation."""

    name: str
    translated_name: str = ""


@dataclass
class User:
    """A cached account: numeric id, display name, login name and avatar URL."""

    id: int
    name: str
    account: str
    profile_image: str = ""


class Cache:
    """SQLite-backed store for tag history and known accounts."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._db = sqlite3.connect(str(path))

    def __enter__(self) -> Cache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def setup(self) -> None:
        """Create the tables if they do not exist yet."""
        with self._db:
            for statement in _SCHEMA:
                self._db.execute(statement)

    def _find_tag(self, name: str) -> tuple[int, str] | None:
        row = self._db.execute(
            "SELECT translated, id FROM tags WHERE name = ?", (name,)
        ).fetchone()
        if row is None:
            return None
        gloss, tag_id = row
        return tag_id, gloss or ""

    def push_tag_history(self, tags: Iterable[Tag]) -> None:
        """Record a use of each named tag, filling in missing translations."""
        with self._db:
            for tag in tags:
                if not tag.name:
                    continue
                found = self._find_tag(tag.name)
                if found is None:
                    self._db.execute(
                        "INSERT INTO tags (name, translated) VALUES (?, ?)",
                        (tag.name, tag.translated_name),
                    )
                    found = self._find_tag(tag.name)
                    assert found is not None
                elif not found[1] and tag.translated_name:
                    self._db.execute(
                        "UPDATE tags SET translated = ? WHERE name = ?",
                        (tag.translated_name, tag.name),
                    )
                tag_id = found[0]
                seen = self._db.execute(
                    "SELECT 1 FROM tags_history WHERE tag_id = ?", (tag_id,)
                ).fetchone()
                if seen:
                    self._db.execute(
                        "UPDATE tags_history SET frequency = frequency + 1 WHERE tag_id = ?",
                        (tag_id,),
                    )
                else:
                    self._db.execute(
                        "INSERT INTO tags_history (tag_id) VALUES (?)", (tag_id,)
                    )

    def get_tag_history(self) -> list[Tag]:
        """Return the most frequently used tags, most frequent first."""
        rows = self._db.execute(
            "SELECT tags.translated, tags.name FROM tags "
            "JOIN tags_history ON tags.id = tags_history.tag_id "
            "ORDER BY tags_history.frequency DESC LIMIT ?",
            (TAG_HISTORY_LIMIT,),
        )
        return [Tag(name, gloss or "") for gloss, name in rows]

    def read_users(self) -> list[User]:
        """Return every cached account."""
        rows = self._db.execute("SELECT id, name, account, pfp FROM accounts")
        return [
            User(user_id, name or "", account or "", pfp or "")
            for user_id, name, account, pfp in rows
        ]

    def write_user(self, user: User) -> None:
        """Store an account; raises sqlite3.IntegrityError if its id is already cached."""
        with self._db:
            self._db.execute(
                "INSERT INTO accounts (id, name, account, pfp) VALUES (?, ?, ?, ?)",
                (user.id, user.name, user.account, user.profile_image),
            )

    def delete_user(self, user: User) -> None:
        """Remove an account from the cache."""
        with self._db:
            self._db.execute("DELETE FROM accounts WHERE id = ?", (user.id,))

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()