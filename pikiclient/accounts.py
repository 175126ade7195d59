"""Account switching: stored credentials and the list of known accounts."""

from __future__ import annotations

import json
import os
import tempfile
from os import PathLike
from pathlib import Path

from pikiclient.cache import Cache, User

CURRENT_USER_KEY = "current_user"


class SecretStore:
    """A small persistent key-value store for credentials, kept in a JSON file."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self.path = Path(path)
        if self.path.exists():
            self._values: dict[str, str] = json.loads(self.path.read_text("utf-8"))
        else:
            self._values = {}

    def read(self, key: str) -> str:
        """Return the value stored under ``key``, or an empty string."""
        return self._values.get(key, "")

    def write(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` and save the store to disk."""
        self._values[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".secrets-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._values, handle)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise


def user_from_auth_response(data: str | bytes) -> User:
    """Build a User from the JSON body of a token response."""
    obj = json.loads(data)
    if not isinstance(obj, dict):
        raise ValueError("auth response is not a JSON object")
    user = obj.get("user")
    if user is None:
        user = (obj.get("response") or {}).get("user")
    if not isinstance(user, dict):
        raise ValueError("auth response carries no user")
    try:
        user_id = int(user["id"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError("auth response user has no valid id") from exc
    images = user.get("profile_image_urls") or {}
    return User(
        id=user_id,
        name=user.get("name", ""),
        account=user.get("account", ""),
        profile_image=images.get("px_50x50", ""),
    )


class LoginHandler:
    """Tracks the signed-in account, its token, and the other known accounts."""

    def __init__(self, store: SecretStore, cache: Cache) -> None:
        self.store = store
        self.cache = cache
        self.other_users: list[User] = []

    def get_user(self) -> str:
        """Login name of the current account, or an empty string."""
        return self.store.read(CURRENT_USER_KEY)

    def set_user(self, username: str) -> None:
        """Switch to another account and refresh the list of the others."""
        self.store.write(CURRENT_USER_KEY, username)
        self.refresh_other_users()

    def write_token(self, token: str) -> None:
        """Store the current account's token."""
        self.store.write(self.get_user(), token)

    def get_token(self) -> str:
        """Return the current account's token, or an empty string."""
        return self.store.read(self.get_user())

    def refresh_other_users(self) -> list[User]:
        """Reload the cached accounts, leaving out the current one."""
        users = self.cache.read_users()
        current = self.get_user()
        index = next((i for i, user in enumerate(users) if user.account == current), None)
        if index is not None:
            del users[index]
        self.other_users = users
        return users

    def remove_user(self, user: User) -> None:
        """Forget an account's token and drop it from the cache."""
        self.store.write(user.account, "")
        self.cache.delete_user(user)

    def save_user(self, data: str | bytes) -> User:
        """Cache the account described by a token response and return it."""
        user = user_from_auth_response(data)
        self.cache.write_user(user)
        return user