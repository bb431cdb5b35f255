"""
auth.py
Login session: token + user held in a Session object and mirrored to local
client storage (db.py), so a restarted dashboard stays logged in.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

import db
from models import User

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth.token"
USER_KEY = "auth.user"


class Session:
    def __init__(self, token: str | None = None, user: User | None = None):
        self.token = token
        self.user = user

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def begin(self, token: str, user: User) -> None:
        self.token = token
        self.user = user
        db.set_value(TOKEN_KEY, token)
        db.set_value(USER_KEY, user.model_dump_json(by_alias=True))

    def end(self) -> None:
        self.token = None
        self.user = None
        db.delete_value(TOKEN_KEY)
        db.delete_value(USER_KEY)

    @classmethod
    def restore(cls) -> "Session":
        """
        Rebuild the session from local storage.
        A stored user that no longer parses is discarded along with the token.
        """
        token = db.get_value(TOKEN_KEY)
        raw_user = db.get_value(USER_KEY)
        if not token or not raw_user:
            return cls()
        try:
            user = User.model_validate_json(raw_user)
        except ValidationError:
            logger.warning("Discarding unreadable stored session")
            session = cls()
            session.end()
            return session
        return cls(token=token, user=user)


def login(client, email: str, password: str) -> User:
    result = client.login(email.strip(), password)
    client.session.begin(result.access_token, result.user)
    logger.info("Logged in as %s", result.user.email)
    return result.user


def logout(client) -> None:
    user = client.session.user
    client.session.end()
    logger.info("Logged out%s", f" {user.email}" if user else "")
