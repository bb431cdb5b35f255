"""
Session lifecycle and local client storage.
"""

import pytest

import auth
import db
from api import ApiError
from auth import Session
from models import User


# ═══════════════════════════════════════════════════════════════════════════════
# CLIENT STORAGE
# ═══════════════════════════════════════════════════════════════════════════════

class TestClientStorage:

    def test_missing_key_returns_default(self, storage):
        assert db.get_value("nope") is None
        assert db.get_value("nope", "fallback") == "fallback"

    def test_set_overwrites(self, storage):
        db.set_value("k", "one")
        db.set_value("k", "two")
        assert db.get_value("k") == "two"

    def test_delete(self, storage):
        db.set_value("k", "v")
        db.delete_value("k")
        assert db.get_value("k") is None

    def test_init_is_idempotent(self, storage):
        db.set_value("k", "v")
        db.init_db()
        assert db.get_value("k") == "v"


# ═══════════════════════════════════════════════════════════════════════════════
# SESSION
# ═══════════════════════════════════════════════════════════════════════════════

class TestSession:

    def test_begin_persists_and_restores(self, storage):
        user = User(id="u1", email="admin@yeng.ht", first_name="Marie", last_name="Pierre")
        Session().begin("jwt-abc", user)

        restored = Session.restore()
        assert restored.is_authenticated
        assert restored.token == "jwt-abc"
        assert restored.user == user

    def test_end_clears_storage(self, storage):
        session = Session()
        session.begin("jwt-abc", User(id="u1", email="a@b.c"))
        session.end()

        assert not session.is_authenticated
        assert session.user is None
        assert not Session.restore().is_authenticated

    def test_restore_empty(self, storage):
        session = Session.restore()
        assert session.token is None
        assert session.user is None

    def test_unreadable_user_is_discarded(self, storage):
        db.set_value(auth.TOKEN_KEY, "jwt-abc")
        db.set_value(auth.USER_KEY, "{not json")

        session = Session.restore()
        assert not session.is_authenticated
        assert db.get_value(auth.TOKEN_KEY) is None

    def test_sessions_are_independent_objects(self, storage):
        a = Session(token="one")
        b = Session()
        assert a.is_authenticated
        assert not b.is_authenticated


# ═══════════════════════════════════════════════════════════════════════════════
# LOGIN / LOGOUT
# ═══════════════════════════════════════════════════════════════════════════════

class TestLoginLogout:

    def test_login_starts_session(self, client, http, make_response, user_json):
        http.request.return_value = make_response(201, {"access_token": "jwt", "user": user_json})

        user = auth.login(client, "  admin@yeng.ht ", "secret")

        assert user.email == "admin@yeng.ht"
        assert client.session.token == "jwt"
        assert http.request.call_args.kwargs["json"]["email"] == "admin@yeng.ht"
        assert Session.restore().token == "jwt"

    def test_following_requests_carry_token(self, client, http, make_response, user_json):
        http.request.return_value = make_response(201, {"access_token": "jwt", "user": user_json})
        auth.login(client, "admin@yeng.ht", "secret")

        http.request.return_value = make_response(body=[])
        client.get_invoices()
        assert http.request.call_args.kwargs["headers"]["Authorization"] == "Bearer jwt"

    def test_failed_login_leaves_session_empty(self, client, http, make_response):
        http.request.return_value = make_response(401, {"message": "Invalid credentials"})

        with pytest.raises(ApiError) as exc:
            auth.login(client, "admin@yeng.ht", "wrong")

        assert exc.value.message == "Invalid credentials"
        assert not client.session.is_authenticated
        assert db.get_value(auth.TOKEN_KEY) is None

    def test_logout(self, client, user_json):
        client.session.begin("jwt", User.model_validate(user_json))
        auth.logout(client)
        assert not client.session.is_authenticated
        assert not Session.restore().is_authenticated
