"""
Tests for admin user management.

These tests verify:
  - Admins can list, create, fetch and edit users; members get 403
  - Usernames stay unique on create and on rename (409)
  - Roles map onto is_admin
  - Toggling status locks a user out (401) and back in
  - A storage failure while creating a user writes nothing
"""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from bankapp.exceptions import PersistenceError
from bankapp.models.user import User
from bankapp.security import create_access_token
from bankapp.services import user_service


def _headers_for(user_id):
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


class TestUserListing:

    async def test_list_users(self, client, member, admin_headers):
        response = await client.get("/admin/users", headers=admin_headers)
        assert response.status_code == 200
        usernames = {row["username"] for row in response.json()}
        assert usernames == {"alice", "root_admin"}

    async def test_members_cannot_list_users(self, client, member_headers):
        response = await client.get("/admin/users", headers=member_headers)
        assert response.status_code == 403

    async def test_get_user(self, client, member, admin_headers):
        response = await client.get(f"/admin/users/{member.id}", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "alice"
        assert data["is_admin"] is False
        assert data["is_active"] is True

    async def test_get_unknown_user(self, client, admin_headers):
        response = await client.get(f"/admin/users/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error_type"] == "not_found"


class TestUserCreation:

    async def test_create_user(self, client, admin_headers):
        response = await client.post(
            "/admin/users",
            json={"username": "carol", "full_name": "Carol Jones", "email": "carol@example.com"},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["username"] == "carol"
        assert data["email"] == "carol@example.com"
        assert data["is_admin"] is False
        assert data["is_active"] is True

        # The new user can use the API once the identity system issues a token
        accounts = await client.get("/accounts", headers=_headers_for(data["id"]))
        assert accounts.status_code == 200
        assert accounts.json() == []

    async def test_create_admin(self, client, admin_headers):
        response = await client.post(
            "/admin/users",
            json={"username": "ops", "full_name": "Ops Desk", "role": "admin"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        new_admin = response.json()
        assert new_admin["is_admin"] is True

        flags = await client.get("/admin/feature-flags", headers=_headers_for(new_admin["id"]))
        assert flags.status_code == 200

    async def test_duplicate_username(self, client, member, admin_headers):
        response = await client.post(
            "/admin/users",
            json={"username": "alice", "full_name": "Another Alice"},
            headers=admin_headers,
        )
        assert response.status_code == 409
        body = response.json()
        assert body["error_type"] == "conflict"
        assert body["detail"] == "Username already exists"

    @pytest.mark.parametrize(
        "payload",
        [
            {"username": "dave", "full_name": "Dave", "role": "superuser"},
            {"username": "", "full_name": "Nobody"},
            {"username": "two words", "full_name": "Spaced"},
            {"username": "erin"},
            {"username": "gina", "full_name": "Gina", "email": "not-an-email"},
        ],
    )
    async def test_invalid_payload_rejected(self, client, admin_headers, payload):
        response = await client.post("/admin/users", json=payload, headers=admin_headers)
        assert response.status_code == 422

    async def test_members_cannot_create_users(self, client, member_headers):
        response = await client.post(
            "/admin/users",
            json={"username": "mallory", "full_name": "Mallory", "role": "admin"},
            headers=member_headers,
        )
        assert response.status_code == 403

    async def test_storage_failure_writes_nothing(self, db_session, monkeypatch):
        async def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", broken_commit)
        with pytest.raises(PersistenceError):
            await user_service.create_user(db_session, "frank", "Frank")

        count = await db_session.scalar(
            select(func.count()).select_from(User).where(User.username == "frank")
        )
        assert count == 0


class TestUserUpdate:

    async def test_update_profile_and_role(self, client, member, admin_headers):
        response = await client.put(
            f"/admin/users/{member.id}",
            json={
                "username": "alice_w",
                "full_name": "Alice Walker",
                "email": "alice@example.com",
                "role": "admin",
            },
            headers=admin_headers,
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["username"] == "alice_w"
        assert data["full_name"] == "Alice Walker"
        assert data["is_admin"] is True

    async def test_keep_own_username(self, client, member, admin_headers):
        response = await client.put(
            f"/admin/users/{member.id}",
            json={"username": "alice", "full_name": "Alice A.", "role": "user"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["full_name"] == "Alice A."
        assert response.json()["email"] is None

    async def test_rename_to_taken_username(self, client, member, other_member, admin_headers):
        response = await client.put(
            f"/admin/users/{member.id}",
            json={"username": "bob", "full_name": "Alice", "role": "user"},
            headers=admin_headers,
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "New username is already taken."

        fetched = await client.get(f"/admin/users/{member.id}", headers=admin_headers)
        assert fetched.json()["username"] == "alice"

    async def test_update_unknown_user(self, client, admin_headers):
        response = await client.put(
            f"/admin/users/{uuid.uuid4()}",
            json={"username": "ghost", "full_name": "Ghost", "role": "user"},
            headers=admin_headers,
        )
        assert response.status_code == 404


class TestUserStatusToggle:

    async def test_deactivate_locks_user_out(
        self, client, member, member_headers, admin_headers, open_account
    ):
        account = await open_account(member_headers, 500)

        response = await client.patch(
            f"/admin/users/{member.id}/toggle-status", headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        assert (await client.get("/accounts", headers=member_headers)).status_code == 401

        # The account and its history are untouched
        history = await client.get(
            f"/admin/accounts/{account['id']}/transactions", headers=admin_headers
        )
        assert len(history.json()) == 1

    async def test_toggle_twice_restores_access(
        self, client, member, member_headers, admin_headers
    ):
        for _ in range(2):
            response = await client.patch(
                f"/admin/users/{member.id}/toggle-status", headers=admin_headers
            )
            assert response.status_code == 200

        assert response.json()["is_active"] is True
        assert (await client.get("/accounts", headers=member_headers)).status_code == 200

    async def test_toggle_unknown_user(self, client, admin_headers):
        response = await client.patch(
            f"/admin/users/{uuid.uuid4()}/toggle-status", headers=admin_headers
        )
        assert response.status_code == 404
