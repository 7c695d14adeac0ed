"""
Tests for bearer-token authentication and the admin gate.

Tokens are minted by an external identity system; here we only check
that the API accepts valid ones and turns everything else away.
"""

import uuid
from datetime import timedelta

from bankapp.security import create_access_token, decode_access_token


class TestAuthentication:

    async def test_missing_token_rejected(self, client):
        response = await client.get("/accounts")
        assert response.status_code == 401

    async def test_garbage_token_rejected(self, client):
        response = await client.get(
            "/accounts", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    async def test_expired_token_rejected(self, client, member):
        token = create_access_token(
            {"sub": str(member.id)}, expires_delta=timedelta(minutes=-1)
        )
        response = await client.get(
            "/accounts", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    async def test_unknown_user_rejected(self, client):
        token = create_access_token({"sub": str(uuid.uuid4())})
        response = await client.get(
            "/accounts", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    async def test_inactive_user_rejected(self, client, make_user):
        _, headers = await make_user("dormant", is_active=False)
        response = await client.get("/accounts", headers=headers)
        assert response.status_code == 401

    async def test_token_round_trip_carries_subject(self, member):
        token = create_access_token({"sub": str(member.id)})
        assert decode_access_token(token)["sub"] == str(member.id)


class TestAdminGate:

    async def test_member_cannot_reach_admin_endpoints(self, client, member_headers):
        for path in ("/admin/accounts", "/admin/transactions", "/admin/feature-flags"):
            response = await client.get(path, headers=member_headers)
            assert response.status_code == 403, path

    async def test_admin_can_reach_admin_endpoints(self, client, admin_headers):
        response = await client.get("/admin/accounts", headers=admin_headers)
        assert response.status_code == 200

    async def test_health_needs_no_token(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
