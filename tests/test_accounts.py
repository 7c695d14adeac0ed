"""
Tests for account endpoints.

These tests verify:
  - Opening checking and savings accounts (with and without an opening deposit)
  - An opening deposit is documented by exactly one "Initial Deposit" record
  - Account numbers are 10 digits and unique
  - Members only see their own accounts (403 for another owner, 404 for unknown)
  - Transaction history is newest first and reading it changes nothing
"""

import uuid


class TestOpenAccount:
    """Tests for POST /accounts."""

    async def test_open_checking_account_defaults(self, client, member, member_headers):
        response = await client.post("/accounts", json={}, headers=member_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["account_type"] == "checking"
        assert data["cached_balance_cents"] == 0
        assert data["transfers_enabled"] is True
        assert data["owner_id"] == str(member.id)
        assert len(data["account_number"]) == 10
        assert data["account_number"].isdigit()
        assert not data["account_number"].startswith("0")

    async def test_open_savings_account(self, open_account, member_headers):
        data = await open_account(member_headers, account_type="savings")
        assert data["account_type"] == "savings"

    async def test_initial_balance_creates_deposit_record(
        self, client, open_account, member_headers
    ):
        """Opening with $100.00 writes one deposit of +10000 with balance_after 10000."""
        account = await open_account(member_headers, 10000)
        assert account["cached_balance_cents"] == 10000

        response = await client.get(
            f"/accounts/{account['id']}/transactions", headers=member_headers
        )
        assert response.status_code == 200
        txns = response.json()
        assert len(txns) == 1
        assert txns[0]["type"] == "deposit"
        assert txns[0]["amount_cents"] == 10000
        assert txns[0]["balance_after_cents"] == 10000
        assert txns[0]["description"] == "Initial Deposit"

    async def test_zero_initial_balance_has_no_records(
        self, client, open_account, member_headers
    ):
        account = await open_account(member_headers)
        response = await client.get(
            f"/accounts/{account['id']}/transactions", headers=member_headers
        )
        assert response.json() == []

    async def test_invalid_account_type_rejected(self, client, member_headers):
        response = await client.post(
            "/accounts", json={"account_type": "brokerage"}, headers=member_headers
        )
        assert response.status_code == 422

    async def test_negative_initial_balance_rejected(self, client, member_headers):
        response = await client.post(
            "/accounts", json={"initial_balance_cents": -1}, headers=member_headers
        )
        assert response.status_code == 422

    async def test_account_numbers_are_unique(self, open_account, member_headers):
        numbers = {
            (await open_account(member_headers))["account_number"] for _ in range(5)
        }
        assert len(numbers) == 5


class TestAccountAccess:
    """Ownership scoping on the member account endpoints."""

    async def test_list_only_own_accounts(
        self, client, open_account, member_headers, other_headers
    ):
        mine = await open_account(member_headers)
        await open_account(other_headers)

        response = await client.get("/accounts", headers=member_headers)
        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [mine["id"]]

    async def test_get_own_account(self, client, open_account, member_headers):
        account = await open_account(member_headers, 2500)
        response = await client.get(f"/accounts/{account['id']}", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["cached_balance_cents"] == 2500

    async def test_get_other_members_account_forbidden(
        self, client, open_account, member_headers, other_headers
    ):
        account = await open_account(other_headers)
        response = await client.get(f"/accounts/{account['id']}", headers=member_headers)
        assert response.status_code == 403
        assert response.json()["error_type"] == "forbidden"

    async def test_get_unknown_account_not_found(self, client, member_headers):
        response = await client.get(f"/accounts/{uuid.uuid4()}", headers=member_headers)
        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"

    async def test_other_members_transactions_forbidden(
        self, client, open_account, member_headers, other_headers
    ):
        account = await open_account(other_headers, 500)
        response = await client.get(
            f"/accounts/{account['id']}/transactions", headers=member_headers
        )
        assert response.status_code == 403


class TestTransactionHistory:
    """Ordering and read idempotence of GET /accounts/{id}/transactions."""

    async def test_history_is_newest_first(
        self, client, open_account, member_headers, set_flags
    ):
        await set_flags(allow_bill_pay=True)
        account = await open_account(member_headers, 10000)

        for payee in ("Water", "Power", "Phone"):
            response = await client.post(
                "/transactions/billpay",
                json={
                    "from_account_id": account["id"],
                    "payee_name": payee,
                    "amount_cents": 1000,
                },
                headers=member_headers,
            )
            assert response.status_code == 200

        response = await client.get(
            f"/accounts/{account['id']}/transactions", headers=member_headers
        )
        descriptions = [t["description"] for t in response.json()]
        assert descriptions == [
            "Bill payment to Phone",
            "Bill payment to Power",
            "Bill payment to Water",
            "Initial Deposit",
        ]
        balances = [t["balance_after_cents"] for t in response.json()]
        assert balances == [7000, 8000, 9000, 10000]

    async def test_reads_are_idempotent(self, client, open_account, member_headers):
        account = await open_account(member_headers, 4200)
        url = f"/accounts/{account['id']}/transactions"

        first = await client.get(url, headers=member_headers)
        second = await client.get(url, headers=member_headers)
        assert first.json() == second.json()

        balance = await client.get(f"/accounts/{account['id']}", headers=member_headers)
        assert balance.json()["cached_balance_cents"] == 4200
