"""
Integration tests for the transaction API.

These test the HTTP layer: status codes, response format and
error mapping. Balance rules themselves are covered by the
BalanceEngine service tests.
"""

from decimal import Decimal

from sqlalchemy.exc import OperationalError

from pace_ledger.services.report_service import ReportService


def create_account(client, name="Checking", initial="0.00"):
    response = client.post("/accounts", json={
        "name": name, "initial_balance": initial,
    })
    assert response.status_code == 201
    return response.json()["id"]


def balance(client, account_id):
    response = client.get(f"/accounts/{account_id}/balance")
    assert response.status_code == 200
    return Decimal(response.json()["balance"])


def post_transaction(client, **payload):
    payload.setdefault("date", "2026-01-15T12:00:00")
    return client.post("/transactions", json=payload)


class TestCreateTransactionAPI:

    def test_income_returns_201_with_id(self, client):
        account_id = create_account(client, initial="100.00")

        response = post_transaction(
            client, transaction_type="income", amount="50.00", account_id=account_id,
        )

        assert response.status_code == 201
        assert isinstance(response.json()["id"], int)
        assert balance(client, account_id) == Decimal("150.00")

    def test_transfer(self, client):
        a = create_account(client, "A", "120.00")
        b = create_account(client, "B")

        response = post_transaction(
            client, transaction_type="transfer", amount="20.00",
            account_id=a, to_account_id=b,
        )

        assert response.status_code == 201
        assert balance(client, a) == Decimal("100.00")
        assert balance(client, b) == Decimal("20.00")

    def test_zero_amount_returns_400(self, client):
        account_id = create_account(client, initial="100.00")

        response = post_transaction(
            client, transaction_type="expense", amount="0", account_id=account_id,
        )

        assert response.status_code == 400
        assert balance(client, account_id) == Decimal("100.00")

    def test_same_account_transfer_returns_400(self, client):
        account_id = create_account(client)

        response = post_transaction(
            client, transaction_type="transfer", amount="5.00",
            account_id=account_id, to_account_id=account_id,
        )

        assert response.status_code == 400
        assert "same account" in response.json()["detail"]

    def test_missing_account_returns_404(self, client):
        response = post_transaction(
            client, transaction_type="income", amount="5.00", account_id=999,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Account 999 not found"

    def test_unknown_type_returns_422(self, client):
        account_id = create_account(client)

        response = post_transaction(
            client, transaction_type="refund", amount="5.00", account_id=account_id,
        )

        assert response.status_code == 422

    def test_idempotency_key_replays(self, client):
        account_id = create_account(client)
        payload = {
            "transaction_type": "income",
            "amount": "500.00",
            "account_id": account_id,
            "idempotency_key": "salary-2026-01",
        }

        first = post_transaction(client, **payload)
        second = post_transaction(client, **payload)

        assert first.json()["id"] == second.json()["id"]
        assert balance(client, account_id) == Decimal("500.00")


class TestReadTransactionAPI:

    def test_get_transaction(self, client):
        account_id = create_account(client)
        txn_id = post_transaction(
            client, transaction_type="expense", amount="9.99",
            account_id=account_id, note="Movie",
        ).json()["id"]

        response = client.get(f"/transactions/{txn_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["transaction_type"] == "expense"
        assert Decimal(data["amount"]) == Decimal("9.99")
        assert data["note"] == "Movie"
        assert data["to_account_id"] is None

    def test_get_missing_transaction_returns_404(self, client):
        response = client.get("/transactions/999")
        assert response.status_code == 404

    def test_list_filtered_by_account(self, client):
        a = create_account(client, "A", "100.00")
        b = create_account(client, "B")
        post_transaction(client, transaction_type="expense", amount="1.00", account_id=a)
        post_transaction(
            client, transaction_type="transfer", amount="2.00",
            account_id=a, to_account_id=b,
        )

        assert len(client.get("/transactions").json()) == 2
        assert len(client.get(f"/transactions?account_id={b}").json()) == 1

    def test_recent(self, client):
        account_id = create_account(client)
        for day in range(1, 6):
            post_transaction(
                client, transaction_type="income", amount="1.00",
                account_id=account_id, date=f"2026-03-0{day}T08:00:00",
            )

        response = client.get("/transactions/recent?limit=3")

        assert response.status_code == 200
        dates = [t["date"] for t in response.json()]
        assert dates == [
            "2026-03-05T08:00:00", "2026-03-04T08:00:00", "2026-03-03T08:00:00",
        ]


class TestUpdateTransactionAPI:

    def test_change_type_reverses_and_applies(self, client):
        account_id = create_account(client, initial="150.00")
        txn_id = post_transaction(
            client, transaction_type="expense", amount="30.00", account_id=account_id,
        ).json()["id"]

        response = client.patch(f"/transactions/{txn_id}", json={
            "transaction_type": "income",
        })

        assert response.status_code == 200
        assert response.json()["transaction_type"] == "income"
        assert balance(client, account_id) == Decimal("180.00")

    def test_invalid_update_returns_400_and_changes_nothing(self, client):
        a = create_account(client, "A", "100.00")
        b = create_account(client, "B")
        txn_id = post_transaction(
            client, transaction_type="transfer", amount="20.00",
            account_id=a, to_account_id=b,
        ).json()["id"]

        response = client.patch(f"/transactions/{txn_id}", json={"amount": "-1"})

        assert response.status_code == 400
        assert balance(client, a) == Decimal("80.00")
        assert balance(client, b) == Decimal("20.00")

    def test_update_missing_transaction_returns_404(self, client):
        response = client.patch("/transactions/999", json={"note": "x"})
        assert response.status_code == 404


class TestDeleteTransactionAPI:

    def test_delete_returns_204_and_reverses(self, client):
        a = create_account(client, "A", "120.00")
        b = create_account(client, "B")
        txn_id = post_transaction(
            client, transaction_type="transfer", amount="20.00",
            account_id=a, to_account_id=b,
        ).json()["id"]

        response = client.delete(f"/transactions/{txn_id}")

        assert response.status_code == 204
        assert balance(client, a) == Decimal("120.00")
        assert balance(client, b) == Decimal("0.00")
        assert client.get(f"/transactions/{txn_id}").status_code == 404

    def test_delete_missing_returns_404(self, client):
        assert client.delete("/transactions/999").status_code == 404


class TestDatabaseFailureAPI:

    def test_commit_failure_returns_503(self, client, db_session, monkeypatch):
        account_id = create_account(client, initial="100.00")

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        with monkeypatch.context() as patch:
            patch.setattr(db_session, "commit", failing_commit)
            response = post_transaction(
                client, transaction_type="income", amount="50.00", account_id=account_id,
            )

        assert response.status_code == 503
        db_session.rollback()
        assert balance(client, account_id) == Decimal("100.00")
        assert client.get("/transactions").json() == []

    def test_read_failure_returns_503(self, client, monkeypatch):
        def failing_list(self):
            raise OperationalError("SELECT", {}, Exception("connection reset"))

        monkeypatch.setattr(ReportService, "list_transactions", failing_list)

        response = client.get("/transactions")

        assert response.status_code == 503


class TestRecentLimitAPI:

    def test_negative_limit_returns_422(self, client):
        assert client.get("/transactions/recent?limit=-1").status_code == 422

    def test_zero_limit_returns_422(self, client):
        assert client.get("/transactions/recent?limit=0").status_code == 422

    def test_limit_above_maximum_returns_422(self, client):
        assert client.get("/transactions/recent?limit=501").status_code == 422
