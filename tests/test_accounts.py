# tests/test_accounts.py
from datetime import datetime
from types import SimpleNamespace
import uuid

import pytest

from wallet_api.core.exceptions import InsufficientFundsError, ValidationError
from wallet_api.utils.accounts import adjust_balance, choose_primary, transfer_between

TODAY = "2026-10-01"


def bank_account(name, balance=0.0, created_at=None):
    return SimpleNamespace(
        id=uuid.uuid4(),
        name=name,
        balance=balance,
        is_primary=False,
        created_at=created_at or datetime(2026, 1, 1),
    )


# ────────────────────────────────────────────────────────────────────────────────
# BALANCE RULES
# ────────────────────────────────────────────────────────────────────────────────
def test_transfer_moves_money_between_accounts():
    salary, savings = bank_account("Salary", 1000), bank_account("Savings", 50)

    transfer_between(salary, savings, 400)

    assert (salary.balance, savings.balance) == (600, 450)


def test_transfer_of_the_whole_balance_is_allowed():
    salary, savings = bank_account("Salary", 99.99), bank_account("Savings")

    transfer_between(salary, savings, 99.99)

    assert salary.balance == 0
    assert savings.balance == 99.99


def test_transfer_over_balance_is_rejected_untouched():
    salary, savings = bank_account("Salary", 100), bank_account("Savings")

    with pytest.raises(InsufficientFundsError, match="Available: 100.00") as exc_info:
        transfer_between(salary, savings, 100.01)

    assert exc_info.value.shortfall == pytest.approx(0.01)
    assert (salary.balance, savings.balance) == (100, 0)


@pytest.mark.parametrize("amount", [0, -10])
def test_transfer_needs_a_positive_amount(amount):
    with pytest.raises(ValidationError):
        transfer_between(bank_account("A", 100), bank_account("B"), amount)


def test_transfer_to_the_same_account_is_rejected():
    salary = bank_account("Salary", 100)
    with pytest.raises(ValidationError):
        transfer_between(salary, salary, 10)


def test_adjust_balance_clamps_at_zero(caplog):
    account = bank_account("Cash", 30)

    assert adjust_balance(account, 20.5) == 50.5
    assert adjust_balance(account, -80) == 0
    assert "clamping" in caplog.text


def test_oldest_remaining_account_becomes_primary():
    first = bank_account("First", created_at=datetime(2026, 1, 1))
    second = bank_account("Second", created_at=datetime(2026, 2, 1))
    third = bank_account("Third", created_at=datetime(2026, 3, 1))

    assert choose_primary([third, first, second], removed_id=first.id) is second
    assert choose_primary([first], removed_id=first.id) is None


# ────────────────────────────────────────────────────────────────────────────────
# API
# ────────────────────────────────────────────────────────────────────────────────
async def add_account(client, name, balance=0, **extra):
    payload = {"name": name, "bank_name": "HDFC", "balance": balance, **extra}
    response = await client.post("/api/v1/accounts", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def get_account(client, account_id):
    response = await client.get(f"/api/v1/accounts/{account_id}")
    assert response.status_code == 200
    return response.json()


async def account_wallets(client, account_id=None):
    params = {"bank_account_id": account_id} if account_id else {}
    response = await client.get("/api/v1/wallets", params=params)
    assert response.status_code == 200, response.text
    return {w["category"]: w for w in response.json()}


async def test_first_account_is_primary_and_primary_can_move(client):
    salary = await add_account(client, "Salary")
    savings = await add_account(client, "Savings")
    assert salary["is_primary"] is True
    assert savings["is_primary"] is False

    response = await client.post(f"/api/v1/accounts/{savings['id']}/primary")
    assert response.status_code == 200

    accounts = (await client.get("/api/v1/accounts")).json()
    assert [(a["name"], a["is_primary"]) for a in accounts] == [("Savings", True), ("Salary", False)]


async def test_edit_account_details(client):
    account = await add_account(client, "Salary", 500)

    response = await client.patch(f"/api/v1/accounts/{account['id']}", json={"name": "Main", "account_type": "current"})
    assert response.status_code == 200
    assert response.json()["name"] == "Main"
    assert response.json()["account_type"] == "current"
    assert response.json()["balance"] == 500


async def test_bank_transfer_and_its_history(client, published):
    salary = await add_account(client, "Salary", 1000)
    savings = await add_account(client, "Savings")

    response = await client.post("/api/v1/accounts/transfer", json={
        "from_account_id": salary["id"], "to_account_id": savings["id"], "amount": 400, "description": "Monthly",
    })
    assert response.status_code == 201, response.text
    assert (await get_account(client, salary["id"]))["balance"] == pytest.approx(600)
    assert (await get_account(client, savings["id"]))["balance"] == pytest.approx(400)
    assert any(event == "wallet_data_changed" for _, event in published)

    response = await client.post("/api/v1/accounts/transfer", json={
        "from_account_id": salary["id"], "to_account_id": savings["id"], "amount": 700,
    })
    assert response.status_code == 400
    assert response.json()["shortfall"] == pytest.approx(100)
    assert (await get_account(client, salary["id"]))["balance"] == pytest.approx(600)

    response = await client.post("/api/v1/accounts/transfer", json={
        "from_account_id": salary["id"], "to_account_id": salary["id"], "amount": 10,
    })
    assert response.status_code == 422

    history = (await client.get("/api/v1/accounts/transfers", params={"account_id": savings["id"]})).json()
    assert [(t["amount"], t["description"]) for t in history] == [(400, "Monthly")]


async def test_income_into_an_account_funds_its_own_wallets(client):
    salary = await add_account(client, "Salary")

    response = await client.post("/api/v1/income", json={
        "source": "Salary", "amount": 1000, "date": TODAY, "category": "salary", "bank_account_id": salary["id"],
    })
    assert response.status_code == 201, response.text
    assert response.json()["bank_account_id"] == salary["id"]

    assert (await get_account(client, salary["id"]))["balance"] == pytest.approx(1000)
    scoped = await account_wallets(client, salary["id"])
    assert scoped["saving"]["total_balance"] == pytest.approx(500)
    assert [sw["name"] for sw in scoped["saving"]["sub_wallets"]] == ["Mobile", "PC", "Other"]
    default = await account_wallets(client)
    assert all(w["total_balance"] == 0 for w in default.values())

    await client.post("/api/v1/income", json={"source": "Gift", "amount": 50, "date": TODAY, "category": "gift"})
    assert len((await client.get("/api/v1/income", params={"bank_account_id": salary["id"]})).json()) == 1
    assert len((await client.get("/api/v1/income")).json()) == 2


async def test_expense_from_an_account_only_sees_its_wallets(client):
    salary = await add_account(client, "Salary")
    await client.post("/api/v1/income", json={
        "source": "Salary", "amount": 1000, "date": TODAY, "category": "salary", "bank_account_id": salary["id"],
    })
    await client.post("/api/v1/income", json={"source": "Cash", "amount": 1000, "date": TODAY, "category": "cash"})
    scoped_wants = (await account_wallets(client, salary["id"]))["wants"]
    default_wants = (await account_wallets(client))["wants"]

    # A wallet of the default set cannot pay for an account expense
    response = await client.post("/api/v1/expenses", json={
        "description": "Shoes", "amount": 150, "date": TODAY, "category": "shopping",
        "sources": [{"kind": "wallet", "id": default_wants["id"]}], "bank_account_id": salary["id"],
    })
    assert response.status_code == 400
    assert response.json()["shortfall"] == pytest.approx(150)

    response = await client.post("/api/v1/expenses", json={
        "description": "Shoes", "amount": 150, "date": TODAY, "category": "shopping",
        "sources": [{"kind": "wallet", "id": scoped_wants["id"]}], "bank_account_id": salary["id"],
    })
    assert response.status_code == 201, response.text
    expense = response.json()
    assert (await get_account(client, salary["id"]))["balance"] == pytest.approx(850)
    assert (await account_wallets(client, salary["id"]))["wants"]["total_balance"] == pytest.approx(50)
    assert (await account_wallets(client))["wants"]["total_balance"] == pytest.approx(200)

    response = await client.patch(f"/api/v1/expenses/{expense['id']}", json={"amount": 100})
    assert response.status_code == 200
    assert (await get_account(client, salary["id"]))["balance"] == pytest.approx(900)

    await client.delete(f"/api/v1/expenses/{expense['id']}")
    assert (await get_account(client, salary["id"]))["balance"] == pytest.approx(1000)
    assert (await account_wallets(client, salary["id"]))["wants"]["total_balance"] == pytest.approx(200)


async def test_unknown_account_is_not_found(client):
    missing = "00000000-0000-0000-0000-000000000000"

    response = await client.post("/api/v1/income", json={
        "source": "Salary", "amount": 100, "date": TODAY, "category": "salary", "bank_account_id": missing,
    })
    assert response.status_code == 404
    assert (await client.get("/api/v1/wallets", params={"bank_account_id": missing})).status_code == 404
    assert (await client.get(f"/api/v1/accounts/{missing}")).status_code == 404


async def test_deleting_an_account_removes_its_data(client):
    salary = await add_account(client, "Salary", 300)
    savings = await add_account(client, "Savings")
    await client.post("/api/v1/income", json={
        "source": "Salary", "amount": 1000, "date": TODAY, "category": "salary", "bank_account_id": salary["id"],
    })
    await client.post("/api/v1/accounts/transfer", json={
        "from_account_id": salary["id"], "to_account_id": savings["id"], "amount": 100,
    })
    await client.post("/api/v1/income", json={"source": "Cash", "amount": 200, "date": TODAY, "category": "cash"})

    response = await client.delete(f"/api/v1/accounts/{salary['id']}")
    assert response.status_code == 204

    accounts = (await client.get("/api/v1/accounts")).json()
    assert [(a["name"], a["is_primary"]) for a in accounts] == [("Savings", True)]
    assert (await client.get("/api/v1/accounts/transfers")).json() == []
    assert [i["source"] for i in (await client.get("/api/v1/income")).json()] == ["Cash"]
    assert (await client.get("/api/v1/wallets", params={"bank_account_id": salary["id"]})).status_code == 404
    assert (await account_wallets(client))["wants"]["total_balance"] == pytest.approx(40)


async def test_dashboard_for_one_account(client):
    salary = await add_account(client, "Salary")
    today = datetime.now().date().isoformat()
    await client.post("/api/v1/income", json={
        "source": "Salary", "amount": 1000, "date": today, "category": "salary", "bank_account_id": salary["id"],
    })
    await client.post("/api/v1/income", json={"source": "Cash", "amount": 200, "date": today, "category": "cash"})

    body = (await client.get(
        "/api/v1/dashboard/summary", params={"time_period": "yearly", "bank_account_id": salary["id"]}
    )).json()

    assert body["summary"]["income"] == pytest.approx(1000)
    assert body["summary"]["total_balance"] == pytest.approx(1000)
