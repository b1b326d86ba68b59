# tests/test_deduction.py
import uuid

import pytest

from wallet_api.core.exceptions import InsufficientFundsError, ValidationError
from wallet_api.schemas.ledger import FundingSource
from wallet_api.utils.deduction import deduct, unique_sources


def lookup_from(balances):
    return lambda kind, record_id: balances.get((kind, record_id))


def test_drains_sources_in_the_given_order():
    a, b = uuid.uuid4(), uuid.uuid4()
    balances = {("subwallet", a): 300.0, ("wallet", b): 1000.0}
    sources = [FundingSource(kind="subwallet", id=a), FundingSource(kind="wallet", id=b)]

    result = deduct(500, sources, lookup_from(balances))

    assert [(d.kind, d.id, d.amount) for d in result.deductions] == [
        ("subwallet", a, 300.0),
        ("wallet", b, 200.0),
    ]
    assert result.shortfall == 0
    assert result.covered


def test_order_decides_which_source_pays():
    a, b = uuid.uuid4(), uuid.uuid4()
    balances = {("wallet", a): 1000.0, ("wallet", b): 1000.0}

    result = deduct(400, [FundingSource(kind="wallet", id=b), FundingSource(kind="wallet", id=a)], lookup_from(balances))

    assert [(d.id, d.amount) for d in result.deductions] == [(b, 400.0)]


def test_reports_shortfall_when_sources_run_dry():
    a = uuid.uuid4()
    result = deduct(500, [FundingSource(kind="subwallet", id=a)], lookup_from({("subwallet", a): 300.0}))

    assert [d.amount for d in result.deductions] == [300.0]
    assert result.shortfall == pytest.approx(200)
    assert not result.covered
    with pytest.raises(InsufficientFundsError) as exc_info:
        result.raise_for_shortfall()
    assert exc_info.value.to_dict()["shortfall"] == 200


def test_empty_and_negative_sources_contribute_nothing():
    a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    balances = {("wallet", a): 0.0, ("wallet", b): -20.0, ("wallet", c): 50.0}
    sources = [FundingSource(kind="wallet", id=x) for x in (a, b, c)]

    result = deduct(50, sources, lookup_from(balances))

    assert [(d.id, d.amount) for d in result.deductions] == [(c, 50.0)]


def test_deductions_sum_to_amount_when_covered():
    ids = [uuid.uuid4() for _ in range(4)]
    balances = {("subwallet", i): 33.33 for i in ids}
    result = deduct(100, [FundingSource(kind="subwallet", id=i) for i in ids], lookup_from(balances))

    assert sum(d.amount for d in result.deductions) == pytest.approx(100)
    assert result.covered


def test_duplicate_sources_are_used_once(caplog):
    a = uuid.uuid4()
    sources = [FundingSource(kind="wallet", id=a), FundingSource(kind="wallet", id=a)]

    assert len(unique_sources(sources)) == 1
    result = deduct(150, sources, lookup_from({("wallet", a): 100.0}))

    assert [d.amount for d in result.deductions] == [100.0]
    assert result.shortfall == pytest.approx(50)
    assert "duplicate" in caplog.text


def test_unknown_source_is_skipped(caplog):
    known, unknown = uuid.uuid4(), uuid.uuid4()
    sources = [FundingSource(kind="subwallet", id=unknown), FundingSource(kind="wallet", id=known)]

    result = deduct(80, sources, lookup_from({("wallet", known): 100.0}))

    assert [(d.id, d.amount) for d in result.deductions] == [(known, 80.0)]
    assert "no longer exists" in caplog.text


@pytest.mark.parametrize("amount", [0, -1])
def test_rejects_non_positive_expense(amount):
    with pytest.raises(ValidationError):
        deduct(amount, [], lookup_from({}))
