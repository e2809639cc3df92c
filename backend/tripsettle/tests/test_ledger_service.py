"""
Tests for balance aggregation.
"""
import pytest
from decimal import Decimal
from types import SimpleNamespace
from tripsettle.core.exceptions import AggregationInvariantViolation
from tripsettle.core.money import from_minor
from tripsettle.schemas.expense import ExpenseCreate
from tripsettle.services.ledger_service import compute_balances
from tripsettle.services.split_service import normalize_expense

A, B, C, D = 1, 2, 3, 4


def stored_expense(amount, payer, participants, split=None):
    """Normalize an expense and shape it like a stored Expense row."""
    data = {"name": "x", "amount": amount, "payer_id": payer, "participant_ids": participants}
    if split is not None:
        data["split"] = split
    lines = normalize_expense(ExpenseCreate(**data))
    return SimpleNamespace(
        payer_id=payer,
        amount=Decimal(amount),
        details=[SimpleNamespace(user_id=l.user_id, owed=from_minor(l.owed)) for l in lines]
    )


def by_user(balances):
    return {b.user_id: b for b in balances}


def test_single_equal_expense():
    balances = by_user(compute_balances([A, B, C], [stored_expense("90", A, [A, B, C])]))

    assert (balances[A].paid, balances[A].owed, balances[A].net) == (9000, 3000, 6000)
    assert (balances[B].paid, balances[B].owed, balances[B].net) == (0, 3000, -3000)
    assert (balances[C].paid, balances[C].owed, balances[C].net) == (0, 3000, -3000)


def test_roster_member_without_activity_is_listed():
    balances = compute_balances([D, A, B], [stored_expense("10", A, [A, B])])
    assert [b.user_id for b in balances] == [A, B, D]
    assert (balances[2].paid, balances[2].owed, balances[2].net) == (0, 0, 0)


def test_users_outside_roster_still_counted():
    balances = by_user(compute_balances([A], [stored_expense("30", B, [A, C])]))
    assert set(balances) == {A, B, C}
    assert balances[B].net == 3000


def test_net_sums_to_zero_across_many_expenses():
    expenses = [
        stored_expense("100", A, [A, B, C]),
        stored_expense("45.50", B, [A, B, C, D]),
        stored_expense("0.07", C, [B, D]),
        stored_expense("80", D, [A, B, C, D], {
            "split_type": "custom",
            "splits": [
                {"user_id": A, "label": "a", "amount": "10"},
                {"user_id": B, "label": "b", "amount": "20"},
                {"user_id": C, "label": "c", "amount": "30"},
            ],
            "fees": [{"label": "tip", "amount": "20"}],
        }),
    ]
    balances = compute_balances([A, B, C, D], expenses)
    assert sum(b.net for b in balances) == 0
    assert sum(b.paid for b in balances) == 10000 + 4550 + 7 + 8000


def test_corrupted_details_fail_loudly():
    expense = SimpleNamespace(
        payer_id=A,
        amount=Decimal("90"),
        details=[SimpleNamespace(user_id=A, owed=Decimal("30")), SimpleNamespace(user_id=B, owed=Decimal("30"))]
    )
    with pytest.raises(AggregationInvariantViolation):
        compute_balances([A, B], [expense])


def test_tolerance_absorbs_small_residue():
    expense = SimpleNamespace(
        payer_id=A,
        amount=Decimal("10.00"),
        details=[SimpleNamespace(user_id=B, owed=Decimal("9.99"))]
    )
    balances = compute_balances([A, B], [expense], tolerance=1)
    assert sum(b.net for b in balances) == 1


def test_recorded_payments_reduce_outstanding():
    payments = [SimpleNamespace(from_user_id=B, to_user_id=A, amount=Decimal("30"))]
    balances = by_user(compute_balances([A, B, C], [stored_expense("90", A, [A, B, C])], payments))

    assert balances[B].net == -3000
    assert balances[B].sent == 3000
    assert balances[B].outstanding == 0
    assert balances[A].received == 3000
    assert balances[A].outstanding == 3000
    assert balances[C].outstanding == -3000
