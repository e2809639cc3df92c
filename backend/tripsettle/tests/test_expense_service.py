"""
Tests for storing expenses.
"""
import pytest
from decimal import Decimal
from tripsettle.core.exceptions import InvalidExpenseInput, TripStateError
from tripsettle.models import Expense, ExpenseDetail
from tripsettle.schemas.expense import ExpenseCreate
from tripsettle.services.expense_service import create_expense_with_details, expense_to_report


def test_create_expense_stores_one_detail_per_participant(db_session, trip, alice, bob, carol):
    data = ExpenseCreate(name="Villa", amount="100", payer_id=alice.id, participant_ids=[alice.id, bob.id, carol.id])
    expense = create_expense_with_details(trip, data, alice.id, db_session)

    owed = [Decimal(d.owed) for d in expense.details]
    assert owed == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(owed) == Decimal("100")
    assert all(not d.is_paid for d in expense.details)
    assert expense.split_type == "equal"
    assert expense.created_by == alice.id


def test_create_custom_expense_keeps_fees(db_session, trip, alice, bob):
    data = ExpenseCreate(
        name="Lunch",
        amount="55",
        payer_id=bob.id,
        participant_ids=[alice.id, bob.id],
        split={
            "split_type": "custom",
            "splits": [
                {"user_id": alice.id, "label": "Nasi goreng", "amount": "20"},
                {"user_id": bob.id, "label": "Satay", "amount": "30"},
            ],
            "fees": [{"label": "Tax", "amount": "5"}],
        }
    )
    expense = create_expense_with_details(trip, data, bob.id, db_session)
    report = expense_to_report(expense)

    assert report.split_type == "custom"
    assert [f.label for f in report.additional_fees] == ["Tax"]
    assert [(d.user_id, d.owed, d.item) for d in report.details] == [
        (alice.id, Decimal("22.50"), "Nasi goreng"),
        (bob.id, Decimal("32.50"), "Satay"),
    ]


def test_payer_must_be_on_roster(db_session, trip, alice, make_user):
    outsider = make_user("dave")
    data = ExpenseCreate(name="Taxi", amount="10", payer_id=outsider.id, participant_ids=[alice.id])
    with pytest.raises(InvalidExpenseInput):
        create_expense_with_details(trip, data, alice.id, db_session)


def test_participants_must_be_on_roster(db_session, trip, alice, make_user):
    outsider = make_user("dave")
    data = ExpenseCreate(name="Taxi", amount="10", payer_id=alice.id, participant_ids=[alice.id, outsider.id])
    with pytest.raises(InvalidExpenseInput):
        create_expense_with_details(trip, data, alice.id, db_session)


def test_invalid_expense_writes_nothing(db_session, trip, alice, bob):
    data = ExpenseCreate(name="Bad", amount="0", payer_id=alice.id, participant_ids=[alice.id, bob.id])
    with pytest.raises(InvalidExpenseInput):
        create_expense_with_details(trip, data, alice.id, db_session)

    assert db_session.query(Expense).count() == 0
    assert db_session.query(ExpenseDetail).count() == 0


def test_completed_trip_rejects_expenses(db_session, trip, alice):
    trip.is_complete = True
    db_session.commit()

    data = ExpenseCreate(name="Late", amount="10", payer_id=alice.id, participant_ids=[alice.id])
    with pytest.raises(TripStateError):
        create_expense_with_details(trip, data, alice.id, db_session)
