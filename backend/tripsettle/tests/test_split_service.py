"""
Tests for expense normalization.
"""
import pytest
from decimal import Decimal
from pydantic import ValidationError
from tripsettle.core.exceptions import InvalidExpenseInput
from tripsettle.schemas.expense import ExpenseCreate
from tripsettle.services.split_service import normalize_expense

A, B, C = 1, 2, 3


def make_expense(amount, participants, split=None, payer=A, name="Dinner"):
    data = {
        "name": name,
        "amount": amount,
        "payer_id": payer,
        "participant_ids": participants,
    }
    if split is not None:
        data["split"] = split
    return ExpenseCreate(**data)


def owed_map(lines):
    return {line.user_id: line.owed for line in lines}


def test_equal_split_even():
    lines = normalize_expense(make_expense("90", [A, B, C]))
    assert owed_map(lines) == {A: 3000, B: 3000, C: 3000}
    assert all(line.item == "Dinner" for line in lines)


def test_equal_split_residual_goes_to_first_participant():
    lines = normalize_expense(make_expense("100", [A, B, C]))
    assert [line.owed for line in lines] == [3334, 3333, 3333]
    assert sum(line.owed for line in lines) == 10000


def test_equal_split_residual_follows_list_order():
    lines = normalize_expense(make_expense("0.05", [C, A, B]))
    assert [(line.user_id, line.owed) for line in lines] == [(C, 2), (A, 2), (B, 1)]


@pytest.mark.parametrize("amount,count", [
    ("0.01", 3),
    ("10", 3),
    ("99.99", 7),
    ("1234.56", 11),
    ("1", 1),
])
def test_equal_split_sums_to_amount(amount, count):
    participants = list(range(1, count + 1))
    lines = normalize_expense(make_expense(amount, participants))
    assert len(lines) == count
    assert sum(line.owed for line in lines) == int(Decimal(amount) * 100)
    assert max(l.owed for l in lines) - min(l.owed for l in lines) <= 1


def test_payer_need_not_participate():
    lines = normalize_expense(make_expense("60", [B, C], payer=A))
    assert owed_map(lines) == {B: 3000, C: 3000}


def test_custom_split():
    split = {
        "split_type": "custom",
        "splits": [
            {"user_id": A, "label": "item1", "amount": "20"},
            {"user_id": B, "label": "item2", "amount": "30"},
        ],
    }
    lines = normalize_expense(make_expense("50", [A, B], split))
    assert owed_map(lines) == {A: 2000, B: 3000}
    assert [line.item for line in lines] == ["item1", "item2"]


def test_custom_split_mismatch_rejected():
    split = {
        "split_type": "custom",
        "splits": [
            {"user_id": A, "label": "item1", "amount": "20"},
            {"user_id": B, "label": "item2", "amount": "25"},
        ],
    }
    with pytest.raises(InvalidExpenseInput):
        normalize_expense(make_expense("50", [A, B], split))


def test_custom_split_fees_spread_across_all_participants():
    split = {
        "split_type": "custom",
        "splits": [
            {"user_id": A, "label": "Steak", "amount": "40"},
            {"user_id": B, "label": "Pasta", "amount": "50"},
        ],
        "fees": [
            {"label": "Tax", "amount": "10"},
            {"label": "Service", "amount": "10"},
        ],
    }
    lines = normalize_expense(make_expense("110", [A, B, C], split))
    assert owed_map(lines) == {A: 4667, B: 5667, C: 666}
    assert sum(line.owed for line in lines) == 11000
    # Carol ordered nothing and only carries fees
    assert lines[2].item == "Tax, Service"


def test_custom_split_joins_labels_for_repeated_participant():
    split = {
        "split_type": "custom",
        "splits": [
            {"user_id": A, "label": "Coffee", "amount": "3"},
            {"user_id": A, "label": "Cake", "amount": "4"},
            {"user_id": B, "label": "Tea", "amount": "3"},
        ],
    }
    lines = normalize_expense(make_expense("10", [A, B], split))
    assert owed_map(lines) == {A: 700, B: 300}
    assert lines[0].item == "Coffee, Cake"


def test_custom_split_participant_without_item_owes_nothing():
    split = {
        "split_type": "custom",
        "splits": [{"user_id": A, "label": "Ticket", "amount": "15"}],
    }
    lines = normalize_expense(make_expense("15", [A, B], split, name="Museum"))
    assert owed_map(lines) == {A: 1500, B: 0}
    assert lines[1].item == "Museum"


def test_custom_split_for_non_participant_rejected():
    split = {
        "split_type": "custom",
        "splits": [{"user_id": C, "label": "Ticket", "amount": "15"}],
    }
    with pytest.raises(InvalidExpenseInput):
        normalize_expense(make_expense("15", [A, B], split))


def test_negative_fee_rejected():
    split = {
        "split_type": "custom",
        "splits": [{"user_id": A, "label": "Room", "amount": "60"}],
        "fees": [{"label": "Discount", "amount": "-10"}],
    }
    with pytest.raises(InvalidExpenseInput):
        normalize_expense(make_expense("50", [A], split))


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_non_positive_amount_rejected(amount):
    with pytest.raises(InvalidExpenseInput):
        normalize_expense(make_expense(amount, [A, B]))


def test_empty_participants_rejected():
    with pytest.raises(InvalidExpenseInput):
        normalize_expense(make_expense("10", []))


def test_duplicate_participants_rejected():
    with pytest.raises(InvalidExpenseInput) as exc_info:
        normalize_expense(make_expense("10", [A, B, A]))
    assert exc_info.value.details == {"user_ids": [A]}


def test_sub_minor_amount_rejected():
    with pytest.raises(InvalidExpenseInput):
        normalize_expense(make_expense("10.005", [A, B]))


def test_equal_split_with_custom_fields_is_invalid():
    with pytest.raises(ValidationError):
        make_expense("10", [A, B], {"split_type": "equal", "splits": []})


def test_unknown_split_type_is_invalid():
    with pytest.raises(ValidationError):
        make_expense("10", [A, B], {"split_type": "percent"})
