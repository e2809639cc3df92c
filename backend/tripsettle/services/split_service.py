"""
Split service: turns an expense into per-participant share lines.
"""
from typing import List, Dict, Optional
from tripsettle.core.exceptions import InvalidExpenseInput
from tripsettle.core.money import to_minor, is_minor_precise, allocate_evenly
from tripsettle.schemas.expense import ExpenseCreate, EqualSplit, CustomSplit


class ShareLine:
    """What one participant owes for one expense, in minor units."""
    def __init__(self, user_id: int, owed: int, item: str):
        self.user_id = user_id
        self.owed = owed
        self.item = item

    def __repr__(self) -> str:
        return f"ShareLine(user_id={self.user_id}, owed={self.owed}, item={self.item!r})"


def _amount_to_minor(value, what: str, decimals: Optional[int]) -> int:
    if not is_minor_precise(value, decimals):
        raise InvalidExpenseInput(f"{what} has more precision than the currency allows", details={"value": str(value)})
    return to_minor(value, decimals)


def validate_expense(expense: ExpenseCreate, decimals: Optional[int] = None) -> int:
    """
    Check the parts of an expense common to every split mode.
    Returns the amount in minor units.
    """
    if not expense.participant_ids:
        raise InvalidExpenseInput("Expense must have at least one participant")

    seen = set()
    duplicates = []
    for user_id in expense.participant_ids:
        if user_id in seen:
            duplicates.append(user_id)
        seen.add(user_id)
    if duplicates:
        raise InvalidExpenseInput("Duplicate participants", details={"user_ids": duplicates})

    amount = _amount_to_minor(expense.amount, "Amount", decimals)
    if amount <= 0:
        raise InvalidExpenseInput("Amount must be greater than zero", details={"amount": str(expense.amount)})
    return amount


def split_equal(amount: int, participant_ids: List[int], item: str) -> List[ShareLine]:
    """Equal shares; leftover minor units go to the first participants in list order."""
    shares = allocate_evenly(amount, len(participant_ids))
    return [ShareLine(user_id, share, item) for user_id, share in zip(participant_ids, shares)]


def split_custom(
    amount: int,
    participant_ids: List[int],
    split: CustomSplit,
    decimals: Optional[int] = None
) -> List[ShareLine]:
    """
    Explicit item amounts per participant plus an equal share of all fees.
    The lines must add up to the expense amount exactly.
    """
    item_totals: Dict[int, int] = {user_id: 0 for user_id in participant_ids}
    item_labels: Dict[int, List[str]] = {user_id: [] for user_id in participant_ids}

    for entry in split.splits:
        if entry.user_id not in item_totals:
            raise InvalidExpenseInput(
                "Custom split assigned to a user who is not a participant",
                details={"user_id": entry.user_id}
            )
        value = _amount_to_minor(entry.amount, f"Custom split '{entry.label}'", decimals)
        if value < 0:
            raise InvalidExpenseInput(f"Custom split '{entry.label}' cannot be negative")
        item_totals[entry.user_id] += value
        item_labels[entry.user_id].append(entry.label)

    fee_total = 0
    for fee in split.fees:
        value = _amount_to_minor(fee.amount, f"Fee '{fee.label}'", decimals)
        if value < 0:
            raise InvalidExpenseInput(f"Fee '{fee.label}' cannot be negative")
        fee_total += value

    expected = sum(item_totals.values()) + fee_total
    if expected != amount:
        raise InvalidExpenseInput(
            "Custom splits and fees do not add up to the expense amount",
            details={"amount_minor": amount, "splits_and_fees_minor": expected}
        )

    fee_shares = allocate_evenly(fee_total, len(participant_ids))
    fee_labels = [fee.label for fee in split.fees]

    lines = []
    for user_id, fee_share in zip(participant_ids, fee_shares):
        labels = item_labels[user_id] or (fee_labels if fee_share else [])
        lines.append(ShareLine(user_id, item_totals[user_id] + fee_share, ", ".join(labels)))
    return lines


def normalize_expense(expense: ExpenseCreate, decimals: Optional[int] = None) -> List[ShareLine]:
    """
    Normalize an expense into one share line per participant.

    Raises InvalidExpenseInput without side effects when the expense is
    inconsistent. The returned owed amounts always sum to the expense amount.
    """
    amount = validate_expense(expense, decimals)

    if isinstance(expense.split, CustomSplit):
        lines = split_custom(amount, expense.participant_ids, expense.split, decimals)
    elif isinstance(expense.split, EqualSplit):
        lines = split_equal(amount, expense.participant_ids, expense.name)
    else:
        raise InvalidExpenseInput("Unknown split type")

    for line in lines:
        if not line.item:
            line.item = expense.name
    return lines
