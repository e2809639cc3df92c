"""
Ledger service: folds a trip's expenses into per-user balances.
"""
import logging
from typing import Dict, Iterable, List, Optional
from tripsettle.core.config import settings
from tripsettle.core.exceptions import AggregationInvariantViolation
from tripsettle.core.money import to_minor

logger = logging.getLogger(__name__)


class Balance:
    """A user's position in a trip, in minor units."""
    def __init__(self, user_id: int, paid: int = 0, owed: int = 0, sent: int = 0, received: int = 0):
        self.user_id = user_id
        self.paid = paid  # expense amounts this user paid
        self.owed = owed  # this user's shares of expenses
        self.sent = sent  # settlement payments made
        self.received = received  # settlement payments received

    @property
    def net(self) -> int:
        """Positive = others owe this user, negative = this user owes."""
        return self.paid - self.owed

    @property
    def outstanding(self) -> int:
        """Net position still to be settled after recorded payments."""
        return self.net + self.sent - self.received

    def __repr__(self) -> str:
        return f"Balance(user_id={self.user_id}, paid={self.paid}, owed={self.owed}, net={self.net})"


def compute_balances(
    roster: Iterable[int],
    expenses: Iterable,
    payments: Iterable = (),
    tolerance: Optional[int] = None
) -> List[Balance]:
    """
    Compute one Balance per user for a trip.

    `expenses` are objects with `payer_id`, `amount` and `details` (each with
    `user_id` and `owed`); `payments` are recorded settlement payments with
    `from_user_id`, `to_user_id` and `amount`. Every roster member appears,
    even without any activity. Result is ordered by user id.
    """
    if tolerance is None:
        tolerance = settings.SETTLEMENT_TOLERANCE_MINOR

    balances: Dict[int, Balance] = {}

    def entry(user_id: int) -> Balance:
        if user_id not in balances:
            balances[user_id] = Balance(user_id)
        return balances[user_id]

    for user_id in roster:
        entry(user_id)

    for expense in expenses:
        entry(expense.payer_id).paid += to_minor(expense.amount)
        for detail in expense.details:
            entry(detail.user_id).owed += to_minor(detail.owed)

    for payment in payments:
        amount = to_minor(payment.amount)
        entry(payment.from_user_id).sent += amount
        entry(payment.to_user_id).received += amount

    result = [balances[user_id] for user_id in sorted(balances)]

    total_net = sum(b.net for b in result)
    if abs(total_net) > tolerance:
        logger.error(f"Net balances sum to {total_net} minor units instead of zero")
        raise AggregationInvariantViolation(
            "Net balances do not sum to zero",
            details={"total_net_minor": total_net}
        )

    return result
