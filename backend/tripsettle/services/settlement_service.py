"""
Settlement service for debt minimization and the trip settlement view.
"""
import heapq
import logging
from sqlalchemy.orm import Session, joinedload
from typing import Dict, Iterable, List, Optional
from tripsettle.core.config import settings
from tripsettle.core.exceptions import SettlementResidual
from tripsettle.core.money import from_minor, to_minor
from tripsettle.models.expense import Expense
from tripsettle.models.settlement import SettlementPayment
from tripsettle.models.trip import Trip
from tripsettle.models.user import User
from tripsettle.schemas.settlement import BalanceResponse, SettlementResponse, TransactionResponse
from tripsettle.services.ledger_service import Balance, compute_balances

logger = logging.getLogger(__name__)


class SettlementTransaction:
    """Represents a single transfer between users, in minor units."""
    def __init__(self, from_user_id: int, to_user_id: int, amount: int, is_paid: bool = False):
        self.from_user_id = from_user_id
        self.to_user_id = to_user_id
        self.amount = amount
        self.is_paid = is_paid

    def key(self):
        return (self.from_user_id, self.to_user_id, self.amount)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SettlementTransaction):
            return NotImplemented
        return self.key() == other.key() and self.is_paid == other.is_paid

    def __repr__(self) -> str:
        return f"SettlementTransaction({self.from_user_id} -> {self.to_user_id}: {self.amount})"


def minimize_transfers(outstanding: Dict[int, int], tolerance: int = 0) -> List[SettlementTransaction]:
    """
    Greedy debt minimization.

    Repeatedly matches the largest debtor with the largest creditor and
    transfers the smaller of the two amounts. Ties go to the lower user id,
    so the output does not depend on input order. Greedy matching is not
    always minimal in transaction count (the exact problem is NP-hard) but
    needs at most n - 1 transfers.

    Matching stops once every remaining balance is within `tolerance`;
    leftovers above it raise `SettlementResidual`.
    """
    debtors = [(balance, user_id) for user_id, balance in outstanding.items() if balance < 0]
    creditors = [(-balance, user_id) for user_id, balance in outstanding.items() if balance > 0]
    # debtors hold -debt already; creditors are negated for max-heap order
    heapq.heapify(debtors)
    heapq.heapify(creditors)

    transfers = []
    while debtors and creditors and (-debtors[0][0] > tolerance or -creditors[0][0] > tolerance):
        neg_debt, debtor_id = heapq.heappop(debtors)
        neg_credit, creditor_id = heapq.heappop(creditors)
        debt, credit = -neg_debt, -neg_credit

        amount = min(debt, credit)
        transfers.append(SettlementTransaction(debtor_id, creditor_id, amount))

        if debt > amount:
            heapq.heappush(debtors, (-(debt - amount), debtor_id))
        if credit > amount:
            heapq.heappush(creditors, (-(credit - amount), creditor_id))

    residual = {user_id: -neg for neg, user_id in creditors if -neg > tolerance}
    residual.update({user_id: neg for neg, user_id in debtors if -neg > tolerance})
    if residual:
        logger.error(f"Settlement left unsettled balances: {residual}")
        raise SettlementResidual("Settlement left unsettled balances", details={"residual_minor": residual})

    return transfers


def compute_settlement(balances: Iterable[Balance], tolerance: Optional[int] = None) -> List[SettlementTransaction]:
    """Produce the transfers that bring every balance's outstanding amount to zero."""
    if tolerance is None:
        tolerance = settings.SETTLEMENT_TOLERANCE_MINOR
    outstanding = {b.user_id: b.outstanding for b in balances}
    return minimize_transfers(outstanding, tolerance)


class TripSettlement:
    """Computed settlement state of a trip."""
    def __init__(self, trip: Trip, total_expenses: int, balances: List[Balance],
                 payments: List[SettlementPayment], outstanding: List[SettlementTransaction]):
        self.trip = trip
        self.total_expenses = total_expenses
        self.balances = balances
        self.payments = payments
        self.outstanding = outstanding

    def find_outstanding(self, from_user_id: int, to_user_id: int, amount: int) -> Optional[SettlementTransaction]:
        for transaction in self.outstanding:
            if transaction.key() == (from_user_id, to_user_id, amount):
                return transaction
        return None

    def find_payment(self, from_user_id: int, to_user_id: int, amount: int) -> Optional[SettlementPayment]:
        for payment in self.payments:
            if (payment.from_user_id, payment.to_user_id, to_minor(payment.amount)) == (from_user_id, to_user_id, amount):
                return payment
        return None


def build_trip_settlement(trip: Trip, db: Session) -> TripSettlement:
    """
    Recompute a trip's balances and outstanding transfers from stored state.
    Recorded payments count toward balances, so only the rest is re-optimized.
    """
    expenses = db.query(Expense).options(
        joinedload(Expense.details)
    ).filter(Expense.trip_id == trip.id).order_by(Expense.id).all()

    payments = db.query(SettlementPayment).filter(
        SettlementPayment.trip_id == trip.id
    ).order_by(SettlementPayment.id).all()

    balances = compute_balances(trip.participant_ids, expenses, payments)
    outstanding = compute_settlement(balances)
    total_expenses = sum(to_minor(e.amount) for e in expenses)

    logger.debug(
        f"Trip {trip.id}: {len(expenses)} expenses, {len(payments)} payments, "
        f"{len(outstanding)} outstanding transfers"
    )
    return TripSettlement(trip, total_expenses, balances, payments, outstanding)


def get_user_names(user_ids: Iterable[int], db: Session) -> Dict[int, str]:
    """Map user ids to display names."""
    ids = set(user_ids)
    if not ids:
        return {}
    users = db.query(User).filter(User.id.in_(ids)).all()
    return {user.id: user.name for user in users}


def payment_to_response(payment: SettlementPayment, names: Dict[int, str]) -> TransactionResponse:
    return TransactionResponse(
        from_user_id=payment.from_user_id,
        from_name=names.get(payment.from_user_id, ""),
        to_user_id=payment.to_user_id,
        to_name=names.get(payment.to_user_id, ""),
        amount=from_minor(to_minor(payment.amount)),
        is_paid=True,
        paid_at=payment.created_at
    )


def settlement_to_response(settlement: TripSettlement, db: Session) -> SettlementResponse:
    """Render a TripSettlement, paid transfers first, then outstanding ones."""
    user_ids = [b.user_id for b in settlement.balances]
    names = get_user_names(user_ids, db)

    balances = [
        BalanceResponse(
            user_id=b.user_id,
            name=names.get(b.user_id, ""),
            paid=from_minor(b.paid),
            owed=from_minor(b.owed),
            net=from_minor(b.net),
            outstanding=from_minor(b.outstanding)
        )
        for b in settlement.balances
    ]

    transactions = [payment_to_response(p, names) for p in settlement.payments]
    transactions.extend(
        TransactionResponse(
            from_user_id=t.from_user_id,
            from_name=names.get(t.from_user_id, ""),
            to_user_id=t.to_user_id,
            to_name=names.get(t.to_user_id, ""),
            amount=from_minor(t.amount),
            is_paid=False
        )
        for t in settlement.outstanding
    )

    return SettlementResponse(
        trip_id=settlement.trip.id,
        currency=settings.CURRENCY_CODE,
        total_expenses=from_minor(settlement.total_expenses),
        balances=balances,
        transactions=transactions
    )
