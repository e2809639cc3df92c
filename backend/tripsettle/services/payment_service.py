"""
Payment service: marks settlement transfers and expense lines as paid.
"""
import logging
from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Session
from typing import Tuple
from tripsettle.core.exceptions import AuthorizationError, NotFoundError
from tripsettle.core.locks import trip_locks
from tripsettle.core.money import from_minor, to_minor
from tripsettle.models.expense import Expense, ExpenseDetail
from tripsettle.models.settlement import SettlementPayment
from tripsettle.models.trip import Trip
from tripsettle.services.settlement_service import build_trip_settlement

logger = logging.getLogger(__name__)


def ensure_debtor(actor_id: int, from_user_id: int):
    """Only the paying side of a transfer may mark it paid."""
    if actor_id != from_user_id:
        raise AuthorizationError("Only the debtor can mark this payment as paid")


def mark_transaction_paid(
    trip_id: int,
    from_user_id: int,
    to_user_id: int,
    amount: Decimal,
    actor_id: int,
    db: Session
) -> Tuple[SettlementPayment, bool]:
    """
    Record that `from_user_id` paid `to_user_id` the given amount.

    Returns the payment and whether it was newly recorded. Marking an
    already paid transfer again returns the existing payment unchanged.
    Expense detail lines are left untouched.

    The settlement is rebuilt in a fresh transaction that holds the trip
    row lock, so payments committed by other requests or workers are
    always seen before deciding whether to record a new one.
    """
    if not db.query(Trip.id).filter(Trip.id == trip_id).first():
        raise NotFoundError("Trip not found")

    ensure_debtor(actor_id, from_user_id)
    amount_minor = to_minor(amount)

    with trip_locks.hold(trip_id):
        # Earlier reads may have pinned a snapshot taken before our turn
        db.rollback()
        trip = db.query(Trip).filter(Trip.id == trip_id).with_for_update().one()
        settlement = build_trip_settlement(trip, db)

        if settlement.find_outstanding(from_user_id, to_user_id, amount_minor):
            payment = SettlementPayment(
                trip_id=trip_id,
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                amount=from_minor(amount_minor),
                marked_by=actor_id
            )
            db.add(payment)
            db.commit()
            db.refresh(payment)
            logger.info(
                f"Trip {trip_id}: user {from_user_id} paid user {to_user_id} {from_minor(amount_minor)}"
            )
            return payment, True

        existing = settlement.find_payment(from_user_id, to_user_id, amount_minor)
        if existing:
            return existing, False

    raise NotFoundError(
        "Settlement transaction not found",
        details={"from_user_id": from_user_id, "to_user_id": to_user_id, "amount": str(amount)}
    )


def confirm_detail_paid(trip_id: int, detail_id: int, actor_id: int, db: Session) -> Tuple[ExpenseDetail, bool]:
    """
    Mark one expense line as paid.

    Allowed for the participant who owes the line or the expense payer.
    This is bookkeeping per line only; balances and settlement transfers
    are not affected.
    """
    detail = db.query(ExpenseDetail).join(Expense).filter(
        ExpenseDetail.id == detail_id,
        Expense.trip_id == trip_id
    ).first()
    if not detail:
        raise NotFoundError("Expense detail not found")

    if actor_id not in (detail.user_id, detail.expense.payer_id):
        raise AuthorizationError("Only the participant or the payer can confirm this line")

    if detail.is_paid:
        return detail, False

    detail.is_paid = True
    detail.paid_at = datetime.utcnow()
    db.commit()
    db.refresh(detail)
    logger.info(f"Expense detail {detail_id} confirmed paid by user {actor_id}")
    return detail, True
