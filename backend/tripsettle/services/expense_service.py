"""
Expense service for expense-related business logic.
"""
import logging
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from typing import List
from tripsettle.core.exceptions import InvalidExpenseInput, TripStateError
from tripsettle.core.money import from_minor, to_minor
from tripsettle.models.expense import Expense, ExpenseDetail
from tripsettle.models.settlement import SettlementPayment
from tripsettle.models.trip import Trip
from tripsettle.schemas.expense import (
    ExpenseCreate, CustomSplit, ExpenseResponse, ExpenseReportResponse, ExpenseDetailResponse
)
from tripsettle.services.split_service import normalize_expense

logger = logging.getLogger(__name__)


def create_expense_with_details(trip: Trip, expense_data: ExpenseCreate, actor_id: int, db: Session) -> Expense:
    """
    Validate, normalize and store an expense with one detail line per participant.
    Nothing is written if any check fails.
    """
    if trip.is_complete:
        raise TripStateError("Trip is complete; no new expenses can be added")

    roster = set(trip.participant_ids)
    if expense_data.payer_id not in roster:
        raise InvalidExpenseInput("Payer is not a participant of this trip", details={"user_id": expense_data.payer_id})
    outsiders = [uid for uid in expense_data.participant_ids if uid not in roster]
    if outsiders:
        raise InvalidExpenseInput("Participants are not members of this trip", details={"user_ids": outsiders})

    lines = normalize_expense(expense_data)

    fees = None
    if isinstance(expense_data.split, CustomSplit) and expense_data.split.fees:
        fees = [
            {"label": fee.label, "amount": str(from_minor(to_minor(fee.amount)))}
            for fee in expense_data.split.fees
        ]

    expense = Expense(
        trip_id=trip.id,
        name=expense_data.name,
        description=expense_data.description,
        amount=from_minor(to_minor(expense_data.amount)),
        payer_id=expense_data.payer_id,
        split_type=expense_data.split.split_type,
        additional_fees=fees,
        created_by=actor_id
    )
    db.add(expense)
    db.flush()

    for line in lines:
        db.add(ExpenseDetail(
            expense_id=expense.id,
            user_id=line.user_id,
            owed=from_minor(line.owed),
            item=line.item
        ))

    db.commit()
    db.refresh(expense)

    logger.info(
        f"Trip {trip.id}: expense {expense.id} '{expense.name}' of {expense.amount} "
        f"paid by user {expense.payer_id}, split {expense.split_type} across {len(lines)}"
    )
    return expense


def get_trip_expenses(trip_id: int, db: Session) -> List[Expense]:
    """Expenses of a trip with payer and detail lines loaded, oldest first."""
    return db.query(Expense).options(
        joinedload(Expense.payer),
        joinedload(Expense.details).joinedload(ExpenseDetail.user)
    ).filter(Expense.trip_id == trip_id).order_by(Expense.id).all()


def has_ledger_entries(trip_id: int, user_id: int, db: Session) -> bool:
    """True if the user appears in any expense or recorded payment of the trip."""
    paid = db.query(Expense.id).filter(Expense.trip_id == trip_id, Expense.payer_id == user_id).first()
    if paid:
        return True
    shared = db.query(ExpenseDetail.id).join(Expense).filter(
        Expense.trip_id == trip_id,
        ExpenseDetail.user_id == user_id
    ).first()
    if shared:
        return True
    settled = db.query(SettlementPayment.id).filter(
        SettlementPayment.trip_id == trip_id,
        or_(SettlementPayment.from_user_id == user_id, SettlementPayment.to_user_id == user_id)
    ).first()
    return settled is not None


def expense_to_response(expense: Expense) -> ExpenseResponse:
    return ExpenseResponse(
        id=expense.id,
        trip_id=expense.trip_id,
        name=expense.name,
        description=expense.description,
        amount=from_minor(to_minor(expense.amount)),
        payer_id=expense.payer_id,
        payer_name=expense.payer.name,
        split_type=expense.split_type,
        additional_fees=expense.additional_fees or [],
        participant_ids=[d.user_id for d in expense.details],
        created_by=expense.created_by,
        created_at=expense.created_at,
        updated_at=expense.updated_at
    )


def detail_to_response(detail: ExpenseDetail) -> ExpenseDetailResponse:
    return ExpenseDetailResponse(
        id=detail.id,
        expense_id=detail.expense_id,
        user_id=detail.user_id,
        user_name=detail.user.name,
        owed=from_minor(to_minor(detail.owed)),
        item=detail.item,
        is_paid=detail.is_paid,
        paid_at=detail.paid_at,
        created_at=detail.created_at,
        updated_at=detail.updated_at
    )


def expense_to_report(expense: Expense) -> ExpenseReportResponse:
    """Expense plus its detail lines, as shown in the trip report."""
    return ExpenseReportResponse(
        **expense_to_response(expense).model_dump(),
        details=[detail_to_response(d) for d in expense.details]
    )
