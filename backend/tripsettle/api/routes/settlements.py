"""
Settlement routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from tripsettle.db.session import get_db
from tripsettle.models.user import User
from tripsettle.schemas.settlement import SettlementResponse, BalanceResponse, MarkPaidRequest, MarkPaidResponse
from tripsettle.services.settlement_service import (
    build_trip_settlement, settlement_to_response, get_user_names, payment_to_response
)
from tripsettle.services.payment_service import mark_transaction_paid
from tripsettle.api.dependencies import get_current_user
from tripsettle.api.routes.trips import check_trip_access

router = APIRouter(prefix="/settlement", tags=["settlement"])


@router.get("/{trip_id}", response_model=SettlementResponse)
async def get_settlement(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Balances plus paid and outstanding transfers for a trip."""
    trip = check_trip_access(trip_id, current_user.id, db)
    return settlement_to_response(build_trip_settlement(trip, db), db)


@router.get("/{trip_id}/balances", response_model=List[BalanceResponse])
async def get_balances(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Per-member paid, owed and net amounts."""
    trip = check_trip_access(trip_id, current_user.id, db)
    return settlement_to_response(build_trip_settlement(trip, db), db).balances


@router.put("/{trip_id}/pay", response_model=MarkPaidResponse)
async def pay_transaction(
    trip_id: int,
    request: MarkPaidRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a settlement transfer as paid. Only the debtor may do this."""
    check_trip_access(trip_id, current_user.id, db)

    payment, created = mark_transaction_paid(
        trip_id,
        request.from_user_id,
        request.to_user_id,
        request.amount,
        current_user.id,
        db
    )
    names = get_user_names([payment.from_user_id, payment.to_user_id], db)
    return MarkPaidResponse(
        message="Payment marked as paid" if created else "Payment was already marked as paid",
        created=created,
        transaction=payment_to_response(payment, names)
    )
