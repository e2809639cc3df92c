"""
Expense management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from tripsettle.db.session import get_db
from tripsettle.models.user import User
from tripsettle.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseReportResponse, ExpenseDetailResponse
from tripsettle.services.expense_service import (
    create_expense_with_details, get_trip_expenses, expense_to_response, expense_to_report, detail_to_response
)
from tripsettle.services.payment_service import confirm_detail_paid
from tripsettle.api.dependencies import get_current_user
from tripsettle.api.routes.trips import check_trip_access

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("/{trip_id}", response_model=List[ExpenseResponse])
async def list_expenses(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List a trip's expenses, oldest first."""
    check_trip_access(trip_id, current_user.id, db)
    return [expense_to_response(e) for e in get_trip_expenses(trip_id, db)]


@router.post("/{trip_id}", response_model=ExpenseReportResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    trip_id: int,
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an expense and its normalized split lines."""
    trip = check_trip_access(trip_id, current_user.id, db)
    expense = create_expense_with_details(trip, expense_data, current_user.id, db)
    return expense_to_report(expense)


@router.get("/{trip_id}/report", response_model=List[ExpenseReportResponse])
async def get_expense_report(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Expenses with per-participant lines and their paid state."""
    check_trip_access(trip_id, current_user.id, db)
    return [expense_to_report(e) for e in get_trip_expenses(trip_id, db)]


@router.put("/{trip_id}/details/{detail_id}/pay", response_model=ExpenseDetailResponse)
async def confirm_detail_payment(
    trip_id: int,
    detail_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Confirm a single expense line as paid."""
    check_trip_access(trip_id, current_user.id, db)
    detail, _ = confirm_detail_paid(trip_id, detail_id, current_user.id, db)
    return detail_to_response(detail)
