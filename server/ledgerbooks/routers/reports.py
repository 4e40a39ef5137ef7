from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ledgerbooks.auth import CurrentUser, get_current_user
from ledgerbooks.db import get_db
from ledgerbooks.reports import schemas
from ledgerbooks.reports.service import get_balance_sheet, get_profit_and_loss, get_trial_balance

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _check_range(date_from: Optional[date], date_to: Optional[date]) -> None:
    if date_from and date_to and date_from > date_to:
        raise HTTPException(status_code=400, detail="date_from must be on or before date_to.")


@router.get("/trial-balance", response_model=schemas.TrialBalanceResponse)
def trial_balance_report(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    _check_range(date_from, date_to)
    return get_trial_balance(db, current_user.id, date_from, date_to)


@router.get("/profit-and-loss", response_model=schemas.ProfitAndLossResponse)
def profit_and_loss_report(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    _check_range(date_from, date_to)
    return get_profit_and_loss(db, current_user.id, date_from, date_to)


@router.get("/balance-sheet", response_model=schemas.BalanceSheetResponse)
def balance_sheet_report(
    as_of: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return get_balance_sheet(db, current_user.id, as_of)
