from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ledgerbooks.auth import CurrentUser, get_current_user
from ledgerbooks.db import get_db
from ledgerbooks.exceptions import InvalidStatusTransitionError, JournalAlreadyReversedError
from ledgerbooks.models import Bill
from ledgerbooks.purchasing import schemas
from ledgerbooks.purchasing.service import (
    change_bill_status,
    create_bill,
    delete_bill,
    get_bill,
    list_bills,
)

router = APIRouter(prefix="/api/bills", tags=["bills"])


def _to_response(bill: Bill) -> schemas.BillResponse:
    response = schemas.BillResponse.model_validate(bill)
    response.supplier_name = bill.supplier.name if bill.supplier else None
    return response


def _load(db: Session, user_id: str, bill_id: int) -> Bill:
    bill = get_bill(db, user_id, bill_id)
    if not bill:
        raise HTTPException(status_code=404, detail="Bill not found.")
    return bill


@router.post("", response_model=schemas.BillResponse, status_code=status.HTTP_201_CREATED)
def create_bill_endpoint(
    payload: schemas.BillCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        bill = create_bill(db, current_user.id, payload.model_dump())
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    return _to_response(_load(db, current_user.id, bill.id))


@router.get("", response_model=List[schemas.BillResponse])
def list_bills_endpoint(
    status: Optional[schemas.BillStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return [_to_response(bill) for bill in list_bills(db, current_user.id, status, date_from, date_to)]


@router.get("/{bill_id}", response_model=schemas.BillResponse)
def get_bill_endpoint(bill_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return _to_response(_load(db, current_user.id, bill_id))


@router.post("/{bill_id}/status", response_model=schemas.BillResponse)
def update_bill_status(
    bill_id: int,
    payload: schemas.BillStatusUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    bill = _load(db, current_user.id, bill_id)
    try:
        change_bill_status(db, current_user.id, bill, payload.status, payload.posting_date)
    except (InvalidStatusTransitionError, JournalAlreadyReversedError) as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    return _to_response(_load(db, current_user.id, bill_id))


@router.delete("/{bill_id}", response_model=dict)
def delete_bill_endpoint(bill_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    bill = _load(db, current_user.id, bill_id)
    try:
        delete_bill(db, bill)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    db.commit()
    return {"status": "ok"}
