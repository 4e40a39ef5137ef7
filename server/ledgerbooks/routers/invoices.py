from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledgerbooks.auth import CurrentUser, get_current_user
from ledgerbooks.db import get_db
from ledgerbooks.exceptions import InvalidStatusTransitionError, JournalAlreadyReversedError
from ledgerbooks.models import Invoice
from ledgerbooks.sales import schemas
from ledgerbooks.sales.service import (
    change_invoice_status,
    create_invoice,
    delete_invoice,
    get_invoice,
    list_invoices,
)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _to_response(invoice: Invoice) -> schemas.InvoiceResponse:
    response = schemas.InvoiceResponse.model_validate(invoice)
    response.customer_name = invoice.customer.name if invoice.customer else None
    return response


def _load(db: Session, user_id: str, invoice_id: int) -> Invoice:
    invoice = get_invoice(db, user_id, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found.")
    return invoice


@router.post("", response_model=schemas.InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice_endpoint(
    payload: schemas.InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        invoice = create_invoice(db, current_user.id, payload.model_dump())
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Invoice number already exists.") from None
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    return _to_response(_load(db, current_user.id, invoice.id))


@router.get("", response_model=List[schemas.InvoiceResponse])
def list_invoices_endpoint(
    status: Optional[schemas.InvoiceStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return [_to_response(invoice) for invoice in list_invoices(db, current_user.id, status, date_from, date_to)]


@router.get("/{invoice_id}", response_model=schemas.InvoiceResponse)
def get_invoice_endpoint(invoice_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return _to_response(_load(db, current_user.id, invoice_id))


@router.post("/{invoice_id}/status", response_model=schemas.InvoiceResponse)
def update_invoice_status(
    invoice_id: int,
    payload: schemas.InvoiceStatusUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    invoice = _load(db, current_user.id, invoice_id)
    try:
        change_invoice_status(db, current_user.id, invoice, payload.status, payload.posting_date)
    except (InvalidStatusTransitionError, JournalAlreadyReversedError) as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    return _to_response(_load(db, current_user.id, invoice_id))


@router.delete("/{invoice_id}", response_model=dict)
def delete_invoice_endpoint(invoice_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    invoice = _load(db, current_user.id, invoice_id)
    try:
        delete_invoice(db, invoice)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    db.commit()
    return {"status": "ok"}
