from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ledgerbooks.auth import CurrentUser, get_current_user
from ledgerbooks.db import get_db
from ledgerbooks.exceptions import DuplicateVatReturnError, TaxAuthorityError
from ledgerbooks.models import VatReturn
from ledgerbooks.vat import schemas
from ledgerbooks.vat.service import (
    get_obligation,
    get_vat_return,
    list_obligations,
    submit_vat_return,
    sync_obligations,
)

router = APIRouter(prefix="/api/vat", tags=["vat"])


@router.get("/return", response_model=schemas.VatReturnPreview)
def preview_vat_return(
    date_from: date = Query(...),
    date_to: date = Query(...),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        boxes = get_vat_return(db, current_user.id, date_from, date_to)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return schemas.VatReturnPreview(date_from=date_from, date_to=date_to, **boxes.as_dict())


@router.get("/obligations", response_model=List[schemas.VatObligationResponse])
def list_vat_obligations(
    status: Optional[str] = Query(None, pattern="^[OF]$"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return list_obligations(db, current_user.id, status)


@router.post("/obligations/sync", response_model=List[schemas.VatObligationResponse])
def sync_vat_obligations(
    payload: schemas.ObligationSyncRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        obligations = sync_obligations(
            db, current_user.id, payload.vrn, payload.date_from, payload.date_to, payload.status
        )
    except TaxAuthorityError as exc:
        db.rollback()
        raise HTTPException(status_code=502, detail=str(exc))
    db.commit()
    return obligations


@router.get("/returns", response_model=List[schemas.VatReturnResponse])
def list_vat_returns(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return (
        db.query(VatReturn)
        .filter(VatReturn.user_id == current_user.id)
        .order_by(VatReturn.submitted_at.desc())
        .all()
    )


@router.post("/returns", response_model=schemas.VatReturnResponse, status_code=status.HTTP_201_CREATED)
def submit_return(
    payload: schemas.VatSubmitRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    if get_obligation(db, current_user.id, payload.period_key) is None:
        raise HTTPException(status_code=404, detail="VAT obligation not found.")
    try:
        vat_return, _ = submit_vat_return(db, current_user.id, payload.vrn, payload.period_key)
    except DuplicateVatReturnError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    except TaxAuthorityError as exc:
        db.rollback()
        raise HTTPException(status_code=502, detail=str(exc))
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(vat_return)
    return vat_return
