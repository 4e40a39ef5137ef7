from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ledgerbooks.accounting import schemas
from ledgerbooks.accounting.posting import JournalEntryInput, JournalLineInput
from ledgerbooks.accounting.service import create_journal, get_journal, list_journals, reverse_journal
from ledgerbooks.auth import CurrentUser, get_current_user
from ledgerbooks.db import get_db
from ledgerbooks.exceptions import JournalAlreadyReversedError

router = APIRouter(prefix="/api/journals", tags=["journals"])


@router.post("", response_model=schemas.JournalResponse, status_code=status.HTTP_201_CREATED)
def post_journal(
    payload: schemas.JournalCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    entry = JournalEntryInput(
        date=payload.date,
        reference=payload.reference,
        description=payload.description,
        source_type="manual",
        source_id=None,
        lines=[
            JournalLineInput(
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
            )
            for line in payload.lines
        ],
    )
    try:
        journal = create_journal(db, current_user.id, entry)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(journal)
    return journal


@router.get("", response_model=List[schemas.JournalResponse])
def list_journal_entries(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return list_journals(db, current_user.id, date_from, date_to, limit)


@router.get("/{journal_id}", response_model=schemas.JournalResponse)
def get_journal_entry(journal_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    journal = get_journal(db, current_user.id, journal_id)
    if not journal:
        raise HTTPException(status_code=404, detail="Journal not found.")
    return journal


@router.post("/{journal_id}/reverse", response_model=schemas.JournalResponse, status_code=status.HTTP_201_CREATED)
def reverse_journal_entry(
    journal_id: int,
    payload: Optional[schemas.JournalReverse] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    journal = get_journal(db, current_user.id, journal_id)
    if not journal:
        raise HTTPException(status_code=404, detail="Journal not found.")
    reversal_date = (payload.reversal_date if payload else None) or date.today()
    try:
        reversal = reverse_journal(db, current_user.id, journal, reversal_date)
    except JournalAlreadyReversedError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(reversal)
    return reversal
