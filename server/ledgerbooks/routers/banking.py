from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ledgerbooks.auth import CurrentUser, get_current_user
from ledgerbooks.banking import schemas
from ledgerbooks.banking.importer import StatementRecord, parse_statement_csv
from ledgerbooks.banking.service import (
    commit_match,
    get_transaction,
    import_transactions,
    list_transactions,
    suggestions_for,
)
from ledgerbooks.db import get_db
from ledgerbooks.exceptions import AlreadyReconciledError
from ledgerbooks.models import BankTransaction

router = APIRouter(prefix="/api/bank-transactions", tags=["banking"])


def _load(db: Session, user_id: str, transaction_id: int) -> BankTransaction:
    transaction = get_transaction(db, user_id, transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Bank transaction not found.")
    return transaction


def _imported(transactions: List[BankTransaction]) -> schemas.BankImportResponse:
    return schemas.BankImportResponse(
        imported=len(transactions),
        transactions=[schemas.BankTransactionResponse.model_validate(txn) for txn in transactions],
    )


@router.post("/import", response_model=schemas.BankImportResponse, status_code=status.HTTP_201_CREATED)
def import_bank_transactions(
    payload: schemas.BankImportRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    records = [
        StatementRecord(date=row.date, description=row.description, amount=row.amount, reference=row.reference)
        for row in payload.transactions
    ]
    transactions = import_transactions(db, current_user.id, records)
    db.commit()
    return _imported(transactions)


@router.post("/import-csv", response_model=schemas.BankImportResponse, status_code=status.HTTP_201_CREATED)
def import_bank_statement_csv(
    payload: schemas.BankCsvImportRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    records = parse_statement_csv(payload.csv_data)
    if not records:
        raise HTTPException(status_code=400, detail="No valid transactions found in CSV data.")
    transactions = import_transactions(db, current_user.id, records)
    db.commit()
    return _imported(transactions)


@router.get("", response_model=List[schemas.BankTransactionResponse])
def list_bank_transactions(
    reconciled: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return list_transactions(db, current_user.id, reconciled)


@router.get("/{transaction_id}/suggestions", response_model=List[schemas.MatchSuggestion])
def match_suggestions(
    transaction_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    transaction = _load(db, current_user.id, transaction_id)
    return suggestions_for(db, current_user.id, transaction)


@router.post("/{transaction_id}/match", response_model=schemas.BankTransactionResponse)
def match_bank_transaction(
    transaction_id: int,
    payload: schemas.MatchCommit,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    transaction = _load(db, current_user.id, transaction_id)
    try:
        transaction = commit_match(db, current_user.id, transaction, payload.type, payload.id)
    except AlreadyReconciledError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(transaction)
    return transaction
