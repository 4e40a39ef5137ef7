from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledgerbooks.auth import CurrentUser, get_current_user
from ledgerbooks.chart_of_accounts import schemas
from ledgerbooks.chart_of_accounts.service import account_in_use, seed_defaults
from ledgerbooks.db import get_db
from ledgerbooks.models import Account, TaxCode

router = APIRouter(prefix="/api", tags=["chart-of-accounts"])


def _get_account(db: Session, user_id: str, account_id: int) -> Account:
    account = db.query(Account).filter(Account.user_id == user_id, Account.id == account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found.")
    return account


@router.get("/chart-of-accounts", response_model=List[schemas.ChartAccountResponse])
def list_chart_of_accounts(
    account_type: Optional[schemas.AccountType] = None,
    active: Optional[bool] = None,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    query = db.query(Account).filter(Account.user_id == current_user.id)
    if account_type:
        query = query.filter(Account.account_type == account_type)
    if active is not None:
        query = query.filter(Account.is_active.is_(active))
    if q:
        like = f"%{q}%"
        query = query.filter((Account.name.ilike(like)) | (Account.code.ilike(like)))
    return query.order_by(Account.code.asc(), Account.name.asc()).all()


@router.post("/chart-of-accounts", response_model=schemas.ChartAccountResponse, status_code=status.HTTP_201_CREATED)
def create_chart_account(
    payload: schemas.ChartAccountCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    account = Account(user_id=current_user.id, **payload.model_dump())
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Account code already exists.") from None
    db.refresh(account)
    return account


@router.post("/chart-of-accounts/seed-defaults", response_model=schemas.SeedDefaultsResponse)
def seed_default_chart(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    accounts_created, tax_codes_created = seed_defaults(db, current_user.id)
    db.commit()
    return schemas.SeedDefaultsResponse(accounts_created=accounts_created, tax_codes_created=tax_codes_created)


@router.get("/chart-of-accounts/{account_id}", response_model=schemas.ChartAccountResponse)
def get_chart_account(account_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return _get_account(db, current_user.id, account_id)


@router.put("/chart-of-accounts/{account_id}", response_model=schemas.ChartAccountResponse)
@router.patch("/chart-of-accounts/{account_id}", response_model=schemas.ChartAccountResponse)
def update_chart_account(
    account_id: int,
    payload: schemas.ChartAccountUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    account = _get_account(db, current_user.id, account_id)
    data = payload.model_dump(exclude_unset=True)
    new_type = data.pop("account_type", None)
    if new_type is not None and new_type != account.account_type:
        raise HTTPException(status_code=409, detail="Account type cannot be changed once set.")

    for key, value in data.items():
        setattr(account, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Account code already exists.") from None
    db.refresh(account)
    return account


@router.delete("/chart-of-accounts/{account_id}", response_model=dict)
def delete_chart_account(account_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    account = _get_account(db, current_user.id, account_id)
    if account_in_use(db, account.id):
        raise HTTPException(status_code=409, detail="Cannot delete account that is in use.")

    try:
        db.delete(account)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Cannot delete account that is in use.") from None

    return {"status": "ok"}


@router.get("/tax-codes", response_model=List[schemas.TaxCodeResponse])
def list_tax_codes(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return (
        db.query(TaxCode)
        .filter(TaxCode.user_id == current_user.id, TaxCode.is_active.is_(True))
        .order_by(TaxCode.rate.desc(), TaxCode.name.asc())
        .all()
    )


@router.post("/tax-codes", response_model=schemas.TaxCodeResponse, status_code=status.HTTP_201_CREATED)
def create_tax_code(
    payload: schemas.TaxCodeCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    tax_code = TaxCode(user_id=current_user.id, name=payload.name, rate=payload.rate)
    db.add(tax_code)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Tax code already exists.") from None
    db.refresh(tax_code)
    return tax_code
