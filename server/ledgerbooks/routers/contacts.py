from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ledgerbooks.auth import CurrentUser, get_current_user
from ledgerbooks.contacts import schemas
from ledgerbooks.db import get_db
from ledgerbooks.models import Bill, Customer, Invoice, Supplier

router = APIRouter(prefix="/api", tags=["contacts"])


def _get_customer(db: Session, user_id: str, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.user_id == user_id, Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found.")
    return customer


def _get_supplier(db: Session, user_id: str, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.user_id == user_id, Supplier.id == supplier_id).first()
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found.")
    return supplier


@router.get("/customers", response_model=List[schemas.ContactResponse])
def list_customers(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    query = db.query(Customer).filter(Customer.user_id == current_user.id)
    if search:
        query = query.filter(Customer.name.ilike(f"%{search}%"))
    return query.order_by(Customer.name).all()


@router.post("/customers", response_model=schemas.ContactResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: schemas.ContactCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    customer = Customer(user_id=current_user.id, **payload.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@router.get("/customers/{customer_id}", response_model=schemas.ContactResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return _get_customer(db, current_user.id, customer_id)


@router.put("/customers/{customer_id}", response_model=schemas.ContactResponse)
def update_customer(
    customer_id: int,
    payload: schemas.ContactUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    customer = _get_customer(db, current_user.id, customer_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(customer, key, value)
    db.commit()
    db.refresh(customer)
    return customer


@router.delete("/customers/{customer_id}", response_model=dict)
def delete_customer(customer_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    customer = _get_customer(db, current_user.id, customer_id)
    if db.query(Invoice.id).filter(Invoice.customer_id == customer.id).first() is not None:
        raise HTTPException(status_code=409, detail="Cannot delete customer because it has invoices.")
    db.delete(customer)
    db.commit()
    return {"status": "ok"}


@router.get("/suppliers", response_model=List[schemas.ContactResponse])
def list_suppliers(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    query = db.query(Supplier).filter(Supplier.user_id == current_user.id)
    if search:
        query = query.filter(Supplier.name.ilike(f"%{search}%"))
    return query.order_by(Supplier.name).all()


@router.post("/suppliers", response_model=schemas.ContactResponse, status_code=status.HTTP_201_CREATED)
def create_supplier(
    payload: schemas.ContactCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    supplier = Supplier(user_id=current_user.id, **payload.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


@router.get("/suppliers/{supplier_id}", response_model=schemas.ContactResponse)
def get_supplier(supplier_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return _get_supplier(db, current_user.id, supplier_id)


@router.put("/suppliers/{supplier_id}", response_model=schemas.ContactResponse)
def update_supplier(
    supplier_id: int,
    payload: schemas.ContactUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    supplier = _get_supplier(db, current_user.id, supplier_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(supplier, key, value)
    db.commit()
    db.refresh(supplier)
    return supplier


@router.delete("/suppliers/{supplier_id}", response_model=dict)
def delete_supplier(supplier_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    supplier = _get_supplier(db, current_user.id, supplier_id)
    if db.query(Bill.id).filter(Bill.supplier_id == supplier.id).first() is not None:
        raise HTTPException(status_code=409, detail="Cannot delete supplier because it has bills.")
    db.delete(supplier)
    db.commit()
    return {"status": "ok"}
