# routers/v1/customers.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import caller_id, require_engineer
from errors import NotFound
from models import Customer, CustomerCompany
from schemas import CustomerCreate, CustomerOut, CustomerUpdate, MessageOut
from services import registry

router = APIRouter(prefix="/customers", tags=["customers"])


def _get_own_or_404(db: Session, customer_id: int, engineer_id: int) -> Customer:
    c = (
        db.query(Customer)
          .filter(Customer.id == customer_id, Customer.engineer_id == engineer_id)
          .first()
    )
    if not c:
        raise NotFound("Customer not found")
    return c


def _check_company(db: Session, company_id) -> None:
    if company_id is not None and not db.get(CustomerCompany, company_id):
        raise NotFound("Customer company not found")


@router.get("", response_model=List[CustomerOut])
def list_my_customers(claims: dict = Depends(require_engineer), db: Session = Depends(get_db)):
    return (
        db.query(Customer)
          .filter(Customer.engineer_id == caller_id(claims), Customer.is_active.is_(True))
          .order_by(Customer.created_at.desc(), Customer.id.desc())
          .all()
    )


@router.get("/{customer_id}", response_model=CustomerOut)
def get_my_customer(customer_id: int, claims: dict = Depends(require_engineer), db: Session = Depends(get_db)):
    return _get_own_or_404(db, customer_id, caller_id(claims))


@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    claims: dict = Depends(require_engineer),
    db: Session = Depends(get_db),
):
    _check_company(db, payload.customer_company_id)
    c = Customer(**payload.model_dump(), engineer_id=caller_id(claims), is_active=True)
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    claims: dict = Depends(require_engineer),
    db: Session = Depends(get_db),
):
    c = _get_own_or_404(db, customer_id, caller_id(claims))
    data = payload.model_dump(exclude_unset=True)
    registry.reject_null_required(Customer, data)
    if "customer_company_id" in data:
        _check_company(db, data["customer_company_id"])
    for k, v in data.items():
        setattr(c, k, v)
    db.commit()
    db.refresh(c)
    return c


@router.delete("/{customer_id}", response_model=MessageOut)
def delete_customer(customer_id: int, claims: dict = Depends(require_engineer), db: Session = Depends(get_db)):
    c = _get_own_or_404(db, customer_id, caller_id(claims))
    registry.soft_delete(db, c)
    return {"message": "Customer deleted successfully"}
