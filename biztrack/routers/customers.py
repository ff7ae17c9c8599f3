# biztrack/routers/customers.py

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from biztrack.database import get_db
from biztrack.core.rate_limiter import limiter
from biztrack.models.customers import Customer
from biztrack.models.sales import Sale
from biztrack.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
)

router = APIRouter(
    prefix="/billing/customers",
    tags=["Customers"],
)


def _get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()

    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )

    return customer


def _ensure_email_free(db: Session, email: str, exclude_id: int | None = None):
    query = db.query(Customer).filter(Customer.email == email)
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)

    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Customer with this email already exists",
        )


@router.get("", response_model=list[CustomerResponse])
def list_customers(
    search: str | None = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(Customer)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Customer.name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.phone.ilike(pattern),
            )
        )

    return query.order_by(Customer.name.asc()).all()


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
):
    return _get_customer_or_404(db, customer_id)


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("30/minute")
def create_customer(
    request: Request,
    customer_data: CustomerCreate,
    db: Session = Depends(get_db),
):
    email = customer_data.email.strip().lower()

    _ensure_email_free(db, email)

    customer = Customer(
        name=customer_data.name.strip(),
        email=email,
        phone=customer_data.phone.strip(),
        address=customer_data.address,
        city=customer_data.city,
        notes=customer_data.notes,
    )

    try:
        db.add(customer)
        db.commit()
        db.refresh(customer)
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Unable to create customer")

    return customer


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    customer_data: CustomerUpdate,
    db: Session = Depends(get_db),
):
    customer = _get_customer_or_404(db, customer_id)

    if customer_data.email is not None:
        email = customer_data.email.strip().lower()
        _ensure_email_free(db, email, exclude_id=customer.id)
        customer.email = email

    for field in ("name", "phone", "address", "city", "notes"):
        value = getattr(customer_data, field)
        if value is not None:
            setattr(customer, field, value)

    db.commit()
    db.refresh(customer)

    return customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
):
    customer = _get_customer_or_404(db, customer_id)

    # Customers with sales history are kept for the invoices that name them
    sales_count = db.query(Sale).filter(Sale.customer_id == customer.id).count()
    if sales_count > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot delete customer. They have {sales_count} associated sale(s).",
        )

    db.delete(customer)
    db.commit()

    return None
