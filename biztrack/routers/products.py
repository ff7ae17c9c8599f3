# biztrack/routers/products.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from biztrack.database import get_db
from biztrack.models.products import Product
from biztrack.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


def _ensure_barcode_free(db: Session, barcode: str | None, exclude_id: int | None = None):
    if not barcode:
        return

    query = db.query(Product).filter(Product.barcode == barcode)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)

    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product with this barcode already exists",
        )


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
):
    _ensure_barcode_free(db, product_data.barcode)

    # Business rule: selling price must not be lower than cost price
    if product_data.selling_price < product_data.cost_price:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Selling price cannot be lower than cost price",
        )

    product = Product(
        name=product_data.name,
        barcode=product_data.barcode or None,
        category=product_data.category or "Uncategorized",
        cost_price=product_data.cost_price,
        selling_price=product_data.selling_price,
    )

    db.add(product)
    db.commit()
    db.refresh(product)

    return product


@router.get("", response_model=list[ProductResponse])
def list_products(
    db: Session = Depends(get_db),
):
    return db.query(Product).order_by(Product.id.desc()).all()


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
):
    product = db.query(Product).filter(Product.id == product_id).first()

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )

    new_cost_price = product_data.cost_price if product_data.cost_price is not None else product.cost_price
    new_selling_price = product_data.selling_price if product_data.selling_price is not None else product.selling_price

    if new_selling_price < new_cost_price:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Selling price cannot be lower than cost price",
        )

    if product_data.barcode is not None:
        _ensure_barcode_free(db, product_data.barcode, exclude_id=product.id)
        product.barcode = product_data.barcode or None

    if product_data.name is not None:
        product.name = product_data.name

    if product_data.category is not None:
        product.category = product_data.category

    if product_data.cost_price is not None:
        product.cost_price = product_data.cost_price

    if product_data.selling_price is not None:
        product.selling_price = product_data.selling_price

    db.commit()
    db.refresh(product)

    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
):
    product = db.query(Product).filter(Product.id == product_id).first()

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )

    db.delete(product)
    db.commit()

    return None
