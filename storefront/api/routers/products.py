# storefront/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_notifier, require_admin
from storefront.data.database import get_db
from storefront.domain.errors import NotFoundError
from storefront.domain.schemas import ProductIn, ProductOut, ProductUpdate
from storefront.services.notification_service import EventNotifier
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db), notifier: EventNotifier = Depends(get_notifier)):
    return ProductService(db, notifier).list_products()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    try:
        return ProductService(db, notifier).get_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/", response_model=ProductOut, status_code=201, dependencies=[Depends(require_admin)])
def create_product(
    payload: ProductIn,
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    return ProductService(db, notifier).create_product(payload)


@router.put("/{product_id}", response_model=ProductOut, dependencies=[Depends(require_admin)])
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    try:
        return ProductService(db, notifier).update_product(product_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{product_id}", dependencies=[Depends(require_admin)])
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    try:
        ProductService(db, notifier).delete_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Deleted"}
