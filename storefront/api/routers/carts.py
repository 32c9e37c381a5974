# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_principal
from storefront.data.database import get_db
from storefront.domain.errors import ConcurrencyConflictError, InsufficientStockError, NotFoundError
from storefront.domain.schemas import CartOut, ItemIn, Principal
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/", response_model=CartOut)
def get_cart(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.get_cart(principal.user_id)


@router.post("/", response_model=CartOut)
def add_item(
    payload: ItemIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.add_item(principal.user_id, payload.product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=e.to_detail())
    except ConcurrencyConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/", response_model=CartOut)
def update_item(
    payload: ItemIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.update_item(principal.user_id, payload.product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=e.to_detail())
    except ConcurrencyConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.remove_item(principal.user_id, product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConcurrencyConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/clear")
def clear_cart(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    svc = get_service(db)
    svc.clear_cart(principal.user_id)
    return {"message": "Cart cleared"}
