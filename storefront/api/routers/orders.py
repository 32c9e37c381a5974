# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_notifier, get_principal
from storefront.data.database import get_db
from storefront.domain.errors import InsufficientStockError, NotFoundError, StorageFailureError
from storefront.domain.schemas import OrderCreate, OrderOut, OrderStatusIn, Principal
from storefront.services.notification_service import EventNotifier
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session, notifier: EventNotifier):
    return OrderService(db, notifier)


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    """
    Places an order from the caller's cart.
    Notifications go out after commit and never affect the response.
    """
    svc = get_service(db, notifier)
    try:
        return svc.place_order(principal.user_id, payload.shipping_info)
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=e.to_detail())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/", response_model=List[OrderOut])
def list_orders(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    """
    Own orders, or every order with its line items for an admin.
    """
    return get_service(db, notifier).list_orders(principal)


# alias kept for the admin panel
router.add_api_route("/all", list_orders, methods=["GET"], response_model=List[OrderOut])


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    svc = get_service(db, notifier)
    try:
        return svc.get_order(order_id, principal)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{order_id}", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    svc = get_service(db, notifier)
    try:
        return svc.set_status(order_id, payload.status, principal)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))
