# storefront/api/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_notifier, require_admin
from storefront.data.database import get_db
from storefront.domain.errors import NotFoundError, StorageFailureError
from storefront.domain.schemas import (
    AdminStatsOut,
    BulkDeleteIn,
    BulkDeleteOut,
    BulkStockIn,
    OrderOut,
    OrderStatusIn,
    Principal,
    ProductOut,
    RestockIn,
    RevenuePointOut,
    UserPageOut,
    UserRead,
    UserRoleIn,
)
from storefront.services.admin_service import AdminService
from storefront.services.notification_service import EventNotifier
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService
from storefront.services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=AdminStatsOut)
def get_stats(db: Session = Depends(get_db)):
    return AdminService(db).get_stats()


@router.get("/recent-orders", response_model=List[OrderOut])
def recent_orders(
    limit: int = Query(5, gt=0, le=50),
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    return OrderService(db, notifier).recent_orders(limit)


@router.get("/orders", response_model=List[OrderOut])
def all_orders(
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    return OrderService(db, notifier).list_orders(principal)


@router.put("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    svc = OrderService(db, notifier)
    try:
        return svc.set_status(order_id, payload.status, principal)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/products/bulk-stock", response_model=List[ProductOut])
def bulk_update_stock(
    payload: BulkStockIn,
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    try:
        return ProductService(db, notifier).bulk_update_stock(payload.updates)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/products/{product_id}/restock", response_model=ProductOut)
def restock_product(
    product_id: int,
    payload: RestockIn,
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    try:
        return ProductService(db, notifier).restock(product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/products/bulk-delete", response_model=BulkDeleteOut)
def bulk_delete_products(
    payload: BulkDeleteIn,
    db: Session = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
):
    deleted = ProductService(db, notifier).bulk_delete(payload.product_ids)
    return {"deleted_count": deleted}


@router.get("/revenue-chart", response_model=List[RevenuePointOut])
def revenue_chart(days: int = Query(7, gt=0, le=365), db: Session = Depends(get_db)):
    return AdminService(db).revenue_chart(days)


# users

@router.get("/users", response_model=UserPageOut)
def list_users(
    page: int = Query(1, gt=0),
    limit: int = Query(20, gt=0, le=100),
    db: Session = Depends(get_db),
):
    return UserService(db).list_users(page, limit)


@router.put("/users/{user_id}/role", response_model=UserRead)
def update_user_role(user_id: int, payload: UserRoleIn, db: Session = Depends(get_db)):
    try:
        return UserService(db).set_role(user_id, payload.role)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        UserService(db).delete_user(user_id, principal)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "User deleted successfully"}
