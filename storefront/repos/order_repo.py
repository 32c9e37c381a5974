# storefront/repos/order_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # no commit here, the caller owns the transaction
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(selectinload(OrderModel.items))
        ).scalar_one_or_none()

    def list_orders(self, user_id: int | None = None, limit: int | None = None) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars())

    def update_order_status(self, order: OrderModel, status: str) -> OrderModel:
        order.status = status
        self.db.flush()
        return order

    def count_by_status(self) -> dict[str, int]:
        rows = self.db.execute(
            select(OrderModel.status, func.count(OrderModel.id)).group_by(OrderModel.status)
        ).all()
        return {status: count for status, count in rows}

    def count_customers(self) -> int:
        return self.db.execute(select(func.count(func.distinct(OrderModel.user_id)))).scalar_one()

    def items_for_status(self, status: str) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel)
                .join(OrderModel, OrderItemModel.order_id == OrderModel.id)
                .where(OrderModel.status == status)
            ).scalars()
        )

    def orders_since(self, status: str, since) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.status == status, OrderModel.created_at >= since)
                .order_by(OrderModel.created_at)
            ).scalars()
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
