# storefront/repos/cart_repo.py
from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        # always the current version, never the one cached in the session
        return self.db.execute(
            select(CartModel)
            .where(CartModel.user_id == user_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def delete_cart(self, cart: CartModel) -> None:
        self.db.delete(cart)
        self.db.flush()

    def get_cart_items(self, cart_id: int) -> list[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
            ).scalars()
        )

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, cart_id: int, product_id: int) -> int:
        res = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        )
        return res.rowcount

    def update_cart_version(self, cart_id: int, old_version: int, new_data: dict) -> int:
        # UPDATE carts SET version = old + 1 WHERE id = :id AND version = :old
        res = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
