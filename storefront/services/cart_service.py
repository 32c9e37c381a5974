from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import ConcurrencyConflictError, NotFoundError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.inventory_service import InventoryLedger
from storefront.services.pricing import effective_sell_price
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

class CartService:
    """
    Cart use cases, one cart per user.
    commands (add, update, remove, clear) modify state
    query (get) is read only

    The stock check here is a soft one, order placement checks again.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.product_repo = ProductRepo(db)

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)

        if not cart:
            return {"user_id": user_id, "items": [], "total": Decimal("0.00")}

        items = self.repo.get_cart_items(cart.id)
        products = self.product_repo.get_products(i.product_id for i in items)

        lines = []
        total = Decimal("0.00")
        for i in items:
            product = products.get(i.product_id)
            # product deleted meanwhile, shown without price until the order rejects it
            price = effective_sell_price(product) if product else None
            if price is not None:
                total += price * i.quantity
            lines.append(
                {
                    "product_id": i.product_id,
                    "name": product.name if product else None,
                    "quantity": i.quantity,
                    "price": price,
                    "stock": product.stock if product else None,
                }
            )

        return {"user_id": user_id, "items": lines, "total": total}

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        product = self.product_repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        # fast feedback only, order placement does the real check
        InventoryLedger.check_available(product, quantity)

        cart = self.repo.get_cart_by_user(user_id) or self._create_cart(user_id)

        existing_item = self.repo.get_cart_item(cart.id, product_id)

        if existing_item:
            new_quantity = existing_item.quantity + quantity
            InventoryLedger.check_available(product, new_quantity)
            logger.info(
                f"Product {product_id} already in cart {cart.id}, quantity "
                f"{existing_item.quantity} -> {new_quantity}"
            )
            existing_item.quantity = new_quantity
        else:
            logger.info(f"Adding product {product_id} to cart {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
            )

        self._bump_version(cart)
        return self.get_cart(user_id)

    def update_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        product = self.product_repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        InventoryLedger.check_available(product, quantity)

        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise NotFoundError("Item not in cart")

        item.quantity = quantity
        self._bump_version(cart)

        logger.info(f"Cart {cart.id}: product {product_id} quantity set to {quantity}")
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, product_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        logger.info(f"Removing product {product_id} from cart {cart.id}")
        self.repo.delete_cart_item(cart.id, product_id)
        self._bump_version(cart)

        return self.get_cart(user_id)

    def clear_cart(self, user_id: int) -> None:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            return

        self.repo.delete_cart(cart)
        self.repo.commit()
        logger.info(f"Cart {cart.id} of user {user_id} cleared")

    def _create_cart(self, user_id: int) -> CartModel:
        try:
            cart = self.repo.create_cart(CartModel(user_id=user_id, version=1))
        except IntegrityError:
            # a concurrent first add created it, carts.user_id is unique
            self.repo.rollback()
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                raise ConcurrencyConflictError(
                    "Concurrency conflict - the cart was modified by another request"
                )
            logger.info(f"Cart of user {user_id} created concurrently, using cart {cart.id}")
            return cart

        logger.info(f"Created cart {cart.id} for user {user_id}")
        return cart

    def _bump_version(self, cart: CartModel) -> None:
        # optimistic locking
        # UPDATE carts SET version = 2 WHERE id = 1 AND version = 1
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"version": cart.version + 1},
        )

        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflictError(
                "Concurrency conflict - the cart was modified by another request"
            )

        self.repo.commit()
