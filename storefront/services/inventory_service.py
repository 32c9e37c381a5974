# storefront/services/inventory_service.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import InsufficientStockError, InvalidProductError, NotFoundError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryLedger:
    """
    Owns product stock.

    reserve() runs inside the caller's transaction and is never committed here:
    the order transaction commits or rolls back the decrement together with
    the order rows.
    """

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def check_available(product: ProductModel, quantity: int) -> None:
        """Soft check against the stock we just read (cart add/update)."""
        if quantity > product.stock:
            raise InsufficientStockError(product.name, product.stock, quantity, product.id)

    def reserve(self, product_id: int, quantity: int) -> int:
        """
        Atomic check-and-decrement, returns the remaining stock.

        UPDATE products SET stock = stock - :q WHERE id = :id AND stock >= :q
        takes the row lock, so two concurrent reservations for the last unit
        serialize and the second one matches no row.
        """
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        res = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )

        product = self._reload(product_id)

        if res.rowcount == 0:
            if product is None:
                raise InvalidProductError(product_id)
            logger.info(
                f"Reservation rejected for product {product_id}: "
                f"available {product.stock}, requested {quantity}"
            )
            raise InsufficientStockError(product.name, product.stock, quantity, product_id)

        logger.info(f"Reserved {quantity} of product {product_id}, remaining {product.stock}")
        return product.stock

    def restock(self, product_id: int, quantity: int) -> ProductModel:
        """Additive increment, safe next to concurrent reservations."""
        if quantity <= 0:
            raise ValueError("Invalid quantity")

        res = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=ProductModel.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount == 0:
            raise NotFoundError(f"Product {product_id} not found")

        return self._reload(product_id)

    def set_stock(self, product_id: int, stock: int) -> ProductModel:
        """Catalog management overwrite, not used by order placement."""
        if stock < 0:
            raise ValueError("Stock cannot be negative")

        product = self.db.get(ProductModel, product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")

        product.stock = stock
        self.db.flush()
        return product

    def _reload(self, product_id: int) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
