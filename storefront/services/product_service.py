# storefront/services/product_service.py
from typing import List

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFoundError
from storefront.domain.schemas import ProductIn, ProductUpdate, StockLevelIn
from storefront.repos.product_repo import ProductRepo
from storefront.services.inventory_service import InventoryLedger
from storefront.services.notification_service import EventNotifier
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    """Catalog management. Stock changes go through the inventory ledger."""

    def __init__(self, db: Session, notifier: EventNotifier):
        self.repo = ProductRepo(db)
        self.ledger = InventoryLedger(db)
        self.notifier = notifier

    def list_products(self) -> List[ProductModel]:
        return self.repo.list_products()

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, payload: ProductIn) -> ProductModel:
        product = ProductModel(
            name=payload.name,
            description=payload.description,
            category=payload.category,
            price=payload.price,
            selling_price=payload.price,
            cost_price=payload.cost_price,
            stock=payload.stock,
        )
        self.repo.add_product(product)
        self.repo.commit()

        logger.info(f"Product {product.id} created: {product.name}")
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductModel:
        product = self.get_product(product_id)
        data = payload.model_dump(exclude_unset=True, exclude_none=True)

        stock = data.pop("stock", None)
        if "selling_price" in data:
            # keep the legacy price in sync
            data["price"] = data["selling_price"]
        elif "price" in data:
            data["selling_price"] = data["price"]

        for field, value in data.items():
            setattr(product, field, value)

        if stock is not None:
            self.ledger.set_stock(product_id, stock)

        self.repo.commit()
        logger.info(f"Product {product_id} updated: {sorted(data) + (['stock'] if stock is not None else [])}")

        if stock is not None:
            self.notifier.stock_changed(product.id, product.stock)
        return product

    def delete_product(self, product_id: int) -> None:
        product = self.get_product(product_id)
        # order lines keep their name/price snapshot, product_id goes NULL
        self.repo.delete_product(product)
        self.repo.commit()
        logger.info(f"Product {product_id} deleted")

    def bulk_update_stock(self, updates: List[StockLevelIn]) -> List[ProductModel]:
        products = []
        try:
            for u in updates:
                products.append(self.ledger.set_stock(u.product_id, u.stock))
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Bulk stock update of {len(products)} product(s)")
        for p in products:
            self.notifier.stock_changed(p.id, p.stock)
        return products

    def restock(self, product_id: int, quantity: int) -> ProductModel:
        product = self.ledger.restock(product_id, quantity)
        self.repo.commit()

        logger.info(f"Product {product_id} restocked by {quantity}, stock {product.stock}")
        self.notifier.stock_changed(product.id, product.stock)
        return product

    def bulk_delete(self, product_ids: List[int]) -> int:
        # order lines keep their snapshot, carts show the line as unavailable
        deleted = self.repo.delete_products(product_ids)
        self.repo.commit()

        logger.info(f"Bulk delete removed {deleted} of {len(set(product_ids))} product(s)")
        return deleted
