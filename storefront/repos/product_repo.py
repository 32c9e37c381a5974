# storefront/repos/product_repo.py
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products(self, product_ids) -> dict[int, ProductModel]:
        rows = self.db.execute(
            select(ProductModel).where(ProductModel.id.in_(list(product_ids)))
        ).scalars()
        return {p.id: p for p in rows}

    def lock_products(self, product_ids) -> dict[int, ProductModel]:
        # SELECT ... FOR UPDATE, always in ascending id order so two orders
        # touching the same products never lock them in opposite order
        ids = sorted(set(product_ids))
        rows = self.db.execute(
            select(ProductModel)
            .where(ProductModel.id.in_(ids))
            .order_by(ProductModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars()
        return {p.id: p for p in rows}

    def list_products(self) -> list[ProductModel]:
        return list(self.db.execute(select(ProductModel).order_by(ProductModel.id)).scalars())

    def low_stock(self, threshold: int, limit: int = 10) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.stock < threshold)
                .order_by(ProductModel.stock, ProductModel.id)
                .limit(limit)
            ).scalars()
        )

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.flush()

    def delete_products(self, product_ids) -> int:
        res = self.db.execute(
            delete(ProductModel)
            .where(ProductModel.id.in_(list(product_ids)))
            .execution_options(synchronize_session="fetch")
        )
        return res.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
