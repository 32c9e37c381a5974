# storefront/data/models/product.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, CheckConstraint

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, default="Accessories")

    # price is the legacy generic field, selling_price overrides it when set
    price = Column(Numeric(10, 2), nullable=False)
    selling_price = Column(Numeric(10, 2), nullable=True)
    cost_price = Column(Numeric(10, 2), nullable=False, default=0)

    stock = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    __table_args__ = (CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),)
