from sqlalchemy import Column, Integer, ForeignKey, String, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderItemModel(Base):
    """
    Line item with prices and name frozen at order time.
    product_id is kept for display only and nulled when the product is deleted.
    """

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    cost_price = Column(Numeric(10, 2), nullable=False, default=0)
    product_name = Column(String(255), nullable=False)

    order = relationship("OrderModel", back_populates="items")
