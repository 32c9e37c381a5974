from sqlalchemy import Column, Integer, String, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from storefront.data.database import Base

ORDER_STATUSES = ("pending", "completed", "cancelled")


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)

    status = Column(String(20), nullable=False, default="pending")  # pending, completed, cancelled
    total = Column(Numeric(10, 2), nullable=False)

    # copied at creation, never re-read from the user profile
    shipping_address = Column(String, nullable=False, default="N/A")
    shipping_info = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
