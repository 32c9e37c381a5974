from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    # lookup only, the product may be deleted while it sits in a cart
    product_id = Column(Integer, nullable=False)

    quantity = Column(Integer, nullable=False)

    cart = relationship("CartModel", back_populates="items")

    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="u_cart_product"),)
