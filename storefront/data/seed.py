# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal, init_db
from storefront.data.models import ProductModel, UserModel
from storefront.utils.settings import ADMIN_EMAIL, ADMIN_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SAMPLE_PRODUCTS = [
    {"name": "Brake Pads", "category": "Brakes", "price": Decimal("450.00"), "cost_price": Decimal("300.00"), "stock": 25},
    {"name": "Side Mirror", "category": "Mirrors", "price": Decimal("799.00"), "cost_price": Decimal("520.00"), "stock": 8},
    {"name": "LED Headlight", "category": "Lights", "price": Decimal("1299.00"), "cost_price": Decimal("900.00"), "stock": 12},
]


def seed(session_factory=SessionLocal):
    db = session_factory()
    try:
        # only seed if empty
        if not db.query(UserModel).filter(UserModel.role == "admin").first():
            db.add(UserModel(name=ADMIN_NAME, email=ADMIN_EMAIL, role="admin"))
            logger.info(f"Admin user created: {ADMIN_EMAIL}")

        if not db.query(ProductModel).first():
            for data in SAMPLE_PRODUCTS:
                db.add(ProductModel(selling_price=data["price"], **data))
            logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} products")

        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
    seed()
