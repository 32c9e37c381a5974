# storefront/services/pricing.py
from dataclasses import dataclass
from decimal import Decimal

from storefront.data.models.product import ProductModel


@dataclass(frozen=True)
class PriceSnapshot:
    sell_price: Decimal
    cost_price: Decimal
    name: str

    def line_total(self, quantity: int) -> Decimal:
        return self.sell_price * quantity


def _money(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def effective_sell_price(product: ProductModel) -> Decimal:
    # selling_price wins over the legacy price field when it is set
    if product.selling_price:
        return _money(product.selling_price)
    return _money(product.price)


def snapshot_product(product: ProductModel) -> PriceSnapshot:
    """Freeze the product's current prices and name for an order line."""
    return PriceSnapshot(
        sell_price=effective_sell_price(product),
        cost_price=_money(product.cost_price),
        name=product.name,
    )
