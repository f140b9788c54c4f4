"""Product catalog and order pricing."""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

DISCOUNT_RATE = Decimal("0.20")
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: Decimal


@dataclass(frozen=True)
class ReservationItem:
    product_id: str
    product_name: str
    quantity: int
    unit_price: float

    def as_payload(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
        }


@dataclass(frozen=True)
class Totals:
    total_items: int
    subtotal: float
    discount: float
    total: float

    def as_dict(self) -> dict:
        return asdict(self)


PRODUCTS: tuple[Product, ...] = (
    Product("palha-italiana", "Palha Italiana", Decimal("6.00")),
    Product("cookie", "Cookie", Decimal("7.00")),
    Product("cake-pop", "Cake Pop", Decimal("4.50")),
    Product("biscoito-amantegado", "Biscoito Amantegado", Decimal("5.00")),
)

PRODUCTS_BY_ID = {product.id: product for product in PRODUCTS}


def build_items(quantities: Mapping[str, int]) -> list[ReservationItem]:
    """Cross the catalog with chosen quantities, in catalog order."""
    items = []
    for product in PRODUCTS:
        qty = quantities.get(product.id, 0)
        if qty > 0:
            items.append(
                ReservationItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=qty,
                    unit_price=float(product.price),
                )
            )
    return items


def compute_totals(items: Iterable[ReservationItem]) -> Totals:
    total_items = 0
    subtotal = Decimal("0")
    for item in items:
        total_items += item.quantity
        subtotal += Decimal(str(item.unit_price)) * item.quantity

    subtotal = subtotal.quantize(CENTS, rounding=ROUND_HALF_UP)
    discount = (subtotal * DISCOUNT_RATE).quantize(CENTS, rounding=ROUND_HALF_UP)
    return Totals(
        total_items=total_items,
        subtotal=float(subtotal),
        discount=float(discount),
        total=float(subtotal - discount),
    )
