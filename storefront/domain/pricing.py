# storefront/domain/pricing.py
from decimal import Decimal

from storefront.utils.settings import MAX_CART_QUANTITY

MIN_CART_QUANTITY = 1


def clamp_quantity(quantity: int) -> int:
    """Ilosc w koszyku zawsze w przedziale [1, 8]."""
    return max(MIN_CART_QUANTITY, min(int(quantity), MAX_CART_QUANTITY))


def effective_price(regular_price, discounted_price=None, is_on_sale: bool = False) -> Decimal:
    """Cena promocyjna tylko gdy produkt jest na wyprzedazy i ma ustawiona cene po rabacie."""
    if is_on_sale and discounted_price:
        return Decimal(str(discounted_price))
    return Decimal(str(regular_price))


def unit_discount(regular_price, discounted_price=None, is_on_sale: bool = False) -> Decimal:
    return Decimal(str(regular_price)) - effective_price(regular_price, discounted_price, is_on_sale)


def to_minor_units(amount: Decimal) -> int:
    # paise / grosze
    return int((Decimal(amount) * 100).quantize(Decimal("1")))
