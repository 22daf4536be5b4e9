from typing import Dict, Any, List
from sqlalchemy.orm import Session
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.pricing import clamp_quantity
from storefront.domain.schemas import CartItemIn
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def product_snapshot(product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "brand": product.brand,
        "regular_price": product.regular_price,
        "discounted_price": product.discounted_price,
        "is_on_sale": product.is_on_sale,
    }


def line_to_dict(item: CartItemModel) -> Dict[str, Any]:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "quantity": item.quantity,
        "custom_build_name": item.custom_build_name,
        "product": product_snapshot(item.product),
    }


class CartService:
    """
    Koszyk serwerowy - jedno zrodlo prawdy dla zalogowanego uzytkownika
    commands (add, update, remove, clear) modyfikuja stan
    query (get) tylko odczyt
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query - odczyt
    def get_cart(self, user_id: int) -> List[Dict[str, Any]]:
        return [line_to_dict(i) for i in self.repo.get_items(user_id)]

    #commands
    def add_items(self, user_id: int, items: List[CartItemIn]) -> List[Dict[str, Any]]:
        products = self.products.get_products(i.id for i in items)

        for entry in items:
            if entry.id not in products:
                raise LookupError(f"Product {entry.id} not found")

        for entry in items:
            existing = self.repo.get_item_by_product(user_id, entry.id)

            if existing:
                new_quantity = clamp_quantity(existing.quantity + entry.quantity)
                logger.info(
                    f"Produkt {entry.id} juz jest w koszyku uzytkownika {user_id}, "
                    f"ilosc {existing.quantity} -> {new_quantity}"
                )
                existing.quantity = new_quantity
                if entry.custom_build_name:
                    existing.custom_build_name = entry.custom_build_name
            else:
                logger.info(f"Dodaje produkt {entry.id} do koszyka uzytkownika {user_id}")
                self.repo.add_item(
                    CartItemModel(
                        user_id=user_id,
                        product_id=entry.id,
                        quantity=clamp_quantity(entry.quantity),
                        custom_build_name=entry.custom_build_name,
                    )
                )

        self.repo.commit()
        return self.get_cart(user_id)

    def update_quantity(self, user_id: int, cart_item_id: int, quantity: int) -> Dict[str, Any]:
        item = self._owned_item(user_id, cart_item_id)

        item.quantity = clamp_quantity(quantity)
        self.repo.commit()

        logger.info(f"Pozycja {cart_item_id} koszyka uzytkownika {user_id}: ilosc {item.quantity}")
        return line_to_dict(item)

    def remove_item(self, user_id: int, cart_item_id: int) -> None:
        item = self._owned_item(user_id, cart_item_id)

        self.repo.delete_item(item)
        self.repo.commit()

        logger.info(f"Usunieto pozycje {cart_item_id} z koszyka uzytkownika {user_id}")

    def _owned_item(self, user_id: int, cart_item_id: int) -> CartItemModel:
        item = self.repo.get_item(cart_item_id)

        if not item:
            raise LookupError("Cart item not found")

        if item.user_id != user_id:
            raise PermissionError("Cart item belongs to another user")

        return item
