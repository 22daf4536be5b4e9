# storefront/services/cart_reconciliation.py
from typing import Any, Dict, List

from requests import RequestException

from storefront.domain.schemas import ProductSnapshot
from storefront.services.local_cart_store import LocalCartStore, LocalCartLine
from storefront.services.storefront_client import StorefrontClient, NotAuthenticated, StorefrontApiError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# quantity przy przenoszeniu koszyka goscia na serwer - lokalna ilosc jest pomijana
RECONCILED_QUANTITY = 1


def local_view(lines: List[LocalCartLine]) -> List[Dict[str, Any]]:
    """Widok koszyka goscia w tym samym ksztalcie co odpowiedz GET /cart."""
    return [
        {
            "id": line.product_id,
            "productId": line.product_id,
            "quantity": line.quantity,
            "product": line.product.model_dump(mode="json", by_alias=True),
        }
        for line in lines
    ]


class CartReconciliationService:
    """
    Laczy koszyk lokalny (gosc) z koszykiem serwerowym.

    fetch():
    - 401 -> widok koszyka lokalnego, serwer bez zmian
    - zalogowany -> pozycje lokalne, ktorych productId nie ma na serwerze,
      ida na serwer z quantity 1; koszyk lokalny jest czyszczony zawsze,
      blad wysylki = utrata tych pozycji (bez retry i rollbacku)
    """

    def __init__(self, client: StorefrontClient, local_store: LocalCartStore):
        self.client = client
        self.local_store = local_store

    def fetch(self) -> List[Dict[str, Any]]:
        try:
            server_lines = self.client.get_cart()
        except NotAuthenticated:
            return local_view(self.local_store.get())
        except (RequestException, StorefrontApiError) as e:
            logger.error(f"Failed to fetch server cart, falling back to local cart: {e}")
            return local_view(self.local_store.get())

        local_lines = self.local_store.get()
        if not local_lines:
            return server_lines

        server_ids = {line["productId"] for line in server_lines}
        to_push = [line for line in local_lines if line.product_id not in server_ids]

        # czyszczenie przed wysylka
        self.local_store.clear()

        if not to_push:
            return server_lines

        logger.info(f"Reconciling {len(to_push)} local cart lines into server cart")
        try:
            return self.client.add_items(
                [{"id": line.product_id, "quantity": RECONCILED_QUANTITY} for line in to_push]
            )
        except (NotAuthenticated, RequestException, StorefrontApiError) as e:
            logger.warning(f"Dropped {len(to_push)} local cart lines, push failed: {e}")
            return server_lines

    def add_to_cart(
        self,
        products: List[ProductSnapshot],
        quantity: int = 1,
        custom_build_name: str | None = None,
    ) -> List[Dict[str, Any]]:
        items = [{"id": p.id, "quantity": quantity} for p in products]
        if custom_build_name:
            for item in items:
                item["customBuildName"] = custom_build_name

        try:
            return self.client.add_items(items)
        except NotAuthenticated:
            pass
        except (RequestException, StorefrontApiError) as e:
            logger.error(f"Failed to add to server cart, using local cart: {e}")

        for product in products:
            self.local_store.add(product, quantity)
        return local_view(self.local_store.get())

    def remove_from_cart(self, item_id: int) -> None:
        """item_id to id pozycji na serwerze albo productId dla goscia."""
        try:
            self.client.remove_item(item_id)
            return
        except NotAuthenticated:
            pass
        except (RequestException, StorefrontApiError) as e:
            logger.error(f"Failed to remove item from server cart: {e}")

        self.local_store.remove(item_id)

    def update_quantity(self, item_id: int, product_id: int, quantity: int) -> None:
        try:
            self.client.update_item(item_id, quantity)
            return
        except NotAuthenticated:
            pass
        except (RequestException, StorefrontApiError) as e:
            logger.error(f"Failed to update server cart quantity: {e}")

        self.local_store.update_quantity(product_id, quantity)
