import unittest
from decimal import Decimal

import requests

from storefront.data.models import CartItemModel
from storefront.domain.schemas import ProductSnapshot
from storefront.services.cart_reconciliation import CartReconciliationService
from storefront.services.local_cart_store import LocalCartStore, MemoryStorage
from storefront.services.storefront_client import StorefrontClient
from tests.support import StorefrontTestCase


class DownHttp:
    """Symuluje brak polaczenia z API."""

    def __init__(self):
        self.calls = 0

    def _fail(self, *args, **kwargs):
        self.calls += 1
        raise requests.ConnectionError("connection refused")

    get = post = put = delete = _fail


def snapshot(product):
    return ProductSnapshot(
        id=product.id,
        name=product.name,
        brand=product.brand,
        regular_price=product.regular_price,
        discounted_price=product.discounted_price,
        is_on_sale=product.is_on_sale,
    )


class CartReconciliationTestCase(StorefrontTestCase):
    def setUp(self):
        super().setUp()
        self.p1 = self.make_product("Ryzen 7 7800X3D", "1000.00")
        self.p2 = self.make_product("B650 Tomahawk", "2000.00")
        self.p3 = self.make_product("RM850x", "3000.00")
        self.user = self.make_user()
        self.local = LocalCartStore(MemoryStorage(), namespace="guest")

    def service(self, token=None, http=None):
        client = StorefrontClient(base_url="http://testserver", token=token, http=http or self.client)
        return CartReconciliationService(client, self.local)

    def server_lines(self):
        self.db.expire_all()
        return {
            item.product_id: item.quantity
            for item in self.db.query(CartItemModel).filter_by(user_id=self.user.id)
        }

    def test_guest_fetch_returns_local_cart_without_touching_server(self):
        self.local.add(snapshot(self.p1), 2)

        view = self.service().fetch()

        self.assertEqual(len(view), 1)
        self.assertEqual(view[0]["id"], self.p1.id)
        self.assertEqual(view[0]["quantity"], 2)
        self.assertEqual(view[0]["product"]["name"], "Ryzen 7 7800X3D")
        self.assertEqual(len(self.local.get()), 1)
        self.assertEqual(self.db.query(CartItemModel).count(), 0)

    def test_login_with_empty_server_cart_pushes_local_lines_with_quantity_one(self):
        self.local.add(snapshot(self.p1), 2)

        view = self.service(token=self.token_for(self.user)).fetch()

        self.assertEqual(self.server_lines(), {self.p1.id: 1})
        self.assertEqual(self.local.get(), [])
        self.assertEqual([(line["productId"], line["quantity"]) for line in view], [(self.p1.id, 1)])

    def test_only_products_missing_on_server_are_pushed(self):
        token = self.token_for(self.user)
        headers = {"Authorization": f"Bearer {token}"}
        self.client.post("/cart", json={"items": [{"id": self.p1.id, "quantity": 3}]}, headers=headers)

        self.local.add(snapshot(self.p1), 5)
        self.local.add(snapshot(self.p2), 4)

        view = self.service(token=token).fetch()

        # P1 bez zmian (serwer wygrywa), P2 dopisany z quantity 1
        self.assertEqual(self.server_lines(), {self.p1.id: 3, self.p2.id: 1})
        self.assertEqual(len(view), 2)
        self.assertEqual(self.local.get(), [])

    def test_reconciliation_never_duplicates_server_lines(self):
        token = self.token_for(self.user)
        svc = self.service(token=token)

        self.local.add(snapshot(self.p1), 1)
        svc.fetch()
        svc.fetch()
        self.local.add(snapshot(self.p1), 4)
        svc.fetch()

        self.assertEqual(self.server_lines(), {self.p1.id: 1})
        self.assertEqual(self.db.query(CartItemModel).count(), 1)

    def test_failed_push_drops_local_lines(self):
        self.local.add(snapshot(self.p1), 1)
        # produkt usuniety z katalogu w miedzyczasie - serwer odrzuci cala paczke
        self.local.add(
            ProductSnapshot(id=9999, name="Gone", regular_price=Decimal("10.00")), 1
        )

        view = self.service(token=self.token_for(self.user)).fetch()

        self.assertEqual(view, [])
        self.assertEqual(self.server_lines(), {})
        self.assertEqual(self.local.get(), [])

    def test_unreachable_server_falls_back_to_local_cart(self):
        self.local.add(snapshot(self.p3), 2)
        http = DownHttp()

        view = self.service(token="whatever", http=http).fetch()

        self.assertEqual([(line["productId"], line["quantity"]) for line in view], [(self.p3.id, 2)])
        self.assertEqual(http.calls, 3)
        self.assertEqual(len(self.local.get()), 1)

    def test_add_to_cart_goes_local_for_guests_and_server_when_logged_in(self):
        self.service().add_to_cart([snapshot(self.p1), snapshot(self.p2)], quantity=2)
        self.assertEqual([(line.product_id, line.quantity) for line in self.local.get()], [(self.p1.id, 2), (self.p2.id, 2)])

        token = self.token_for(self.user)
        lines = self.service(token=token).add_to_cart(
            [snapshot(self.p3)], custom_build_name="Workstation"
        )
        self.assertEqual(lines[0]["customBuildName"], "Workstation")
        self.assertEqual(self.server_lines(), {self.p3.id: 1})

    def test_remove_and_update_fall_back_to_local_cart(self):
        svc = self.service()
        self.local.add(snapshot(self.p1), 1)
        self.local.add(snapshot(self.p2), 1)

        svc.update_quantity(self.p1.id, self.p1.id, 11)
        svc.remove_from_cart(self.p2.id)

        self.assertEqual([(line.product_id, line.quantity) for line in self.local.get()], [(self.p1.id, 8)])


if __name__ == "__main__":
    unittest.main()
