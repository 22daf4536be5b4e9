import unittest
from decimal import Decimal

from storefront.data.models import OrderModel, CartItemModel
from storefront.services.payment_gateway import sign_payment
from tests.support import StorefrontTestCase, FakePaymentGateway, GATEWAY_SECRET, SHIPPING


class CheckoutTestCase(StorefrontTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.make_user()
        self.headers = self.login(self.user)
        self.ram = self.make_product("Vengeance 32GB", "1000.00")
        self.ssd = self.make_product("990 Pro 2TB", "3500.00")
        self.gpu = self.make_product("RTX 4070 Super", "5000.00", discounted_price="4500.00")

        # koszyk serwerowy, ktory checkout powinien wyczyscic
        self.client.post(
            "/cart",
            json={"items": [{"id": self.ram.id, "quantity": 2}, {"id": self.ssd.id, "quantity": 1}]},
            headers=self.headers,
        )

    def checkout(self, items, payment_method="cod", headers=None, **extra_headers):
        body = {"items": items, "shippingDetails": {**SHIPPING, "paymentMethod": payment_method}}
        return self.client.post("/checkout", json=body, headers={**(headers if headers is not None else self.headers), **extra_headers})

    def cart_count(self):
        return self.db.query(CartItemModel).filter_by(user_id=self.user.id).count()

    def order_row(self, order_id):
        self.db.expire_all()
        return self.db.get(OrderModel, order_id)

    def test_cod_checkout_confirms_order_and_clears_cart(self):
        resp = self.checkout([{"id": self.ram.id, "quantity": 2}, {"id": self.ssd.id, "quantity": 1}])
        self.assertEqual(resp.status_code, 200)

        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["paymentMethod"], "cod")
        order = body["order"]
        self.assertEqual(order["paymentStatus"], "COD")
        self.assertEqual(order["status"], "CONFIRMED")
        self.assertEqual(Decimal(order["finalAmount"]), Decimal("5500"))
        self.assertEqual(Decimal(order["totalAmount"]), Decimal("5500"))
        self.assertEqual(Decimal(order["discountAmount"]), Decimal("0"))
        self.assertIsNone(order["razorpay"])
        self.assertEqual(order["shippingAddress"]["fullName"], "Asha Rao")
        self.assertEqual(len(order["items"]), 2)
        self.assertEqual(self.cart_count(), 0)

    def test_total_comes_from_catalog_not_from_client(self):
        resp = self.checkout([
            {"id": self.gpu.id, "quantity": 2, "price": 1, "total": 1},
            {"id": self.ram.id, "quantity": 1, "price": 1},
        ])

        order = resp.json()["order"]
        # 2 x 4500 (promocja) + 1000
        self.assertEqual(Decimal(order["finalAmount"]), Decimal("10000"))
        self.assertEqual(Decimal(order["discountAmount"]), Decimal("1000"))
        gpu_line = next(i for i in order["items"] if i["productId"] == self.gpu.id)
        self.assertEqual(Decimal(gpu_line["price"]), Decimal("4500"))

    def test_order_snapshot_survives_catalog_change(self):
        order_id = self.checkout([{"id": self.ssd.id, "quantity": 1}]).json()["order"]["id"]

        self.ssd.regular_price = Decimal("9999.00")
        self.ssd.name = "Renamed"
        self.db.commit()

        order = self.client.get(f"/orders/{order_id}", headers=self.headers).json()
        self.assertEqual(order["items"][0]["productName"], "990 Pro 2TB")
        self.assertEqual(Decimal(order["items"][0]["price"]), Decimal("3500"))

    def test_online_checkout_then_valid_callback_marks_order_paid(self):
        resp = self.checkout([{"id": self.ram.id, "quantity": 2}, {"id": self.ssd.id, "quantity": 1}], "online")
        self.assertEqual(resp.status_code, 200)

        body = resp.json()
        self.assertEqual(body["paymentMethod"], "online")
        razorpay = body["order"]["razorpay"]
        self.assertEqual(razorpay["orderId"], "order_test0001")
        self.assertEqual(razorpay["amount"], 550000)
        self.assertEqual(razorpay["currency"], "INR")
        self.assertEqual(body["order"]["paymentStatus"], "PENDING")
        self.assertEqual(self.gateway.created[0]["receipt"], str(body["order"]["id"]))
        self.assertEqual(self.cart_count(), 0)

        callback = {
            "razorpay_payment_id": "pay_001",
            "razorpay_order_id": razorpay["orderId"],
            "razorpay_signature": sign_payment(razorpay["orderId"], "pay_001", GATEWAY_SECRET),
        }
        resp = self.client.put("/checkout", json=callback)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True})

        order = self.order_row(body["order"]["id"])
        self.assertEqual(order.payment_status, "PAID")
        self.assertEqual(order.status, "CONFIRMED")
        self.assertEqual(order.external_payment_id, "pay_001")
        self.assertIsNotNone(order.paid_at)

        # powtorzony callback nic nie psuje
        self.assertEqual(self.client.put("/checkout", json=callback).status_code, 200)

    def test_tampered_signature_leaves_order_unchanged(self):
        body = self.checkout([{"id": self.ram.id, "quantity": 1}], "online").json()
        external_id = body["order"]["razorpay"]["orderId"]

        signature = sign_payment(external_id, "pay_001", GATEWAY_SECRET)
        tampered = ("0" if signature[0] != "0" else "1") + signature[1:]
        resp = self.client.put("/checkout", json={
            "razorpay_payment_id": "pay_001",
            "razorpay_order_id": external_id,
            "razorpay_signature": tampered,
        })
        self.assertEqual(resp.status_code, 400)

        order = self.order_row(body["order"]["id"])
        self.assertEqual(order.payment_status, "PENDING")
        self.assertEqual(order.status, "PENDING")
        self.assertIsNone(order.paid_at)

    def test_signature_for_other_payment_is_rejected(self):
        body = self.checkout([{"id": self.ram.id, "quantity": 1}], "online").json()
        external_id = body["order"]["razorpay"]["orderId"]

        resp = self.client.put("/checkout", json={
            "razorpay_payment_id": "pay_other",
            "razorpay_order_id": external_id,
            "razorpay_signature": sign_payment(external_id, "pay_001", GATEWAY_SECRET),
        })
        self.assertEqual(resp.status_code, 400)

    def test_callback_for_unknown_order_is_rejected(self):
        resp = self.client.put("/checkout", json={
            "razorpay_payment_id": "pay_001",
            "razorpay_order_id": "order_missing",
            "razorpay_signature": sign_payment("order_missing", "pay_001", GATEWAY_SECRET),
        })
        self.assertEqual(resp.status_code, 404)

    def test_gateway_failure_cancels_order_and_keeps_cart(self):
        self.gateway = FakePaymentGateway(fail=True)

        resp = self.checkout([{"id": self.ram.id, "quantity": 2}], "online")
        self.assertEqual(resp.status_code, 502)

        self.db.expire_all()
        order = self.db.query(OrderModel).one()
        self.assertEqual(order.status, "CANCELLED")
        self.assertEqual(order.payment_status, "FAILED")
        self.assertEqual(self.cart_count(), 2)

    def test_invalid_shipping_details_are_rejected_before_persistence(self):
        for field, value in (("pincode", "12345"), ("phone", "98765"), ("email", "nope"), ("city", "")):
            body = {
                "items": [{"id": self.ram.id, "quantity": 1}],
                "shippingDetails": {**SHIPPING, field: value, "paymentMethod": "cod"},
            }
            resp = self.client.post("/checkout", json=body, headers=self.headers)
            self.assertEqual(resp.status_code, 422, field)

        self.assertEqual(self.db.query(OrderModel).count(), 0)
        self.assertEqual(self.cart_count(), 2)

    def test_empty_items_and_unknown_products_are_rejected(self):
        self.assertEqual(self.checkout([]).status_code, 422)
        self.assertEqual(self.checkout([{"id": 9999, "quantity": 1}]).status_code, 404)
        self.assertEqual(self.checkout([{"id": self.ram.id, "quantity": 9}]).status_code, 422)
        self.assertEqual(self.db.query(OrderModel).count(), 0)

    def test_checkout_requires_session(self):
        resp = self.checkout([{"id": self.ram.id, "quantity": 1}], headers={"X-Nothing": "1"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(self.db.query(OrderModel).count(), 0)

    def test_idempotency_key_replay_returns_same_order(self):
        items = [{"id": self.ssd.id, "quantity": 1}]
        first = self.checkout(items, "online", **{"Idempotency-Key": "checkout-123"}).json()
        second = self.checkout(items, "online", **{"Idempotency-Key": "checkout-123"}).json()

        self.assertEqual(first["order"]["id"], second["order"]["id"])
        self.assertEqual(second["order"]["razorpay"]["orderId"], first["order"]["razorpay"]["orderId"])
        self.assertEqual(self.db.query(OrderModel).count(), 1)
        self.assertEqual(len(self.gateway.created), 1)

        # bez klucza - kazde wyslanie to nowe zamowienie
        self.checkout(items)
        self.checkout(items)
        self.assertEqual(self.db.query(OrderModel).count(), 3)

    def test_duplicate_products_are_merged_within_quantity_limit(self):
        resp = self.checkout([{"id": self.ram.id, "quantity": 8}, {"id": self.ram.id, "quantity": 8}])
        self.assertEqual(resp.status_code, 200)

        order = resp.json()["order"]
        self.assertEqual(len(order["items"]), 1)
        self.assertEqual(order["items"][0]["quantity"], 8)
        self.assertEqual(Decimal(order["finalAmount"]), Decimal("8000"))

    def test_replay_while_gateway_order_is_missing_is_conflict(self):
        # pierwszy request zapisal zamowienie, bramka jeszcze nie odpowiedziala
        pending = OrderModel(
            user_id=self.user.id,
            status="PENDING",
            payment_status=None,
            payment_method="online",
            total_amount=Decimal("3500.00"),
            discount_amount=Decimal("0.00"),
            final_amount=Decimal("3500.00"),
            shipping_address=SHIPPING,
            idempotency_key="checkout-busy",
        )
        self.db.add(pending)
        self.db.commit()

        resp = self.checkout([{"id": self.ssd.id, "quantity": 1}], "online", **{"Idempotency-Key": "checkout-busy"})

        self.assertEqual(resp.status_code, 409)
        self.assertEqual(self.db.query(OrderModel).count(), 1)
        self.assertEqual(self.gateway.created, [])
        self.assertEqual(self.cart_count(), 2)


if __name__ == "__main__":
    unittest.main()
