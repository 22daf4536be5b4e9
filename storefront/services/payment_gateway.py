# storefront/services/payment_gateway.py
import hashlib
import hmac

import requests
from requests import RequestException

from storefront.utils import settings
from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry

logger = get_logger(__name__)


class PaymentGatewayError(RuntimeError):
    """Bramka nie utworzyla transakcji - mozna ponowic checkout."""


def sign_payment(external_order_id: str, payment_id: str, secret: str) -> str:
    # podpis Razorpay: HMAC-SHA256("order_id|payment_id"), hex
    text = f"{external_order_id}|{payment_id}"
    return hmac.new(secret.encode(), text.encode(), hashlib.sha256).hexdigest()


def verify_payment_signature(signature: str, payment_id: str, external_order_id: str, secret: str) -> bool:
    if not secret or not signature:
        return False
    expected = sign_payment(external_order_id, payment_id, secret)
    #stala czasowo porownanie
    return hmac.compare_digest(signature.encode(), expected.encode())


class PaymentGateway:
    """Klient hostowanej bramki platnosci (Razorpay Orders API)."""

    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        base_url: str | None = None,
        timeout: int = 5,
    ):
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.base_url = (base_url or settings.RAZORPAY_API_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _post_order(self, payload: dict) -> dict:
        url = f"{self.base_url}/orders"
        logger.info(f"PaymentGateway POST {url} receipt={payload.get('receipt')}")

        resp = requests.post(
            url,
            json=payload,
            auth=(self.key_id, self.key_secret),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict | None = None) -> dict:
        """
        Otwiera transakcje w bramce. amount w jednostkach podrzednych (paise).
        Zwraca dict z kluczami id, amount, currency.
        """
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        try:
            return self._post_order(payload)
        except RequestException as e:
            logger.error(f"Payment gateway order creation failed for receipt {receipt}: {e}")
            raise PaymentGatewayError("Payment gateway unavailable") from e

    def verify_signature(self, signature: str, payment_id: str, external_order_id: str) -> bool:
        return verify_payment_signature(signature, payment_id, external_order_id, self.key_secret)
