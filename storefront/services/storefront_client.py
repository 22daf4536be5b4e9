# storefront/services/storefront_client.py
import requests

from storefront.utils.settings import STOREFRONT_URL
from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry

logger = get_logger(__name__)


class NotAuthenticated(Exception):
    """Serwer odpowiedzial 401 - brak sesji."""


class StorefrontApiError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class StorefrontClient:
    """
    Klient HTTP API sklepu (to co w przegladarce robi api-client).
    `http` moze byc requests.Session albo innym obiektem o tym samym interfejsie.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: int = 5,
        http=None,
    ):
        self.base_url = (base_url or STOREFRONT_URL).rstrip("/")
        self.token = token
        self.timeout = timeout
        self.http = http or requests.Session()

    def _headers(self, extra: dict | None = None) -> dict:
        headers = dict(extra or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _check(resp):
        if resp.status_code == 401:
            raise NotAuthenticated()
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            raise StorefrontApiError(resp.status_code, str(detail))
        return resp.json() if resp.content else None

    @http_retry()
    def get_cart(self) -> list[dict]:
        url = f"{self.base_url}/cart"
        logger.info(f"StorefrontClient GET {url}")
        resp = self.http.get(url, headers=self._headers(), timeout=self.timeout)
        return self._check(resp)

    @http_retry()
    def add_items(self, items: list[dict]) -> list[dict]:
        url = f"{self.base_url}/cart"
        logger.info(f"StorefrontClient POST {url} ({len(items)} items)")
        resp = self.http.post(url, json={"items": items}, headers=self._headers(), timeout=self.timeout)
        return self._check(resp)

    @http_retry()
    def update_item(self, cart_item_id: int, quantity: int) -> dict:
        url = f"{self.base_url}/cart"
        resp = self.http.put(
            url,
            json={"cartItemId": cart_item_id, "quantity": quantity},
            headers=self._headers(),
            timeout=self.timeout,
        )
        return self._check(resp)

    @http_retry()
    def remove_item(self, cart_item_id: int) -> None:
        url = f"{self.base_url}/cart"
        resp = self.http.delete(url, params={"id": cart_item_id}, headers=self._headers(), timeout=self.timeout)
        self._check(resp)

    def checkout(self, items: list[dict], shipping_details: dict, idempotency_key: str | None = None) -> dict:
        # bez retry - ponowienie moze zalozyc drugie zamowienie, chyba ze jest klucz
        url = f"{self.base_url}/checkout"
        extra = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        resp = self.http.post(
            url,
            json={"items": items, "shippingDetails": shipping_details},
            headers=self._headers(extra),
            timeout=self.timeout,
        )
        return self._check(resp)
