# storefront/services/local_cart_store.py
from typing import List, Protocol

import redis
from pydantic import TypeAdapter, ValidationError

from storefront.domain.pricing import clamp_quantity
from storefront.domain.schemas import CamelModel, ProductSnapshot
from storefront.utils.settings import LOCAL_CART_KEY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class LocalCartLine(CamelModel):
    product_id: int
    product: ProductSnapshot
    quantity: int


_lines_adapter = TypeAdapter(List[LocalCartLine])


class StorageBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """Backend w pamieci - testy i klienci bez trwalego magazynu."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisStorage:
    """Trwaly backend - koszyk goscia przezywa restart klienta."""

    def __init__(self, client: redis.Redis, ttl: int | None = None):
        self.redis = client
        self.ttl = ttl

    def get(self, key: str) -> str | None:
        return self.redis.get(key)

    def set(self, key: str, value: str) -> None:
        self.redis.set(name=key, value=value, ex=self.ttl)

    def delete(self, key: str) -> None:
        self.redis.delete(key)


class LocalCartStore:
    """
    Koszyk goscia po stronie klienta.
    Caly koszyk to jedna tablica JSON [{productId, product, quantity}] pod kluczem cart_items.

    Bledy magazynu nigdy nie wychodza do wywolujacego - odczyt daje pusty koszyk,
    zapis jest logowany i pomijany.
    """

    def __init__(self, backend: StorageBackend | None = None, namespace: str | None = None):
        self.backend = backend or MemoryStorage()
        self.key = f"{namespace}:{LOCAL_CART_KEY}" if namespace else LOCAL_CART_KEY

    def get(self) -> List[LocalCartLine]:
        try:
            raw = self.backend.get(self.key)
        except (redis.RedisError, OSError) as e:
            logger.error(f"Local cart unavailable, using empty cart: {e}")
            return []

        if not raw:
            return []

        try:
            return _lines_adapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Local cart payload is corrupt, using empty cart: {e}")
            return []

    def add(self, product: ProductSnapshot, quantity: int = 1) -> List[LocalCartLine]:
        lines = self.get()
        existing = next((line for line in lines if line.product_id == product.id), None)

        if existing:
            existing.quantity = clamp_quantity(existing.quantity + quantity)
            existing.product = product
        else:
            lines.append(
                LocalCartLine(product_id=product.id, product=product, quantity=clamp_quantity(quantity))
            )

        self._save(lines)
        return lines

    def update_quantity(self, product_id: int, quantity: int) -> List[LocalCartLine]:
        lines = self.get()
        existing = next((line for line in lines if line.product_id == product_id), None)

        if not existing:
            return lines

        existing.quantity = clamp_quantity(quantity)
        self._save(lines)
        return lines

    def remove(self, product_id: int) -> List[LocalCartLine]:
        lines = self.get()
        remaining = [line for line in lines if line.product_id != product_id]

        if len(remaining) != len(lines):
            self._save(remaining)
        return remaining

    def clear(self) -> None:
        try:
            self.backend.delete(self.key)
        except (redis.RedisError, OSError) as e:
            logger.error(f"Failed to clear local cart: {e}")

    def _save(self, lines: List[LocalCartLine]) -> None:
        try:
            self.backend.set(self.key, _lines_adapter.dump_json(lines, by_alias=True).decode())
        except (redis.RedisError, OSError) as e:
            logger.error(f"Failed to persist local cart: {e}")
