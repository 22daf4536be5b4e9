# storefront/services/product_service.py
import json
from decimal import Decimal
from typing import Dict, Any, List

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel, ProductSpecModel, ProductImageModel, TagModel
from storefront.domain.pricing import effective_price
from storefront.domain.schemas import ProductIn
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def product_to_dict(product: ProductModel) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "brand": product.brand,
        "description": product.description,
        "category": product.category.name if product.category else None,
        "regular_price": product.regular_price,
        "discounted_price": product.discounted_price,
        "is_on_sale": product.is_on_sale,
        "price": effective_price(product.regular_price, product.discounted_price, product.is_on_sale),
        "specs": [{"name": s.name, "value": s.value} for s in product.specs],
        "images": [i.url for i in product.images],
        "tags": [t.name for t in product.tags],
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


def parse_spec_filters(raw: str | None) -> Dict[str, List[str]]:
    """filters={"Socket": ["AM5"], "Memory Type": ["DDR5"]}"""
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError("filters must be a JSON object") from e

    if not isinstance(data, dict):
        raise ValueError("filters must be a JSON object")

    parsed = {}
    for name, values in data.items():
        if isinstance(values, str):
            values = [values]
        if not isinstance(values, list):
            raise ValueError(f"filter {name} must be a list of values")
        parsed[str(name)] = [str(v) for v in values]
    return parsed


class ProductService:
    """Katalog (odczyt) i operacje back-office na produktach i tagach."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_products(
        self,
        category: str | None = None,
        search: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        filters: str | None = None,
    ) -> List[Dict[str, Any]]:
        products = self.repo.search(
            category=category,
            search=search,
            min_price=min_price,
            max_price=max_price,
            spec_filters=parse_spec_filters(filters),
        )
        return [product_to_dict(p) for p in products]

    def get_product(self, product_id: int) -> Dict[str, Any]:
        return product_to_dict(self._get(product_id))

    def create_product(self, payload: ProductIn) -> Dict[str, Any]:
        self._validate_prices(payload)

        product = ProductModel()
        self._apply(product, payload)
        self.repo.add(product)
        self.repo.commit()

        logger.info(f"Product {product.id} created: {product.name}")
        return product_to_dict(self.repo.refresh(product))

    def update_product(self, product_id: int, payload: ProductIn) -> Dict[str, Any]:
        self._validate_prices(payload)

        product = self._get(product_id)
        self._apply(product, payload)
        self.repo.commit()

        logger.info(f"Product {product_id} updated")
        return product_to_dict(self.repo.refresh(product))

    def delete_product(self, product_id: int) -> None:
        product = self._get(product_id)
        self.repo.delete_product(product)
        self.repo.commit()
        logger.info(f"Product {product_id} deleted")

    def list_tags(self) -> List[TagModel]:
        return self.repo.list_tags()

    def create_tag(self, name: str) -> TagModel:
        if self.repo.get_tag_by_name(name):
            raise ValueError(f"Tag {name} already exists")
        tag = self.repo.add(TagModel(name=name))
        self.repo.commit()
        return tag

    def _get(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise LookupError("Product not found")
        return product

    @staticmethod
    def _validate_prices(payload: ProductIn) -> None:
        if payload.is_on_sale and payload.discounted_price is None:
            raise ValueError("Discounted price is required for products on sale")
        if payload.discounted_price is not None and payload.discounted_price >= payload.regular_price:
            raise ValueError("Discounted price must be lower than regular price")

    def _apply(self, product: ProductModel, payload: ProductIn) -> None:
        product.name = payload.name
        product.brand = payload.brand
        product.description = payload.description
        product.regular_price = payload.regular_price
        product.discounted_price = payload.discounted_price
        product.is_on_sale = payload.is_on_sale
        product.category = self.repo.get_or_create_category(payload.category) if payload.category else None
        product.specs = [
            ProductSpecModel(name=s.name, value=s.value, sort_order=idx)
            for idx, s in enumerate(payload.specs)
        ]
        product.images = [ProductImageModel(url=url) for url in payload.images]
        product.tags = self.repo.get_tags(payload.tags)
