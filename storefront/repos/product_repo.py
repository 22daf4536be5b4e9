# storefront/repos/product_repo.py
from decimal import Decimal

from sqlalchemy import select, or_, delete
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import (
    CategoryModel,
    TagModel,
    ProductModel,
    ProductSpecModel,
)


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return select(ProductModel).options(
            selectinload(ProductModel.category),
            selectinload(ProductModel.specs),
            selectinload(ProductModel.images),
            selectinload(ProductModel.tags),
        )

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products(self, product_ids) -> dict[int, ProductModel]:
        ids = set(product_ids)
        if not ids:
            return {}
        rows = self.db.execute(select(ProductModel).where(ProductModel.id.in_(ids))).scalars().all()
        return {p.id: p for p in rows}

    def search(
        self,
        category: str | None = None,
        search: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        spec_filters: dict[str, list[str]] | None = None,
    ) -> list[ProductModel]:
        stmt = self._base_query()

        if category:
            stmt = stmt.join(ProductModel.category).where(CategoryModel.name == category)
        if min_price is not None:
            stmt = stmt.where(ProductModel.regular_price >= min_price)
        if max_price is not None:
            stmt = stmt.where(ProductModel.regular_price <= max_price)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    ProductModel.name.ilike(pattern),
                    ProductModel.brand.ilike(pattern),
                    ProductModel.description.ilike(pattern),
                )
            )
        #kazdy filtr specyfikacji jako osobny EXISTS
        for spec_name, values in (spec_filters or {}).items():
            if not values:
                continue
            stmt = stmt.where(
                ProductModel.specs.any(
                    (ProductSpecModel.name == spec_name) & (ProductSpecModel.value.in_(values))
                )
            )

        stmt = stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        return list(self.db.execute(stmt).scalars().unique().all())

    def get_or_create_category(self, name: str) -> CategoryModel:
        category = self.db.execute(
            select(CategoryModel).where(CategoryModel.name == name)
        ).scalar_one_or_none()
        if not category:
            category = CategoryModel(name=name)
            self.db.add(category)
            self.db.flush()
        return category

    def get_tags(self, names) -> list[TagModel]:
        names = list(dict.fromkeys(names))
        if not names:
            return []
        existing = {
            t.name: t
            for t in self.db.execute(select(TagModel).where(TagModel.name.in_(names))).scalars().all()
        }
        tags = []
        for name in names:
            tag = existing.get(name)
            if not tag:
                tag = TagModel(name=name)
                self.db.add(tag)
            tags.append(tag)
        return tags

    def list_tags(self) -> list[TagModel]:
        return list(self.db.execute(select(TagModel).order_by(TagModel.name)).scalars().all())

    def get_tag_by_name(self, name: str) -> TagModel | None:
        return self.db.execute(select(TagModel).where(TagModel.name == name)).scalar_one_or_none()

    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    def delete_product(self, product: ProductModel) -> None:
        #pozycje koszykow wskazujace na produkt znikaja razem z nim
        self.db.execute(delete(CartItemModel).where(CartItemModel.product_id == product.id))
        self.db.delete(product)

    def commit(self):
        self.db.commit()

    def refresh(self, obj):
        self.db.refresh(obj)
        return obj
