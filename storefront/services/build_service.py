# storefront/services/build_service.py
import secrets
import string
from decimal import Decimal
from typing import Dict, Any, List, Tuple

from sqlalchemy.orm import Session

from storefront.data.models.build import PCBuildModel
from storefront.domain.pricing import effective_price
from storefront.domain.schemas import BuildCreateIn, ComponentIn
from storefront.repos.build_repo import BuildRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SHORT_ID_ALPHABET = string.ascii_letters + string.digits + "_-"
SHORT_ID_LENGTH = 6


def new_short_id() -> str:
    return "".join(secrets.choice(SHORT_ID_ALPHABET) for _ in range(SHORT_ID_LENGTH))


def check_compatibility(components: Dict[str, ComponentIn]) -> Tuple[bool, List[str]]:
    # brak regul kompatybilnosci - kazdy zestaw jest akceptowany
    return True, []


def build_to_dict(build: PCBuildModel) -> Dict[str, Any]:
    return {
        "id": build.id,
        "short_id": build.short_id,
        "name": build.name,
        "user_id": build.user_id,
        "components": build.components,
        "total_price": build.total_price,
        "is_public": build.is_public,
        "created_at": build.created_at,
    }


class BuildService:
    """PC Builder - zapis listy czesci pod krotkim id do udostepniania."""

    def __init__(self, db: Session):
        self.repo = BuildRepo(db)
        self.products = ProductRepo(db)

    def create_build(self, payload: BuildCreateIn, user_id: int | None, base_url: str) -> Dict[str, Any]:
        compatible, issues = check_compatibility(payload.components)

        short_id = new_short_id()
        while self.repo.get_by_short_id(short_id):
            short_id = new_short_id()

        components = {
            slot: c.model_dump(mode="json") for slot, c in payload.components.items()
        }
        build = self.repo.create(
            PCBuildModel(
                short_id=short_id,
                name=payload.name or f"Build {short_id}",
                user_id=user_id,
                components=components,
                total_price=self.total_price(payload.components),
                is_public=payload.is_public,
            )
        )

        logger.info(f"Build {build.short_id} saved (user {user_id})")
        return {
            "short_id": build.short_id,
            "build_url": f"{base_url.rstrip('/')}/pc-builder?id={build.short_id}",
            "compatible": compatible,
            "issues": issues,
        }

    def total_price(self, components: Dict[str, ComponentIn]) -> Decimal:
        """Cena z katalogu gdy komponent wskazuje istniejacy produkt, inaczej podana przez klienta."""
        products = self.products.get_products(c.id for c in components.values() if c.id is not None)

        total = Decimal("0.00")
        for component in components.values():
            product = products.get(component.id)
            if product:
                total += effective_price(product.regular_price, product.discounted_price, product.is_on_sale)
            elif component.price is not None:
                total += component.price
        return total

    def get_build(self, short_id: str) -> Dict[str, Any]:
        build = self.repo.get_by_short_id(short_id)
        if not build:
            raise LookupError("Build not found")
        return build_to_dict(build)

    def latest_build(self, user_id: int) -> Dict[str, Any]:
        build = self.repo.latest_private(user_id)
        if not build:
            raise LookupError("No builds found")
        return build_to_dict(build)

    def delete_build(self, short_id: str, user_id: int) -> None:
        build = self.repo.get_by_short_id(short_id)

        if not build:
            raise LookupError("Build not found")

        if build.user_id != user_id:
            raise PermissionError("Build belongs to another user")

        self.repo.delete(build)
        logger.info(f"Build {short_id} deleted by user {user_id}")
