# storefront/data/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import ProductModel, ProductSpecModel, CategoryModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# (kategoria, nazwa, marka, cena, cena po rabacie, specyfikacja)
CATALOG = [
    ("CPU", "Ryzen 7 7800X3D", "AMD", "36999.00", "33999.00", {"Socket": "AM5", "Cores": "8"}),
    ("CPU", "Core i5-14600K", "Intel", "29499.00", None, {"Socket": "LGA1700", "Cores": "14"}),
    ("Motherboard", "B650 Tomahawk", "MSI", "21999.00", None, {"Socket": "AM5", "Memory Type": "DDR5"}),
    ("Memory", "Vengeance 32GB DDR5-6000", "Corsair", "10499.00", "9499.00", {"Memory Type": "DDR5"}),
    ("GPU", "GeForce RTX 4070 Super", "ASUS", "62999.00", None, {"VRAM": "12GB"}),
    ("Storage", "990 Pro 2TB", "Samsung", "16999.00", None, {"Interface": "PCIe 4.0"}),
    ("PSU", "RM850x", "Corsair", "12999.00", None, {"Wattage": "850W"}),
]


def seed(db: Session) -> int:
    # tylko gdy katalog jest pusty
    if db.query(ProductModel).first():
        return 0

    categories: dict[str, CategoryModel] = {}
    for category, name, brand, price, discounted, specs in CATALOG:
        if category not in categories:
            categories[category] = CategoryModel(name=category)
        db.add(
            ProductModel(
                name=name,
                brand=brand,
                category=categories[category],
                regular_price=Decimal(price),
                discounted_price=Decimal(discounted) if discounted else None,
                is_on_sale=discounted is not None,
                specs=[
                    ProductSpecModel(name=k, value=v, sort_order=i)
                    for i, (k, v) in enumerate(specs.items())
                ],
            )
        )
    db.commit()
    logger.info(f"Seeded {len(CATALOG)} products")
    return len(CATALOG)


if __name__ == "__main__":
    import storefront.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()
