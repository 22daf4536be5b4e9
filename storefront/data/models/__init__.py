#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel
from storefront.data.models.product import (
    CategoryModel,
    TagModel,
    ProductModel,
    ProductSpecModel,
    ProductImageModel,
)
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel, OrderItemModel
from storefront.data.models.build import PCBuildModel

__all__ = [
    "UserModel",
    "CategoryModel",
    "TagModel",
    "ProductModel",
    "ProductSpecModel",
    "ProductImageModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "PCBuildModel",
]
