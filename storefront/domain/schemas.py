# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Dict, Any, Literal
from decimal import Decimal
from datetime import datetime

from storefront.domain.statuses import OrderStatus

PHONE_PATTERN = r"^\d{10}$"
PINCODE_PATTERN = r"^\d{6}$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class CamelModel(BaseModel):
    """Baza dla schematow - JSON w camelCase, w Pythonie snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


# =====================================================
# KATALOG
# =====================================================
class ProductSnapshot(CamelModel):
    """Snapshot produktu trzymany przy pozycji koszyka."""

    id: int
    name: str
    brand: str = ""
    regular_price: Decimal
    discounted_price: Decimal | None = None
    is_on_sale: bool = False


class SpecIn(CamelModel):
    name: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)


class SpecOut(CamelModel):
    name: str
    value: str


class ProductIn(CamelModel):
    """Schema dla tworzenia/edycji produktu (admin)."""

    name: str = Field(..., min_length=1, max_length=200)
    brand: str = ""
    description: str = ""
    category: str | None = None
    regular_price: Decimal = Field(..., gt=0)
    discounted_price: Decimal | None = Field(None, ge=0)
    is_on_sale: bool = False
    specs: List[SpecIn] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class ProductOut(CamelModel):
    id: int
    name: str
    brand: str
    description: str
    category: str | None = None
    regular_price: Decimal
    discounted_price: Decimal | None = None
    is_on_sale: bool
    price: Decimal
    specs: List[SpecOut]
    images: List[str]
    tags: List[str]
    created_at: datetime
    updated_at: datetime


class TagIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)


class TagOut(CamelModel):
    id: int
    name: str


# =====================================================
# KOSZYK
# =====================================================
class CartItemIn(CamelModel):
    """Pozycja dodawana do koszyka. Ilosc jest przycinana do [1, 8]."""

    id: int = Field(..., gt=0, description="ID produktu")
    quantity: int = 1
    custom_build_name: str | None = None


class AddToCartIn(CamelModel):
    items: List[CartItemIn] = Field(..., min_length=1)


class UpdateCartItemIn(CamelModel):
    cart_item_id: int = Field(..., gt=0)
    quantity: int


class CartLineOut(CamelModel):
    id: int
    product_id: int
    quantity: int
    custom_build_name: str | None = None
    product: ProductSnapshot


# =====================================================
# CHECKOUT / ZAMOWIENIA
# =====================================================
class CheckoutItemIn(CamelModel):
    id: int = Field(..., gt=0, description="ID produktu")
    quantity: int = Field(..., ge=1, le=8)


class ShippingDetailsIn(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    payment_method: Literal["cod", "online"]


class CheckoutIn(CamelModel):
    items: List[CheckoutItemIn] = Field(..., min_length=1)
    shipping_details: ShippingDetailsIn


class ShippingAddressOut(CamelModel):
    full_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str


class OrderItemOut(CamelModel):
    product_id: int
    product_name: str
    quantity: int
    price: Decimal


class RazorpayOut(CamelModel):
    order_id: str
    amount: int
    currency: str


class OrderOut(CamelModel):
    id: int
    user_id: int
    status: str
    payment_status: str | None = None
    payment_method: str
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    shipping_address: ShippingAddressOut
    items: List[OrderItemOut]
    external_payment_order_id: str | None = None
    external_payment_id: str | None = None
    paid_at: datetime | None = None
    created_at: datetime
    razorpay: RazorpayOut | None = None


class CheckoutOut(CamelModel):
    success: bool = True
    payment_method: str
    order: OrderOut


class PaymentVerifyIn(BaseModel):
    """Callback z bramki platnosci - nazwy pol narzucone przez Razorpay."""

    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class OrderStatusIn(CamelModel):
    status: OrderStatus


# =====================================================
# UZYTKOWNICY / AUTH
# =====================================================
class OtpRequestIn(CamelModel):
    phone: str = Field(..., pattern=PHONE_PATTERN)


class OtpVerifyIn(CamelModel):
    phone: str = Field(..., pattern=PHONE_PATTERN)
    otp: str = Field(..., pattern=r"^\d{6}$")


class DevLoginIn(CamelModel):
    phone: str = Field(..., pattern=PHONE_PATTERN)
    name: str | None = None


class UserRead(CamelModel):
    id: int
    phone: str
    name: str | None = None
    email: str | None = None
    is_verified: bool


class SessionOut(CamelModel):
    token: str
    user: UserRead


class ProfileUpdateIn(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    email: str | None = Field(None, pattern=EMAIL_PATTERN)


class AdminLoginIn(CamelModel):
    password: str = Field(..., min_length=1)


# =====================================================
# PC BUILDER
# =====================================================
class ComponentIn(CamelModel):
    type: str
    id: int | None = None
    name: str | None = None
    price: Decimal | None = None
    brand: str | None = None


class BuildCreateIn(CamelModel):
    components: Dict[str, ComponentIn] = Field(..., min_length=1)
    name: str | None = None
    is_public: bool = True


class BuildCreatedOut(CamelModel):
    short_id: str
    build_url: str
    compatible: bool
    issues: List[str]


class BuildOut(CamelModel):
    id: int
    short_id: str
    name: str
    user_id: int | None = None
    components: Dict[str, Any]
    total_price: Decimal
    is_public: bool
    created_at: datetime


class ProfileOut(CamelModel):
    user: UserRead
    orders: List[OrderOut]
    builds: List[BuildOut]
