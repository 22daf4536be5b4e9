# tests/support.py
import unittest
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import storefront.data.models  # noqa: F401
from storefront.api.deps import get_session_store, get_payment_gateway
from storefront.celery_worker import celery_app
from storefront.data.database import Base, get_db
from storefront.data.models import ProductModel, CategoryModel, UserModel
from storefront.main import app
from storefront.services.payment_gateway import PaymentGateway, PaymentGatewayError
from storefront.services.session_store import SessionStore

# taski wykonywane lokalnie, bez brokera
celery_app.conf.task_always_eager = True

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

GATEWAY_SECRET = "test_key_secret"

SHIPPING = {
    "name": "Asha Rao",
    "email": "asha@example.com",
    "phone": "9876543210",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


class FakeRedis:
    """Minimalny podzbior redis.Redis uzywany przez SessionStore i RedisStorage."""

    def __init__(self):
        self.data = {}
        self.ttl = {}

    def get(self, name):
        return self.data.get(name)

    def set(self, name, value, ex=None, nx=False):
        if nx and name in self.data:
            return None
        self.data[name] = value
        if ex is not None:
            self.ttl[name] = ex
        return True

    def getdel(self, name):
        return self.data.pop(name, None)

    def delete(self, *names):
        return sum(1 for n in names if self.data.pop(n, None) is not None)


class FakePaymentGateway(PaymentGateway):
    def __init__(self, fail: bool = False):
        super().__init__(key_id="rzp_test", key_secret=GATEWAY_SECRET, base_url="http://gateway.invalid")
        self.fail = fail
        self.created = []

    def create_order(self, amount, currency, receipt, notes=None):
        if self.fail:
            raise PaymentGatewayError("Payment gateway unavailable")
        order = {
            "id": f"order_test{len(self.created) + 1:04d}",
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
        }
        self.created.append(order)
        return order


class StorefrontTestCase(unittest.TestCase):
    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.db = TestingSessionLocal()
        self.redis = FakeRedis()
        self.sessions = SessionStore(client=self.redis)
        self.gateway = FakePaymentGateway()

        def override_get_db():
            db = TestingSessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_session_store] = lambda: self.sessions
        app.dependency_overrides[get_payment_gateway] = lambda: self.gateway
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    # ---------- helpers ----------

    def make_product(
        self,
        name="Ryzen 5 7600",
        regular_price="1000.00",
        discounted_price=None,
        brand="AMD",
        category=None,
    ) -> ProductModel:
        product = ProductModel(
            name=name,
            brand=brand,
            regular_price=Decimal(regular_price),
            discounted_price=Decimal(discounted_price) if discounted_price else None,
            is_on_sale=discounted_price is not None,
            category=CategoryModel(name=category) if category else None,
        )
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def make_user(self, phone="9876543210") -> UserModel:
        user = UserModel(phone=phone, is_verified=True)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def login(self, user: UserModel) -> dict:
        token = self.sessions.create_session(user.id)
        return {"Authorization": f"Bearer {token}"}

    def token_for(self, user: UserModel) -> str:
        return self.sessions.create_session(user.id)
