import os

# Settings are read at import time, so the test environment goes first
os.environ["ENV"] = "testing"
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("PAYMENT_KEY_ID", "rzp_test_key")
os.environ.setdefault("PAYMENT_KEY_SECRET", "rzp_test_secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import json
import itertools
import time
from decimal import Decimal
from typing import Generator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from main import app
from core.config import settings
from core.database import Base
from models import Category, Product, ProductImage, User, Role
from services.payment_gateway import PaymentGateway
from services.token_service import TokenService
from utils.deps import get_db, get_payment_gateway
from utils.hashing import get_password_hash

# SYNC SQLite for testing (matches sync service layer)
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

TEST_PASSWORD = "TestPassword123"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


class GatewayRecorder:
    """Answers the gateway's POST /orders and remembers every request body."""

    def __init__(self):
        self.requests = []
        self.fail_with = None
        self.delay = 0.0
        self._ids = itertools.count(1)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.delay:
            time.sleep(self.delay)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"error": {"description": "gateway down"}})

        body = json.loads(request.content)
        self.requests.append(body)
        return httpx.Response(200, json={
            "id": f"order_test{next(self._ids):04d}",
            "amount": body["amount"],
            "currency": body["currency"],
            "receipt": body["receipt"],
            "status": "created"
        })


@pytest.fixture
def gateway_recorder() -> GatewayRecorder:
    return GatewayRecorder()


@pytest.fixture
def gateway(gateway_recorder) -> PaymentGateway:
    return PaymentGateway(
        base_url="https://gateway.test/v1",
        key_id=settings.PAYMENT_KEY_ID,
        key_secret=settings.PAYMENT_KEY_SECRET,
        transport=httpx.MockTransport(gateway_recorder)
    )


@pytest.fixture
async def client(session: Session, gateway: PaymentGateway):
    """
    Yields an anonymous HTTP client against the app and the test database.

    Route handlers share the test session; the access gate opens its own
    sessions on the same database.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.state.session_factory = TestingSessionLocal

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def make_user(session: Session, username: str, role: Role = Role.CUSTOMER) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
        role=role
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer(session) -> User:
    return make_user(session, "customer")


@pytest.fixture
def admin(session) -> User:
    return make_user(session, "admin", Role.ADMIN)


def client_with_cookie(token: str) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies={settings.AUTH_COOKIE_NAME: token}
    )


@pytest.fixture
async def customer_client(client, customer, session):
    """Client logged in as the customer fixture."""
    token = TokenService.issue(customer, session)
    async with client_with_cookie(token) as ac:
        yield ac


@pytest.fixture
async def admin_client(client, admin, session):
    """Client logged in as the admin fixture."""
    token = TokenService.issue(admin, session)
    async with client_with_cookie(token) as ac:
        yield ac


@pytest.fixture
def category(session) -> Category:
    model = Category(name="Electronics")
    session.add(model)
    session.commit()
    session.refresh(model)
    return model


def make_product(session: Session, name: str, price: str, category: Category | None = None,
                 image_url: str | None = None, stock: int = 10) -> Product:
    product = Product(
        name=name,
        description=f"{name} description",
        price=Decimal(price),
        stock=stock,
        category=category
    )
    if image_url:
        product.images.append(ProductImage(image_url=image_url))
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@pytest.fixture
def phone(session, category) -> Product:
    return make_product(session, "Phone", "199.99", category, image_url="https://img.test/phone.png")


@pytest.fixture
def cable(session, category) -> Product:
    return make_product(session, "Cable", "5.50", category)
