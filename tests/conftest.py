import os
import tempfile

# Configure the app before anything under shared/ or services/ is imported
_DB_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/storefront.db"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["OTLP_ENDPOINT"] = ""
os.environ["APP_URL"] = "https://store.example.com"
os.environ["ORDER_RATE_LIMIT"] = "1000/minute"
os.environ["HOTPAY_WEBHOOK_SECRET"] = ""
os.environ["HOTPAY_API_TOKEN"] = ""

from decimal import Decimal

import httpx
import pytest
from sqlalchemy import func, select

from main import app
from shared.config.database import AsyncSessionLocal, Base, engine
from shared.security import create_access_token
from services.catalog_service.models import Template
from services.order_service.models import Order
from services.order_service.repository import OrderRepository
from services.payment_service.gateway import HotPayClient, get_gateway_client


class FakeGateway(HotPayClient):
    """HotPayClient with the processed_payments lookup served from a dict."""

    def __init__(self):
        super().__init__(
            base_url="https://pay.example.com",
            api_url="https://api.example.com",
            app_url="https://store.example.com",
            api_token="partner-token",
            default_item_id="default-item",
        )
        self.payments = {}
        self.lookups = []

    async def lookup_payment(self, memo):
        self.lookups.append(memo)
        result = self.payments.get(memo)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
async def db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def client(db, gateway):
    app.dependency_overrides[get_gateway_client] = lambda: gateway
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id="user-1"):
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}
    return _headers


@pytest.fixture
def make_template(db):
    async def _make(slug="landing-kit", price="49.99", hotpay_item_id="hp-landing-kit", is_active=True, name=None):
        async with AsyncSessionLocal() as session:
            template = Template(
                name=name or slug.replace("-", " ").title(),
                slug=slug,
                description=f"{slug} template",
                price=Decimal(price),
                currency="USD",
                hotpay_item_id=hotpay_item_id,
                download_url=f"https://cdn.example.com/{slug}.zip",
                is_active=is_active,
            )
            session.add(template)
            await session.commit()
            await session.refresh(template)
            return template
    return _make


@pytest.fixture
def load_order():
    async def _load(memo=None, order_id=None):
        async with AsyncSessionLocal() as session:
            if memo is not None:
                return await OrderRepository.get_by_memo(session, memo)
            return await session.get(Order, order_id)
    return _load


@pytest.fixture
def count_orders():
    async def _count():
        async with AsyncSessionLocal() as session:
            result = await session.execute(select(func.count()).select_from(Order))
            return result.scalar_one()
    return _count
