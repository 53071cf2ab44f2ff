import os

# Must be set before taqueria is imported: settings and the engine are
# built at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENV_MODE"] = "development"
os.environ["OWNER_API_KEY"] = "test-owner-key"
os.environ["DEBUG"] = "false"

from decimal import Decimal  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from taqueria.database import Base, get_db  # noqa: E402
from taqueria import models  # noqa: E402,F401  registers the tables on Base.metadata
from taqueria.schemas import Ingredient, MenuItemResponse  # noqa: E402
from taqueria.services.catalog.memory import InMemoryCatalogService  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def owner_headers() -> dict[str, str]:
    return {"X-Owner-Key": "test-owner-key"}


@pytest.fixture
def make_item():
    def _make(item_id: int = 1, **overrides) -> MenuItemResponse:
        data = {
            "id": item_id,
            "name": "De Al Pastor",
            "translation": "Al Pastor Tacos",
            "category": "tacos",
            "price": Decimal("10.00"),
            "description": "Three soft corn tortillas",
            "meats": ["Al Pastor", "Carnitas"],
            "sizes": None,
            "ingredients": ["Cilantro", "Guacamole (+$2)"],
        }
        data.update(overrides)
        return MenuItemResponse(**data)

    return _make


@pytest.fixture
def ingredient_catalog() -> list[Ingredient]:
    return [
        Ingredient(id="a", name="Cilantro", is_default=True, price=Decimal("0.00")),
        Ingredient(id="b", name="Queso", is_default=False, price=Decimal("2.50")),
    ]


@pytest.fixture
def sms_outbox() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def catalog(sms_outbox) -> InMemoryCatalogService:
    return InMemoryCatalogService.with_sample_menu(
        notifier=lambda phone, message: sms_outbox.append((phone, message)),
    )


@pytest.fixture
async def db_sessionmaker():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def api_client(db_sessionmaker, sms_outbox):
    from taqueria.main import app, get_notifier

    async def override_get_db():
        async with db_sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = (
        lambda: lambda phone, message: sms_outbox.append((phone, message))
    )
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
