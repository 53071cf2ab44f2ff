"""
FastAPI Application Entry Point

Taqueria Ordering System - Catalog API
Serves categories, menu items, orders and settings to the menu core's
HTTP catalog client and to the storefront.

Endpoints:
    - /api/categories: Category CRUD (delete refused while items remain)
    - /api/menu, /api/menu-item/{id}: Menu item CRUD
    - POST /api/orders: Place an order (public)
    - GET /api/orders, /api/orders/search: Owner order views
    - PATCH /api/orders/{order_id}/status: Advance an order (owner)
    - /api/settings/{key}: Opaque key/value settings
    - GET /health: System health check

Version: 1.0.0
"""

import asyncio
import sys
import logging
from datetime import datetime
from typing import Any, Callable, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends, Query, Request, Header
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
import redis

# Windows-specific event loop policy
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Internal imports
from taqueria.core.config import Settings, get_settings, setup_logging
from taqueria.database import get_db, init_db, engine
from taqueria.menu.cart import generate_order_id
from taqueria.menu.manager import PLACEHOLDER_ITEM
from taqueria.menu.order_status import can_transition, notify_status_change
from taqueria.menu.ordering import slugify
from taqueria.models import Category, MenuItem, Order, Setting
from taqueria.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ErrorResponse,
    HealthResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    OrderCreate,
    OrderResponse,
    OrderStatus,
    OrderStatusUpdate,
    SettingResponse,
    SettingUpdate,
)
from taqueria.services.notifications import get_notification_service
from taqueria.tasks import send_sms_notification

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and report configuration gaps before serving."""
    logger.info(
        f"{settings.app_name} {settings.app_version} for {settings.restaurant_name} "
        f"({settings.env_mode.value}, debug={settings.debug})"
    )
    await init_db()

    sms = get_notification_service()
    logger.info(f"Order SMS via {sms.provider_name}, default pickup {settings.default_estimated_minutes} min")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"Missing production config: {', '.join(missing)}")
    if not settings.owner_api_key:
        logger.warning("OWNER_API_KEY not set: owner routes will refuse every request")

    yield

    await engine.dispose()
    logger.info("Catalog API stopped")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Catalog API for the taqueria ordering system: menu management, "
        "order placement and the owner's order board."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# DEPENDENCIES
# =============================================================================

Notifier = Callable[[str, str], Any]


def dispatch_sms(phone: str, message: str) -> None:
    """Queue an SMS on the Celery worker."""
    send_sms_notification.delay(phone, message)


def get_notifier() -> Notifier:
    return dispatch_sms


async def require_owner(
    x_owner_key: Optional[str] = Header(None, alias="X-Owner-Key"),
    app_settings: Settings = Depends(get_settings),
) -> None:
    """Privileged routes need X-Owner-Key matching OWNER_API_KEY."""
    if not app_settings.owner_api_key or x_owner_key != app_settings.owner_api_key:
        raise HTTPException(status_code=401, detail="Owner access required")


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _row_to_dict(row) -> dict[str, Any]:
    """Column values of an ORM row keyed by attribute name."""
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


def category_out(row: Category) -> CategoryResponse:
    return CategoryResponse.model_validate(_row_to_dict(row))


def menu_item_out(row: MenuItem) -> MenuItemResponse:
    return MenuItemResponse.model_validate(_row_to_dict(row))


def order_out(row: Order) -> OrderResponse:
    return OrderResponse.model_validate(_row_to_dict(row))


async def _category_by_name(db: AsyncSession, name: str) -> Optional[Category]:
    result = await db.execute(select(Category).where(Category.name == name))
    return result.scalar_one_or_none()


async def _require_category(db: AsyncSession, name: str) -> None:
    if await _category_by_name(db, name) is None:
        raise HTTPException(status_code=422, detail=f"Category '{name}' does not exist")


async def _get_or_404(db: AsyncSession, model, ident: Any, label: str):
    row = await db.get(model, ident)
    if row is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row


async def _order_by_order_id(db: AsyncSession, order_id: str) -> Optional[Order]:
    result = await db.execute(select(Order).where(Order.order_id == order_id))
    return result.scalar_one_or_none()


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.restaurant_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """
    Catalog database, SMS queue broker and SMS provider status. Any
    failing component makes the overall status "degraded"; the endpoint
    itself always answers 200.
    """
    db_status = "healthy"
    try:
        await db.execute(select(func.count(Setting.key)))
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {e}"
        logger.error(f"Database health check failed: {e}")

    redis_status = "healthy"
    broker = redis.Redis.from_url(app_settings.redis_url, socket_timeout=2)
    try:
        broker.ping()
    except redis.RedisError as e:
        redis_status = f"unhealthy: {e}"
        logger.error(f"SMS queue broker unreachable: {e}")
    finally:
        broker.close()

    sms_ok = await get_notification_service().health_check()
    sms_status = "healthy" if sms_ok else "unhealthy"

    statuses = (db_status, redis_status, sms_status)
    overall = "operational" if all(s == "healthy" for s in statuses) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        redis=redis_status,
        notification_service=sms_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# CATEGORY ENDPOINTS
# =============================================================================

@app.get("/api/categories", response_model=list[CategoryResponse], tags=["Categories"])
async def list_categories(db: AsyncSession = Depends(get_db)) -> list[CategoryResponse]:
    """All categories in display order."""
    result = await db.execute(select(Category).order_by(Category.order, Category.id))
    return [category_out(row) for row in result.scalars().all()]


@app.post(
    "/api/categories",
    response_model=CategoryResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
    tags=["Categories"],
)
async def create_category(
    data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    """
    Create a category together with a placeholder item, so a category
    is never empty.
    """
    name = data.name or slugify(data.translation)
    if not name:
        raise HTTPException(status_code=422, detail="Category name is required")
    if await _category_by_name(db, name):
        raise HTTPException(status_code=409, detail=f"Category '{name}' already exists")

    category = Category(
        name=name,
        translation=data.translation,
        icon=data.icon.value,
        order=data.order,
        ingredients=[ing.to_wire() for ing in data.ingredients],
    )
    db.add(category)
    db.add(MenuItem(
        category=name,
        name=PLACEHOLDER_ITEM["name"],
        translation=PLACEHOLDER_ITEM["translation"],
        price=PLACEHOLDER_ITEM["price"],
        description=PLACEHOLDER_ITEM["description"],
    ))
    await db.commit()
    await db.refresh(category)

    logger.info(f"Category {name!r} created at order {category.order}")
    return category_out(category)


@app.put("/api/categories/{category_id}", response_model=CategoryResponse, tags=["Categories"])
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await _get_or_404(db, Category, category_id, "Category")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "ingredients" in changes:
        changes["ingredients"] = [ing.to_wire() for ing in data.ingredients]
    if "icon" in changes:
        changes["icon"] = data.icon.value
    for field, value in changes.items():
        setattr(category, field, value)

    await db.commit()
    await db.refresh(category)
    return category_out(category)


@app.delete(
    "/api/categories/{category_id}",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["Categories"],
)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    category = await _get_or_404(db, Category, category_id, "Category")

    result = await db.execute(
        select(func.count(MenuItem.id)).where(MenuItem.category == category.name)
    )
    item_count = result.scalar() or 0
    if item_count:
        raise HTTPException(
            status_code=409,
            detail=(
                f'Cannot delete category "{category.translation}" because it contains '
                f"{item_count} menu item(s). Please move or delete these items first."
            ),
        )

    await db.delete(category)
    await db.commit()
    logger.info(f"Category {category.name!r} deleted")
    return {"success": True, "message": "Category deleted"}


# =============================================================================
# MENU ITEM ENDPOINTS
# =============================================================================

@app.get("/api/menu", response_model=list[MenuItemResponse], tags=["Menu"])
async def list_menu_items(db: AsyncSession = Depends(get_db)) -> list[MenuItemResponse]:
    result = await db.execute(select(MenuItem).order_by(MenuItem.id))
    return [menu_item_out(row) for row in result.scalars().all()]


@app.get("/api/menu/{category}", response_model=list[MenuItemResponse], tags=["Menu"])
async def list_menu_items_by_category(
    category: str,
    db: AsyncSession = Depends(get_db),
) -> list[MenuItemResponse]:
    result = await db.execute(
        select(MenuItem).where(MenuItem.category == category).order_by(MenuItem.id)
    )
    return [menu_item_out(row) for row in result.scalars().all()]


@app.get("/api/menu-item/{item_id}", response_model=MenuItemResponse, tags=["Menu"])
async def get_menu_item(item_id: int, db: AsyncSession = Depends(get_db)) -> MenuItemResponse:
    return menu_item_out(await _get_or_404(db, MenuItem, item_id, "Menu item"))


@app.post("/api/menu", response_model=MenuItemResponse, status_code=201, tags=["Menu"])
async def create_menu_item(
    data: MenuItemCreate,
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    await _require_category(db, data.category)

    item = MenuItem(**data.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info(f"Menu item #{item.id} created in {item.category!r}")
    return menu_item_out(item)


@app.put("/api/menu/{item_id}", response_model=MenuItemResponse, tags=["Menu"])
async def update_menu_item(
    item_id: int,
    data: MenuItemUpdate,
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    """Partial update: fields left out of the body are kept."""
    item = await _get_or_404(db, MenuItem, item_id, "Menu item")

    changes = data.model_dump(exclude_unset=True)
    if "category" in changes:
        await _require_category(db, changes["category"])

    for field, value in changes.items():
        setattr(item, field, value)

    await db.commit()
    await db.refresh(item)
    logger.info(f"Menu item #{item_id} updated: {sorted(changes)}")
    return menu_item_out(item)


@app.delete("/api/menu/{item_id}", tags=["Menu"])
async def delete_menu_item(item_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    item = await _get_or_404(db, MenuItem, item_id, "Menu item")
    await db.delete(item)
    await db.commit()
    logger.info(f"Menu item #{item_id} deleted")
    return {"success": True, "message": "Menu item deleted"}


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=OrderResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Place Order",
)
async def create_order(
    order_data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    app_settings: Settings = Depends(get_settings),
) -> OrderResponse:
    """
    Place an order. The line items are stored as given: they are frozen
    copies of the cart and never follow later menu edits.
    """
    order_id = order_data.order_id or generate_order_id()
    if await _order_by_order_id(db, order_id):
        raise HTTPException(status_code=409, detail=f"Order {order_id} already exists")

    order = Order(
        order_id=order_id,
        phone=order_data.phone,
        items=[line.to_wire() for line in order_data.items],
        instructions=order_data.instructions,
        total=order_data.total,
        status=order_data.status.value,
        estimated_time=order_data.estimated_time or app_settings.default_estimated_minutes,
    )
    db.add(order)
    await db.commit()
    await db.refresh(order)
    logger.info(f"Order {order_id} placed ({order.total})")

    notify_status_change(
        notifier,
        order.phone,
        order.order_id,
        OrderStatus(order.status),
        app_settings.restaurant_name,
        order.estimated_time,
    )
    return order_out(order)


@app.get(
    "/api/orders",
    response_model=list[OrderResponse],
    dependencies=[Depends(require_owner)],
    tags=["Orders"],
)
async def list_orders(db: AsyncSession = Depends(get_db)) -> list[OrderResponse]:
    """All orders, newest first."""
    result = await db.execute(select(Order).order_by(Order.timestamp.desc(), Order.id.desc()))
    return [order_out(row) for row in result.scalars().all()]


@app.get(
    "/api/orders/search",
    response_model=list[OrderResponse],
    dependencies=[Depends(require_owner)],
    tags=["Orders"],
)
async def search_orders(
    phone: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[OrderResponse]:
    """Orders whose phone contains the given text, formatting included."""
    if not phone:
        raise HTTPException(status_code=400, detail="Phone number is required")
    result = await db.execute(
        select(Order)
        .where(Order.phone.contains(phone, autoescape=True))
        .order_by(Order.timestamp.desc(), Order.id.desc())
    )
    # LIKE is case-insensitive on some backends; keep exact substring semantics
    return [order_out(row) for row in result.scalars().all() if phone in row.phone]


@app.patch(
    "/api/orders/{order_id}/status",
    response_model=OrderResponse,
    dependencies=[Depends(require_owner)],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    app_settings: Settings = Depends(get_settings),
) -> OrderResponse:
    order = await _order_by_order_id(db, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

    current = OrderStatus(order.status)
    if not can_transition(current, data.status):
        raise HTTPException(
            status_code=409,
            detail=f"Order {order_id} cannot move from {current.value} to {data.status.value}",
        )

    order.status = data.status.value
    await db.commit()
    await db.refresh(order)
    logger.info(f"Order {order_id}: {current.value} -> {order.status}")

    notify_status_change(
        notifier,
        order.phone,
        order.order_id,
        data.status,
        app_settings.restaurant_name,
        order.estimated_time,
    )
    return order_out(order)


# =============================================================================
# SETTINGS ENDPOINTS
# =============================================================================

@app.get("/api/settings/{key}", response_model=SettingResponse, tags=["Settings"])
async def get_setting(key: str, db: AsyncSession = Depends(get_db)) -> SettingResponse:
    setting = await _get_or_404(db, Setting, key, f"Setting '{key}'")
    return SettingResponse(key=setting.key, value=setting.value)


@app.put(
    "/api/settings/{key}",
    response_model=SettingResponse,
    dependencies=[Depends(require_owner)],
    tags=["Settings"],
)
async def put_setting(
    key: str,
    data: SettingUpdate,
    db: AsyncSession = Depends(get_db),
) -> SettingResponse:
    setting = await db.get(Setting, key)
    if setting is None:
        setting = Setting(key=key, value=data.value)
        db.add(setting)
    else:
        setting.value = data.value
    await db.commit()
    return SettingResponse(key=key, value=data.value)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )
