"""
HTTP Catalog Service

Talks to the catalog API (taqueria.main) with httpx. Owner access is
sent as the X-Owner-Key header; HTTP failures are mapped onto the
catalog error taxonomy so callers never see httpx exceptions.
"""

import logging
from typing import Any, Optional

import httpx

from taqueria.menu.errors import (
    CatalogError,
    ConflictError,
    NotFoundError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from taqueria.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    OrderCreate,
    OrderResponse,
    OrderStatus,
    SettingResponse,
)
from taqueria.services.catalog.base import BaseCatalogService

logger = logging.getLogger(__name__)

OWNER_KEY_HEADER = "X-Owner-Key"

STATUS_ERRORS: dict[int, type[CatalogError]] = {
    400: ValidationError,
    401: UnauthorizedError,
    403: UnauthorizedError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def _error_message(response: httpx.Response) -> tuple[str, Optional[str]]:
    """Human-readable reason and offending field from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase, None

    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list) and detail:
        # FastAPI request validation: [{"loc": [...], "msg": ...}, ...]
        first = detail[0]
        loc = first.get("loc") or []
        field = str(loc[-1]) if loc else None
        return first.get("msg", "Invalid request"), field
    if isinstance(detail, str):
        return detail, None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"]), None
    return response.reason_phrase, None


def raise_for_catalog_error(response: httpx.Response) -> None:
    if response.status_code < 400:
        return
    message, field = _error_message(response)
    error_class = STATUS_ERRORS.get(response.status_code, TransportError)
    raise error_class(message, field=field)


class HttpCatalogService(BaseCatalogService):
    """
    Catalog client over HTTP.

    Args:
        base_url: Catalog API root, e.g. http://localhost:8001
        owner_key: Shared owner secret; None for customer sessions
        timeout: Per-request timeout in seconds
        client: Pre-built AsyncClient (tests pass one bound to the app)
    """

    def __init__(
        self,
        base_url: str,
        owner_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.owner_key = owner_key
        headers = {OWNER_KEY_HEADER: owner_key} if owner_key else {}
        if client is None:
            client = httpx.AsyncClient(base_url=base_url, timeout=timeout, headers=headers)
        else:
            client.headers.update(headers)
        self.client = client
        logger.info(f"HttpCatalogService initialized ({base_url})")

    @property
    def provider_name(self) -> str:
        return "http"

    @property
    def is_authorized(self) -> bool:
        return bool(self.owner_key)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e!r}")
            raise TransportError(f"Could not reach the catalog: {e}") from e

        raise_for_catalog_error(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ==========================================================================
    # CATEGORIES
    # ==========================================================================

    async def list_categories(self) -> list[CategoryResponse]:
        data = await self._request("GET", "/api/categories")
        return [CategoryResponse.model_validate(row) for row in data]

    async def create_category(self, data: CategoryCreate) -> CategoryResponse:
        body = await self._request("POST", "/api/categories", json=data.to_wire(exclude_none=True))
        return CategoryResponse.model_validate(body)

    async def update_category(self, category_id: int, data: CategoryUpdate) -> CategoryResponse:
        body = await self._request(
            "PUT", f"/api/categories/{category_id}", json=data.to_wire(exclude_unset=True)
        )
        return CategoryResponse.model_validate(body)

    async def delete_category(self, category_id: int) -> None:
        await self._request("DELETE", f"/api/categories/{category_id}")

    # ==========================================================================
    # MENU ITEMS
    # ==========================================================================

    async def list_menu_items(self) -> list[MenuItemResponse]:
        data = await self._request("GET", "/api/menu")
        return [MenuItemResponse.model_validate(row) for row in data]

    async def create_menu_item(self, data: MenuItemCreate) -> MenuItemResponse:
        body = await self._request("POST", "/api/menu", json=data.to_wire())
        return MenuItemResponse.model_validate(body)

    async def update_menu_item(self, item_id: int, data: MenuItemUpdate) -> MenuItemResponse:
        body = await self._request("PUT", f"/api/menu/{item_id}", json=data.to_wire(exclude_unset=True))
        return MenuItemResponse.model_validate(body)

    async def delete_menu_item(self, item_id: int) -> None:
        await self._request("DELETE", f"/api/menu/{item_id}")

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    async def create_order(self, data: OrderCreate) -> OrderResponse:
        body = await self._request("POST", "/api/orders", json=data.to_wire(exclude_none=True))
        return OrderResponse.model_validate(body)

    async def list_orders(self) -> list[OrderResponse]:
        data = await self._request("GET", "/api/orders")
        return [OrderResponse.model_validate(row) for row in data]

    async def update_order_status(self, order_id: str, status: OrderStatus) -> OrderResponse:
        body = await self._request(
            "PATCH", f"/api/orders/{order_id}/status", json={"status": OrderStatus(status).value}
        )
        return OrderResponse.model_validate(body)

    async def search_orders_by_phone(self, phone: str) -> list[OrderResponse]:
        data = await self._request("GET", "/api/orders/search", params={"phone": phone})
        return [OrderResponse.model_validate(row) for row in data]

    # ==========================================================================
    # SETTINGS
    # ==========================================================================

    async def get_setting(self, key: str) -> Optional[str]:
        try:
            body = await self._request("GET", f"/api/settings/{key}")
        except NotFoundError:
            return None
        return SettingResponse.model_validate(body).value

    async def put_setting(self, key: str, value: str) -> None:
        await self._request("PUT", f"/api/settings/{key}", json={"value": value})

    async def health_check(self) -> bool:
        try:
            await self._request("GET", "/health")
        except CatalogError as e:
            logger.warning(f"Catalog health check failed: {e.message}")
            return False
        return True
