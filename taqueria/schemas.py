"""
Pydantic Schemas for Request/Response Validation

Shared by the catalog API (taqueria.main) and the client-side menu core
(taqueria.menu). Field names are snake_case in Python and camelCase on
the wire; money is Decimal and serializes as an exact string.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model: camelCase aliases on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self, **kwargs) -> dict:
        """JSON-ready dict with wire (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)


# =============================================================================
# ENUMS
# =============================================================================

class CategoryIcon(str, Enum):
    FOOD = "food"
    DRINK = "drink"


class OrderStatus(str, Enum):
    """Order lifecycle: received -> started -> completed."""
    RECEIVED = "received"
    STARTED = "started"
    COMPLETED = "completed"


# =============================================================================
# CATALOG SCHEMAS
# =============================================================================

class Ingredient(WireModel):
    """Ingredient owned by a category. Default ingredients are always free."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    is_default: bool = False
    price: Decimal = Field(default=Decimal("0.00"), ge=0)


class CategoryCreate(WireModel):
    """Request schema for creating a category. `name` is derived when omitted."""
    name: Optional[str] = Field(None, max_length=100)
    translation: str = Field(..., min_length=1, max_length=100, examples=["Tacos"])
    icon: CategoryIcon = Field(default=CategoryIcon.FOOD)
    order: int = Field(default=0, ge=0)
    ingredients: List[Ingredient] = Field(default_factory=list)


class CategoryUpdate(WireModel):
    """Partial category update; fields left out are kept."""
    translation: Optional[str] = Field(None, min_length=1, max_length=100)
    icon: Optional[CategoryIcon] = None
    order: Optional[int] = Field(None, ge=0)
    ingredients: Optional[List[Ingredient]] = None


class CategoryResponse(WireModel):
    id: int
    name: str
    translation: str
    icon: CategoryIcon
    order: int
    ingredients: List[Ingredient] = Field(default_factory=list)


class MenuItemCreate(WireModel):
    """Request schema for creating a menu item."""
    name: str = Field(..., min_length=1, max_length=100, examples=["De Al Pastor"])
    translation: str = Field(default="", max_length=100, examples=["Al Pastor Tacos"])
    category: str = Field(..., min_length=1, max_length=100, examples=["tacos"])
    price: Decimal = Field(..., ge=0, examples=["13.99"])
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    meats: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    ingredients: Optional[List[str]] = None


class MenuItemUpdate(WireModel):
    """Partial menu item update; fields left out are kept."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    translation: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    meats: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    ingredients: Optional[List[str]] = None

    @field_validator("name", "translation", "category", "price")
    @classmethod
    def reject_null(cls, v):
        # Only runs for values that were sent; omitted fields stay unset
        if v is None:
            raise ValueError("Field cannot be cleared")
        return v


class MenuItemResponse(MenuItemCreate):
    id: int


# =============================================================================
# CART / ORDER SCHEMAS
# =============================================================================

class CartItem(WireModel):
    """
    A customized menu item in the cart.

    Copies the menu item's display fields at the moment it was added, so
    later menu edits never change it. `total_price` is a snapshot.
    """
    cart_id: str
    menu_item_id: int
    name: str
    translation: str = ""
    category: str
    price: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    image: Optional[str] = None
    meats: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    ingredients: Optional[List[str]] = None
    selected_meat: Optional[str] = None
    selected_size: Optional[str] = None
    selected_ingredient_ids: List[str] = Field(default_factory=list)
    selected_legacy_ingredients: List[str] = Field(default_factory=list)
    quantity: int = Field(..., ge=1)
    total_price: Decimal = Field(..., ge=0)


class OrderCreate(WireModel):
    """Request schema for placing an order."""
    order_id: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: str = Field(..., min_length=10, max_length=30, examples=["555-123-4567"])
    items: List[CartItem] = Field(..., min_length=1)
    instructions: Optional[str] = Field(None, max_length=500)
    total: Decimal = Field(..., ge=0)
    status: OrderStatus = OrderStatus.RECEIVED
    estimated_time: Optional[int] = Field(None, ge=1)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        cleaned = re.sub(r"[^\d]", "", v)
        if len(cleaned) < 10:
            raise ValueError("Phone number must have at least 10 digits")
        # Stored as typed: formatting is significant for search
        return v


class OrderResponse(WireModel):
    """Response schema for a single order."""
    id: int
    order_id: str
    phone: str
    items: List[CartItem]
    instructions: Optional[str] = None
    total: Decimal
    status: OrderStatus
    timestamp: datetime
    estimated_time: Optional[int] = None


class OrderStatusUpdate(WireModel):
    status: OrderStatus


# =============================================================================
# SETTINGS / MISC
# =============================================================================

class SettingUpdate(WireModel):
    value: str


class SettingResponse(WireModel):
    key: str
    value: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    notification_service: str
    timestamp: datetime
