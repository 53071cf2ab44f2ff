"""
Menu Management Session

Glue between the owner's menu editor and the catalog: fetches data,
routes edits through the staging and ordering models, and reports the
outcome of each mutation as a transient Notice.

Every mutation follows the same cycle: call the catalog, refetch the
affected collection on success, leave local state untouched on failure.
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterable, Optional

from taqueria.menu.errors import CatalogError, ConflictError, NotFoundError, ValidationError
from taqueria.menu.ingredients import add_ingredient, remove_ingredient
from taqueria.menu.ordering import (
    NEW_CATEGORY_ID,
    CategoryOrderList,
    ItemOrderBook,
    apply_custom_order,
    slugify,
)
from taqueria.menu.staging import CommitReport, StagingModel
from taqueria.schemas import (
    CategoryCreate,
    CategoryIcon,
    CategoryResponse,
    CategoryUpdate,
    Ingredient,
    MenuItemCreate,
    MenuItemResponse,
)

if TYPE_CHECKING:
    from taqueria.services.catalog.base import BaseCatalogService

logger = logging.getLogger(__name__)

ITEM_ORDER_SETTING = "menu_item_order"

PLACEHOLDER_ITEM = {
    "name": "New Item",
    "translation": "Click to edit",
    "price": Decimal("0.00"),
    "description": "Add description here",
}


@dataclass
class Notice:
    """Transient notification shown after a mutation."""
    title: str
    detail: Optional[str] = None
    level: str = "success"
    retryable: bool = False

    @classmethod
    def from_error(cls, title: str, error: CatalogError) -> "Notice":
        return cls(title=title, detail=error.message, level="error", retryable=error.retryable)


@dataclass
class CategoryDraft:
    """The category being created in the category dialog."""
    translation: str = ""
    icon: CategoryIcon = CategoryIcon.FOOD
    ingredients: list[Ingredient] = field(default_factory=list)

    @property
    def name(self) -> str:
        return slugify(self.translation)


class MenuManager:
    """
    Owner's menu editing session.

    Example:
        >>> manager = MenuManager(get_catalog_service())
        >>> await manager.refresh()
        >>> manager.staging.begin_edit(item.id)
        >>> manager.staging.stage_field_edit(item.id, "price", "12.50")
        >>> await manager.save_item(item.id)
    """

    def __init__(self, catalog: "BaseCatalogService"):
        self.catalog = catalog
        self.staging = StagingModel(catalog)
        self.categories: list[CategoryResponse] = []
        self.items: list[MenuItemResponse] = []
        self.item_order = ItemOrderBook()
        self.category_order = CategoryOrderList()
        self.draft: Optional[CategoryDraft] = None
        self.notices: list[Notice] = []

    # ==========================================================================
    # NOTICES
    # ==========================================================================

    def _notify(self, notice: Notice) -> Notice:
        self.notices.append(notice)
        if notice.level == "error":
            logger.warning(f"{notice.title}: {notice.detail}")
        else:
            logger.info(notice.title)
        return notice

    def pop_notices(self) -> list[Notice]:
        notices, self.notices = self.notices, []
        return notices

    # ==========================================================================
    # FETCHING
    # ==========================================================================

    async def refresh(self) -> None:
        await self.refresh_categories()
        await self.refresh_items()
        await self.refresh_item_order()

    async def refresh_categories(self) -> None:
        self.categories = await self.catalog.list_categories()
        previous = self.category_order
        self.category_order = CategoryOrderList.from_categories(self.categories)
        marker_index = previous.marker_index
        if marker_index is None or self.draft is None:
            return
        # Reorders made while the draft is open exist only locally
        local_ids = [entry_id for entry_id in previous.ids() if entry_id != NEW_CATEGORY_ID]
        self.category_order = CategoryOrderList(
            apply_custom_order(self.category_order.entries, local_ids)
        )
        self.category_order.insert_at(previous.marker, marker_index - 1)

    async def refresh_items(self) -> None:
        self.items = await self.catalog.list_menu_items()
        self.staging.load(self.items)

    async def refresh_item_order(self) -> None:
        raw = await self.catalog.get_setting(ITEM_ORDER_SETTING)
        if not raw:
            self.item_order = ItemOrderBook()
            return
        try:
            self.item_order = ItemOrderBook.from_dict(json.loads(raw))
        except (ValueError, TypeError) as e:
            logger.warning(f"Ignoring malformed {ITEM_ORDER_SETTING}: {e}")
            self.item_order = ItemOrderBook()

    def category(self, name: str) -> Optional[CategoryResponse]:
        return next((c for c in self.categories if c.name == name), None)

    def items_in(self, category: str) -> list[MenuItemResponse]:
        return [item for item in self.items if item.category == category]

    def grouped_items(self) -> list[tuple[CategoryResponse, list[MenuItemResponse]]]:
        """Categories in display order with their items as they should be shown."""
        grouped = []
        for category in sorted(self.categories, key=lambda c: (c.order, c.id)):
            arranged = self.item_order.arrange(category.name, self.items_in(category.name))
            grouped.append((category, [self.staging.display(item) for item in arranged]))
        return grouped

    # ==========================================================================
    # ITEM EDITING
    # ==========================================================================

    async def save_item(self, item_id: int) -> Notice:
        try:
            updated = await self.staging.commit_edit(item_id)
        except CatalogError as e:
            return self._notify(Notice.from_error("Failed to update menu item", e))
        await self.refresh_items()
        name = updated.name if updated else f"#{item_id}"
        return self._notify(Notice(title="Menu item updated", detail=name))

    async def save_category_items(self, category: str) -> CommitReport:
        ids = [item.id for item in self.items_in(category)]
        report = await self.staging.commit_category(ids)
        await self.refresh_items()
        if report.ok:
            self._notify(Notice(title="Changes saved", detail=f"{len(report.saved)} item(s) updated"))
        else:
            first = next(iter(report.failed.values()))
            self._notify(Notice(
                title=f"Failed to save {len(report.failed)} item(s)",
                detail=first.message,
                level="error",
                retryable=any(e.retryable for e in report.failed.values()),
            ))
        return report

    def cancel_item(self, item_id: int) -> None:
        self.staging.cancel_edit(item_id)

    def cancel_category_items(self, category: str) -> None:
        self.staging.cancel_category(item.id for item in self.items_in(category))

    async def create_item(self, category: str, after_index: int = -1) -> Optional[MenuItemResponse]:
        """
        Create a placeholder item at a position in the category and put it
        straight into edit mode.
        """
        existing = self.items_in(category)
        try:
            self.validate_item_category(category)
            created = await self.catalog.create_menu_item(
                MenuItemCreate(category=category, **PLACEHOLDER_ITEM)
            )
        except CatalogError as e:
            self._notify(Notice.from_error("Failed to create menu item", e))
            return None

        book = ItemOrderBook(self.item_order.to_dict())
        book.insert_item(category, existing, created.id, after_index)
        await self.refresh_items()
        await self._persist_item_order(book)
        self.staging.begin_edit(created.id)
        self._notify(Notice(title="Menu item created"))
        return created

    async def delete_item(self, item_id: int) -> bool:
        try:
            await self.catalog.delete_menu_item(item_id)
        except NotFoundError:
            # Already gone elsewhere; treat as deleted
            pass
        except CatalogError as e:
            self._notify(Notice.from_error("Failed to delete menu item", e))
            return False

        self.staging.forget(item_id)
        book = ItemOrderBook(self.item_order.to_dict())
        book.purge(item_id)
        await self.refresh_items()
        await self._persist_item_order(book)
        self._notify(Notice(title="Menu item deleted"))
        return True

    # ==========================================================================
    # ITEM ORDER
    # ==========================================================================

    async def move_item(self, category: str, index: int, direction: int) -> bool:
        sequence = self.item_order.sequence(category, self.items_in(category))
        moved = sequence.move_up(index) if direction < 0 else sequence.move_down(index)
        if not moved:
            return False
        return await self._save_item_sequence(category, sequence.ids())

    async def drag_item(self, category: str, from_id: int, to_id: int) -> bool:
        sequence = self.item_order.sequence(category, self.items_in(category))
        if not sequence.reorder_drag_drop(from_id, to_id):
            return False
        return await self._save_item_sequence(category, sequence.ids())

    async def _save_item_sequence(self, category: str, ids: list[int]) -> bool:
        book = ItemOrderBook(self.item_order.to_dict())
        book.set_order(category, ids)
        return await self._persist_item_order(book)

    async def _persist_item_order(self, book: ItemOrderBook) -> bool:
        """Write the item order; the local copy changes only once it is stored."""
        try:
            await self.catalog.put_setting(ITEM_ORDER_SETTING, json.dumps(book.to_dict()))
        except CatalogError as e:
            self._notify(Notice.from_error("Failed to save item order", e))
            return False
        self.item_order = book
        return True

    # ==========================================================================
    # CATEGORY DIALOG
    # ==========================================================================

    def open_category_draft(self) -> CategoryDraft:
        self.draft = CategoryDraft()
        self.category_order = CategoryOrderList.from_categories(self.categories)
        return self.draft

    def update_category_draft(
        self,
        translation: Optional[str] = None,
        icon: Optional[CategoryIcon] = None,
    ) -> None:
        if self.draft is None:
            self.open_category_draft()
        if translation is not None:
            self.draft.translation = translation
        if icon is not None:
            self.draft.icon = CategoryIcon(icon)
        self.category_order.sync_draft(self.draft.translation, self.draft.icon.value)

    def add_draft_ingredient(self, name: str, price: Any = Decimal("0.00"), is_default: bool = False) -> None:
        if self.draft is not None:
            self.draft.ingredients = add_ingredient(self.draft.ingredients, name, price, is_default)

    def remove_draft_ingredient(self, ingredient_id: str) -> None:
        if self.draft is not None:
            self.draft.ingredients = remove_ingredient(self.draft.ingredients, ingredient_id)

    def discard_category_draft(self) -> None:
        """Drop the draft along with any reorders made while it was open."""
        self.draft = None
        self.category_order = CategoryOrderList.from_categories(self.categories)

    async def create_category(self) -> Optional[CategoryResponse]:
        """
        Persist the draft category at the position of its marker, then
        store the displayed order of every other category.
        """
        draft = self.draft
        if draft is None or not draft.translation.strip():
            self._notify(Notice(title="Category name is required", level="error"))
            return None

        marker_index = self.category_order.marker_index
        order = marker_index if marker_index is not None else 0
        try:
            created = await self.catalog.create_category(CategoryCreate(
                name=draft.name,
                translation=draft.translation.strip(),
                icon=draft.icon,
                order=order,
                ingredients=draft.ingredients,
            ))
        except CatalogError as e:
            self._notify(Notice.from_error("Failed to create category", e))
            return None

        failures = await self._write_category_order(self.category_order.persisted_order())
        self.draft = None
        self.category_order.clear_marker()
        await self.refresh_categories()
        await self.refresh_items()
        if failures:
            self._notify(Notice(
                title="Category created, but its position could not be saved",
                detail=failures[0].message,
                level="error",
                retryable=True,
            ))
        else:
            self._notify(Notice(title="Category created", detail=created.translation))
        return created

    # ==========================================================================
    # CATEGORY ORDER / UPDATE / DELETE
    # ==========================================================================

    async def move_category(self, index: int, direction: int) -> bool:
        candidate = CategoryOrderList(self.category_order.entries)
        moved = candidate.move_up(index) if direction < 0 else candidate.move_down(index)
        if not moved:
            return False
        return await self._save_category_order(candidate)

    async def drag_category(self, from_id: int, to_id: int) -> bool:
        candidate = CategoryOrderList(self.category_order.entries)
        if not candidate.reorder_drag_drop(from_id, to_id):
            return False
        return await self._save_category_order(candidate)

    async def _save_category_order(self, candidate: CategoryOrderList) -> bool:
        """
        Persist a reordered list. While a draft category is open the new
        order is only shown; it is written when the category is created.
        """
        if candidate.marker_index is not None:
            self.category_order = candidate
            return True
        failures = await self._write_category_order(candidate.persisted_order())
        await self.refresh_categories()
        if failures:
            self._notify(Notice.from_error("Failed to reorder categories", failures[0]))
            return False
        self._notify(Notice(title="Category order updated"))
        return True

    async def _write_category_order(self, order: dict) -> list[CatalogError]:
        current = {c.id: c.order for c in self.categories}
        failures = []
        for category_id, index in order.items():
            if current.get(category_id) == index:
                continue
            try:
                await self.catalog.update_category(category_id, CategoryUpdate(order=index))
            except CatalogError as e:
                failures.append(e)
        return failures

    async def update_category_ingredients(
        self,
        category_id: int,
        ingredients: Iterable[Ingredient],
    ) -> Optional[CategoryResponse]:
        try:
            updated = await self.catalog.update_category(
                category_id, CategoryUpdate(ingredients=list(ingredients))
            )
        except CatalogError as e:
            self._notify(Notice.from_error("Failed to update ingredients", e))
            return None
        await self.refresh_categories()
        self._notify(Notice(title="Ingredients updated", detail=updated.translation))
        return updated

    async def update_category(self, category_id: int, data: CategoryUpdate) -> Optional[CategoryResponse]:
        try:
            updated = await self.catalog.update_category(category_id, data)
        except CatalogError as e:
            self._notify(Notice.from_error("Failed to update category", e))
            return None
        await self.refresh_categories()
        self._notify(Notice(title="Category updated", detail=updated.translation))
        return updated

    def can_delete_category(self, category_id: int) -> tuple[bool, Optional[str]]:
        category = next((c for c in self.categories if c.id == category_id), None)
        if category is None:
            return False, "Category not found"
        count = len(self.items_in(category.name))
        if count:
            return False, (
                f'Cannot delete category "{category.translation}" because it contains '
                f"{count} menu item(s). Please move or delete these items first."
            )
        return True, None

    async def delete_category(self, category_id: int) -> bool:
        allowed, reason = self.can_delete_category(category_id)
        if not allowed:
            self._notify(Notice.from_error("Cannot delete category", ConflictError(reason)))
            return False

        category = next(c for c in self.categories if c.id == category_id)
        try:
            await self.catalog.delete_category(category_id)
        except CatalogError as e:
            self._notify(Notice.from_error("Failed to delete category", e))
            return False

        book = ItemOrderBook(self.item_order.to_dict())
        book.drop_category(category.name)
        await self._persist_item_order(book)
        await self.refresh_categories()
        self._notify(Notice(title="Category deleted", detail=category.translation))
        return True

    def validate_item_category(self, category: str) -> None:
        if self.category(category) is None:
            raise ValidationError(f"Unknown category: {category}", field="category")
