"""
Pending-Change Staging Model

Holds menu item edits in memory until an explicit save.

State, keyed by menu item id:
    originals  snapshot taken when edit mode starts; present iff editing
    pending    field -> draft value, written as fields are edited
    drafts     inline-edit buffers keyed "<item id>-<field>"

A commit sends the committed record merged with the pending fields as a
single update. A failed commit leaves every map exactly as it was, so the
user can retry; only a NotFoundError discards the item's staged state,
since there is nothing left to commit to.
"""

import logging
from decimal import Decimal, InvalidOperation
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from taqueria.menu.errors import CatalogError, NotFoundError, ValidationError
from taqueria.schemas import MenuItemResponse, MenuItemUpdate

if TYPE_CHECKING:
    from taqueria.services.catalog.base import BaseCatalogService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(MenuItemUpdate.model_fields)
LIST_FIELDS = frozenset({"meats", "sizes", "ingredients"})

COMMIT_KEYS = frozenset({"Enter"})
CANCEL_KEYS = frozenset({"Escape"})


def inline_key(item_id: int, field_name: str) -> str:
    return f"{item_id}-{field_name}"


def parse_inline_key(key: str) -> tuple[int, str]:
    item_id, _, field_name = key.partition("-")
    return int(item_id), field_name


def normalize_field_value(field_name: str, value: Any) -> Any:
    """
    Bring a raw editor value into the record's shape.

    Comma-separated text becomes a list for list fields, numeric text
    becomes Decimal for the price. Values that don't parse are returned
    as-is and rejected at commit time.
    """
    if field_name in LIST_FIELDS and isinstance(value, str):
        parts = [part.strip() for part in value.split(",")]
        return [part for part in parts if part] or None
    if field_name == "price" and not isinstance(value, Decimal):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation:
            return value
    return value


@dataclass
class CommitReport:
    """Outcome of committing several items at once."""
    saved: list[MenuItemResponse] = field(default_factory=list)
    failed: dict[int, CatalogError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class StagingModel:
    """
    Staging store for menu item edits.

    This object is the only writer of the staging maps; views read through
    `current_value` / `display` and mutate through the methods below.
    """

    def __init__(self, catalog: "BaseCatalogService", items: Iterable[MenuItemResponse] = ()):
        self.catalog = catalog
        self._committed: dict[int, MenuItemResponse] = {}
        self._originals: dict[int, MenuItemResponse] = {}
        self._pending: dict[int, dict[str, Any]] = {}
        self._drafts: dict[str, Any] = {}
        self.load(items)

    # ==========================================================================
    # COMMITTED RECORDS
    # ==========================================================================

    def load(self, items: Iterable[MenuItemResponse]) -> None:
        """
        Replace the committed records with freshly fetched ones.

        Staged edits survive a refetch; items that no longer exist lose
        their staged state.
        """
        self._committed = {item.id: item for item in items}
        for item_id in list(self._originals):
            if item_id not in self._committed:
                logger.info(f"Menu item #{item_id} disappeared; discarding staged edits")
                self.forget(item_id)

    def committed(self, item_id: int) -> Optional[MenuItemResponse]:
        return self._committed.get(item_id)

    def forget(self, item_id: int) -> None:
        """Drop every trace of an item (after deletion)."""
        self._committed.pop(item_id, None)
        self._clear(item_id)

    # ==========================================================================
    # EDIT MODE
    # ==========================================================================

    def is_editing(self, item_id: int) -> bool:
        return item_id in self._originals

    def editing_ids(self) -> list[int]:
        return list(self._originals)

    def begin_edit(self, item_id: int) -> None:
        """
        Enter edit mode for an item. Calling it again while editing is a
        no-op: the first snapshot is never overwritten.
        """
        if item_id in self._originals:
            return
        item = self._committed.get(item_id)
        if item is None:
            raise NotFoundError(f"Menu item #{item_id} not found")
        self._originals[item_id] = item.model_copy(deep=True)
        self._pending[item_id] = {}

    def original(self, item_id: int) -> Optional[MenuItemResponse]:
        return self._originals.get(item_id)

    def pending(self, item_id: int) -> dict[str, Any]:
        return dict(self._pending.get(item_id, {}))

    def has_changes(self, item_id: int) -> bool:
        return bool(self._pending.get(item_id))

    def stage_field_edit(self, item_id: int, field_name: str, value: Any) -> None:
        if item_id not in self._originals:
            logger.debug(f"Ignoring edit of {field_name!r} on #{item_id}: not in edit mode")
            return
        if field_name not in EDITABLE_FIELDS:
            raise ValidationError(f"Unknown field: {field_name}", field=field_name)
        self._pending[item_id][field_name] = normalize_field_value(field_name, value)

    def current_value(self, item: MenuItemResponse, field_name: str) -> Any:
        """The staged value when there is one, else the record's value."""
        staged = self._pending.get(item.id, {})
        if field_name in staged:
            return staged[field_name]
        return getattr(item, field_name)

    def display(self, item: MenuItemResponse) -> MenuItemResponse:
        """The item as it should be shown: record with staged fields applied."""
        staged = self._pending.get(item.id)
        if not staged:
            return item
        return item.model_copy(update=staged)

    # ==========================================================================
    # COMMIT / CANCEL
    # ==========================================================================

    def _merged_update(self, item_id: int) -> MenuItemUpdate:
        committed = self._committed[item_id]
        merged = {**committed.model_dump(exclude={"id"}), **self._pending[item_id]}
        try:
            return MenuItemUpdate.model_validate(merged)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field_name = str(first["loc"][0]) if first.get("loc") else None
            raise ValidationError(f"{field_name}: {first['msg']}", field=field_name)

    async def commit_edit(self, item_id: int) -> Optional[MenuItemResponse]:
        """
        Save an item's staged edits.

        Returns:
            The updated record, the unchanged record when nothing was
            staged, or None when the item was not in edit mode.

        Raises:
            CatalogError: The update failed. Staged state is kept unless
                the item no longer exists.
        """
        if item_id not in self._originals:
            return None
        if not self._pending.get(item_id):
            self._clear(item_id)
            return self._committed.get(item_id)

        payload = self._merged_update(item_id)
        try:
            updated = await self.catalog.update_menu_item(item_id, payload)
        except NotFoundError:
            logger.warning(f"Menu item #{item_id} was deleted; discarding staged edits")
            self.forget(item_id)
            raise
        except CatalogError as e:
            logger.warning(f"Commit of menu item #{item_id} failed, edits kept: {e.message}")
            raise

        self._committed[item_id] = updated
        self._clear(item_id)
        logger.info(f"Menu item #{item_id} saved")
        return updated

    async def commit_category(self, item_ids: Iterable[int]) -> CommitReport:
        """Commit each listed item independently; failures keep their staged state."""
        report = CommitReport()
        for item_id in list(item_ids):
            if item_id not in self._originals:
                continue
            try:
                updated = await self.commit_edit(item_id)
            except CatalogError as e:
                report.failed[item_id] = e
                continue
            if updated is not None:
                report.saved.append(updated)
        return report

    def cancel_edit(self, item_id: int) -> None:
        """Discard staged edits without contacting the catalog."""
        self._clear(item_id)

    def cancel_category(self, item_ids: Iterable[int]) -> None:
        for item_id in item_ids:
            self._clear(item_id)

    def _clear(self, item_id: int) -> None:
        self._originals.pop(item_id, None)
        self._pending.pop(item_id, None)
        prefix = f"{item_id}-"
        for key in [k for k in self._drafts if k.startswith(prefix)]:
            del self._drafts[key]

    # ==========================================================================
    # INLINE FIELD EDITING
    # ==========================================================================

    def start_inline_edit(self, key: str, current_value: Any) -> None:
        item_id, _ = parse_inline_key(key)
        if item_id not in self._originals:
            return
        self._drafts[key] = current_value

    def set_inline_draft(self, key: str, value: Any) -> None:
        if key in self._drafts:
            self._drafts[key] = value

    def is_inline_editing(self, key: str) -> bool:
        return key in self._drafts

    def inline_draft(self, key: str) -> Any:
        return self._drafts.get(key)

    def stop_inline_editing(self, key: str, save: bool = False) -> None:
        """
        Close an inline editor, promoting its draft to a pending change
        when `save` is set. A draft equal to the committed value removes
        any pending change for the field instead of staging a no-op.
        """
        if key not in self._drafts:
            return
        draft = self._drafts.pop(key)
        if not save:
            return

        item_id, field_name = parse_inline_key(key)
        committed = self._committed.get(item_id)
        if committed is None or item_id not in self._originals:
            return

        value = normalize_field_value(field_name, draft)
        if value == getattr(committed, field_name, None):
            self._pending[item_id].pop(field_name, None)
            return
        self.stage_field_edit(item_id, field_name, value)

    def handle_inline_key(self, key: str, pressed: str) -> None:
        """Enter saves, Escape discards, other keys are ignored."""
        if pressed in COMMIT_KEYS:
            self.stop_inline_editing(key, save=True)
        elif pressed in CANCEL_KEYS:
            self.stop_inline_editing(key, save=False)

    def handle_inline_blur(self, key: str) -> None:
        self.stop_inline_editing(key, save=True)
