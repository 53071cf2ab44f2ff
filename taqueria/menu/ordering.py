"""
Ordering Model

Explicit in-memory sequences for category order and per-category item
order. A sequence is shown before it is persisted, so it may hold a
placeholder for a category that is still being drafted.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Generic, Hashable, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def slugify(display_name: str) -> str:
    """
    Stable category name derived from its display translation.

    Example:
        >>> slugify("Fresh Juices")
        'fresh_juices'
    """
    slug = re.sub(r"\s+", "_", display_name.strip().lower())
    return re.sub(r"\W", "", slug)


def apply_custom_order(
    entities: Iterable[T],
    custom_ids: Iterable[Hashable],
    key: Callable[[T], Hashable] = lambda entity: entity.id,
) -> list[T]:
    """
    Arrange entities by an explicit id list.

    Ids that no longer exist are skipped. Entities missing from the list
    follow the listed ones, sorted by ascending id.
    """
    by_id = {key(entity): entity for entity in entities}
    ordered = []
    seen = set()
    for entity_id in custom_ids:
        if entity_id in by_id and entity_id not in seen:
            ordered.append(by_id[entity_id])
            seen.add(entity_id)
    rest = [entity for entity_id, entity in by_id.items() if entity_id not in seen]
    rest.sort(key=key)
    return ordered + rest


class OrderedSequence(Generic[T]):
    """
    Ordered list of entities with the reorder operations the menu editor
    offers. Out-of-range indices and unknown ids are no-ops.
    """

    def __init__(
        self,
        entries: Iterable[T] = (),
        key: Callable[[T], Hashable] = lambda entity: entity.id,
    ):
        self._entries: list[T] = list(entries)
        self._key = key

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> T:
        return self._entries[index]

    @property
    def entries(self) -> list[T]:
        return list(self._entries)

    def ids(self) -> list[Hashable]:
        return [self._key(entity) for entity in self._entries]

    def index_of(self, entity_id: Hashable) -> Optional[int]:
        for index, entity in enumerate(self._entries):
            if self._key(entity) == entity_id:
                return index
        return None

    def _swap(self, a: int, b: int) -> None:
        self._entries[a], self._entries[b] = self._entries[b], self._entries[a]

    def move_up(self, index: int) -> bool:
        """Swap with the previous element. Returns whether anything moved."""
        if index <= 0 or index >= len(self._entries):
            return False
        self._swap(index, index - 1)
        return True

    def move_down(self, index: int) -> bool:
        if index < 0 or index >= len(self._entries) - 1:
            return False
        self._swap(index, index + 1)
        return True

    def reorder_drag_drop(self, from_id: Hashable, to_id: Hashable) -> bool:
        """Move `from_id` to the position currently held by `to_id`."""
        if from_id == to_id:
            return False
        old_index = self.index_of(from_id)
        new_index = self.index_of(to_id)
        if old_index is None or new_index is None:
            return False
        entity = self._entries.pop(old_index)
        self._entries.insert(new_index, entity)
        return True

    def insert_at(self, entity: T, after_index: int) -> int:
        """
        Insert after the element at `after_index`; -1 (or lower) inserts at
        the head and anything past the end appends.

        Returns:
            int: Index the entity landed at
        """
        position = 0 if after_index < 0 else min(after_index + 1, len(self._entries))
        self._entries.insert(position, entity)
        return position

    def remove(self, entity_id: Hashable) -> bool:
        before = len(self._entries)
        self._entries = [entity for entity in self._entries if self._key(entity) != entity_id]
        return len(self._entries) != before

    def replace(self, entity_id: Hashable, entity: T) -> bool:
        index = self.index_of(entity_id)
        if index is None:
            return False
        self._entries[index] = entity
        return True


# =============================================================================
# CATEGORY ORDER
# =============================================================================

NEW_CATEGORY_ID = "new"


@dataclass(frozen=True)
class CategoryOrderEntry:
    """One row of the category order list; `is_new` marks the unsaved draft."""
    id: Hashable
    name: str
    translation: str
    icon: str = "food"
    is_new: bool = False


class CategoryOrderList(OrderedSequence[CategoryOrderEntry]):
    """
    Category order as shown in the category dialog.

    Holds at most one `is_new` marker standing in for the category being
    drafted.
    """

    def __init__(self, entries: Iterable[CategoryOrderEntry] = ()):
        super().__init__(entries, key=lambda entry: entry.id)

    @classmethod
    def from_categories(cls, categories: Iterable) -> "CategoryOrderList":
        ordered = sorted(categories, key=lambda c: (c.order, c.id))
        return cls(
            CategoryOrderEntry(
                id=c.id,
                name=c.name,
                translation=c.translation,
                icon=getattr(c.icon, "value", c.icon),
            )
            for c in ordered
        )

    @property
    def marker_index(self) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.is_new:
                return index
        return None

    @property
    def marker(self) -> Optional[CategoryOrderEntry]:
        index = self.marker_index
        return None if index is None else self._entries[index]

    def sync_draft(self, translation: str, icon: str = "food") -> None:
        """
        Mirror the draft category into the list.

        An empty name removes the marker. Otherwise an existing marker is
        updated where it stands, or a new one is put at the head.
        """
        index = self.marker_index
        if not translation.strip():
            if index is not None:
                del self._entries[index]
            return

        name = slugify(translation)
        if index is not None:
            self._entries[index] = replace(
                self._entries[index], name=name, translation=translation, icon=icon
            )
            return

        self._entries.insert(
            0,
            CategoryOrderEntry(
                id=NEW_CATEGORY_ID, name=name, translation=translation, icon=icon, is_new=True
            ),
        )

    def clear_marker(self) -> None:
        index = self.marker_index
        if index is not None:
            del self._entries[index]

    def persisted_order(self) -> dict[Hashable, int]:
        """Saved categories mapped to their displayed index."""
        return {
            entry.id: index for index, entry in enumerate(self._entries) if not entry.is_new
        }


# =============================================================================
# ITEM ORDER
# =============================================================================

class ItemOrderBook:
    """
    Per-category item order, persisted as a JSON map of
    category name -> [item ids].
    """

    def __init__(self, order: Optional[dict[str, list[int]]] = None):
        self._sequences: dict[str, list[int]] = {
            category: list(ids) for category, ids in (order or {}).items()
        }

    def ids_for(self, category: str) -> list[int]:
        return list(self._sequences.get(category, []))

    def arrange(self, category: str, items: Iterable) -> list:
        """Items of one category in custom order, unlisted ones last by id."""
        return apply_custom_order(items, self._sequences.get(category, []))

    def sequence(self, category: str, items: Iterable) -> OrderedSequence:
        return OrderedSequence(self.arrange(category, items))

    def set_order(self, category: str, item_ids: Iterable[int]) -> None:
        self._sequences[category] = list(item_ids)

    def insert_item(self, category: str, items: Iterable, item_id: int, after_index: int) -> list[int]:
        """
        Place a new item in the category at the position chosen in the
        editor. `items` is the category's current items, without the new one.
        """
        ids = [item.id for item in self.arrange(category, items) if item.id != item_id]
        sequence = OrderedSequence(ids, key=lambda entity_id: entity_id)
        sequence.insert_at(item_id, after_index)
        self._sequences[category] = sequence.entries
        return sequence.entries

    def purge(self, item_id: int) -> None:
        """Remove an item from every sequence that lists it."""
        for category, ids in self._sequences.items():
            if item_id in ids:
                self._sequences[category] = [i for i in ids if i != item_id]
                logger.debug(f"Purged item #{item_id} from {category!r} order")

    def drop_category(self, category: str) -> None:
        self._sequences.pop(category, None)

    def to_dict(self) -> dict[str, list[int]]:
        return {category: list(ids) for category, ids in self._sequences.items()}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ItemOrderBook":
        if not isinstance(data, dict):
            return cls()
        return cls({
            str(category): [int(i) for i in ids]
            for category, ids in data.items()
            if isinstance(ids, list)
        })
