from types import SimpleNamespace

import pytest

from taqueria.menu.ordering import (
    NEW_CATEGORY_ID,
    CategoryOrderEntry,
    CategoryOrderList,
    ItemOrderBook,
    OrderedSequence,
    apply_custom_order,
    slugify,
)


def entity(entity_id, **attrs):
    return SimpleNamespace(id=entity_id, **attrs)


@pytest.fixture
def sequence():
    return OrderedSequence([entity("a"), entity("b"), entity("c")])


@pytest.fixture
def categories():
    return CategoryOrderList([
        CategoryOrderEntry(id=1, name="tacos", translation="Tacos"),
        CategoryOrderEntry(id=2, name="burritos", translation="Burritos"),
        CategoryOrderEntry(id=3, name="bebidas", translation="Drinks", icon="drink"),
    ])


class TestOrderedSequence:
    def test_insert_at_head(self, sequence):
        assert sequence.insert_at(entity("x"), -1) == 0
        assert sequence.ids() == ["x", "a", "b", "c"]

    def test_insert_after_last(self, sequence):
        assert sequence.insert_at(entity("x"), 2) == 3
        assert sequence.ids() == ["a", "b", "c", "x"]

    def test_insert_past_end_appends(self, sequence):
        sequence.insert_at(entity("x"), 40)
        assert sequence.ids()[-1] == "x"

    def test_move_up_at_top_is_noop(self, sequence):
        assert sequence.move_up(0) is False
        assert sequence.ids() == ["a", "b", "c"]

    def test_move_down_at_bottom_is_noop(self, sequence):
        assert sequence.move_down(2) is False
        assert sequence.ids() == ["a", "b", "c"]

    def test_moves(self, sequence):
        assert sequence.move_up(2) is True
        assert sequence.ids() == ["a", "c", "b"]
        assert sequence.move_down(0) is True
        assert sequence.ids() == ["c", "a", "b"]

    def test_stale_index_after_remove(self, sequence):
        assert sequence.remove("c") is True
        assert sequence.move_up(2) is False
        assert sequence.move_down(2) is False
        assert sequence.ids() == ["a", "b"]

    def test_drag_drop(self, sequence):
        assert sequence.reorder_drag_drop("a", "c") is True
        assert sequence.ids() == ["b", "c", "a"]
        assert sequence.reorder_drag_drop("a", "b") is True
        assert sequence.ids() == ["a", "b", "c"]

    def test_drag_drop_unknown_or_self(self, sequence):
        assert sequence.reorder_drag_drop("a", "a") is False
        assert sequence.reorder_drag_drop("a", "zzz") is False
        assert sequence.ids() == ["a", "b", "c"]

    def test_length_preserved_by_reorders(self, sequence):
        sequence.move_up(1)
        sequence.move_down(0)
        sequence.reorder_drag_drop("c", "a")
        assert sorted(sequence.ids()) == ["a", "b", "c"]


class TestApplyCustomOrder:
    def test_unlisted_follow_by_id(self):
        items = [entity(5), entity(2), entity(9), entity(1)]
        ordered = apply_custom_order(items, [9, 42, 2])
        assert [i.id for i in ordered] == [9, 2, 1, 5]

    def test_empty_order_sorts_by_id(self):
        items = [entity(3), entity(1), entity(2)]
        assert [i.id for i in apply_custom_order(items, [])] == [1, 2, 3]


class TestCategoryOrderList:
    def test_from_categories_sorts_by_order_then_id(self):
        rows = [
            entity(3, name="c", translation="C", icon="food", order=1),
            entity(1, name="a", translation="A", icon="food", order=1),
            entity(2, name="b", translation="B", icon="drink", order=0),
        ]
        assert CategoryOrderList.from_categories(rows).ids() == [2, 1, 3]

    def test_draft_marker_positions(self, categories):
        categories.sync_draft("Fresh Juices", "drink")
        assert categories.marker_index == 0
        assert categories.marker.name == "fresh_juices"
        assert categories.marker.id == NEW_CATEGORY_ID

        categories.move_down(0)
        categories.move_down(1)
        assert [e.translation for e in categories] == [
            "Tacos", "Burritos", "Fresh Juices", "Drinks",
        ]
        assert categories.marker_index == 2

    def test_marker_updated_in_place(self, categories):
        categories.sync_draft("Juices")
        categories.move_down(0)
        categories.sync_draft("Fresh Juices", "drink")
        assert categories.marker_index == 1
        assert categories.marker.translation == "Fresh Juices"
        assert categories.marker.icon == "drink"
        assert len(categories) == 4

    def test_clearing_name_removes_marker(self, categories):
        categories.sync_draft("Fresh Juices")
        categories.sync_draft("   ")
        assert categories.marker is None
        assert len(categories) == 3

    def test_persisted_order_skips_marker(self, categories):
        categories.sync_draft("Fresh Juices")
        categories.move_down(0)
        assert categories.persisted_order() == {1: 0, 2: 2, 3: 3}

    def test_clear_marker(self, categories):
        categories.sync_draft("Fresh Juices")
        categories.clear_marker()
        assert categories.ids() == [1, 2, 3]


class TestItemOrderBook:
    def test_arrange_with_fallback(self):
        book = ItemOrderBook({"tacos": [3, 1]})
        items = [entity(1), entity(2), entity(3), entity(4)]
        assert [i.id for i in book.arrange("tacos", items)] == [3, 1, 2, 4]
        assert [i.id for i in book.arrange("tortas", items)] == [1, 2, 3, 4]

    def test_insert_item(self):
        book = ItemOrderBook({"tacos": [3, 1, 2]})
        items = [entity(1), entity(2), entity(3)]
        assert book.insert_item("tacos", items, 7, 0) == [3, 7, 1, 2]
        assert book.insert_item("tacos", items, 8, -1)[0] == 8

    def test_insert_item_into_unordered_category(self):
        book = ItemOrderBook()
        assert book.insert_item("tortas", [entity(4), entity(2)], 9, 1) == [2, 4, 9]

    def test_purge(self):
        book = ItemOrderBook({"tacos": [3, 1], "specials": [1, 5]})
        book.purge(1)
        assert book.to_dict() == {"tacos": [3], "specials": [5]}

    def test_drop_category(self):
        book = ItemOrderBook({"tacos": [1], "tortas": [2]})
        book.drop_category("tortas")
        assert book.to_dict() == {"tacos": [1]}

    def test_from_dict_ignores_junk(self):
        book = ItemOrderBook.from_dict({"tacos": ["2", 1], "bad": "nope"})
        assert book.to_dict() == {"tacos": [2, 1]}
        assert ItemOrderBook.from_dict(None).to_dict() == {}


@pytest.mark.parametrize("display,expected", [
    ("Fresh Juices", "fresh_juices"),
    ("  Tacos  ", "tacos"),
    ("Aguas   Frescas!", "aguas_frescas"),
])
def test_slugify(display, expected):
    assert slugify(display) == expected
