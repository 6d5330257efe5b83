import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest
from dataclasses import replace
from core.domain import (
    Category,
    Product,
    User,
    SelectionState,
    HEADERS,
    SORT_BY_ID,
    SORT_BY_PRODUCT,
    SORT_BY_CATEGORY,
    SORT_BY_USER,
)
from core.transforms import build_catalog, sort_rows, derive_rows, collation_key


@pytest.fixture
def rows():
    users = (
        User(id=1, name="roma", sex="m"),
        User(id=2, name="Anna", sex="f"),
    )
    categories = (
        Category(id=1, title="Grocery", icon="🍞", owner_id=2),
        Category(id=2, title="Drinks", icon="🍺", owner_id=1),
    )
    products = (
        Product(id=10, name="Sugar", category_id=1),
        Product(id=2, name="beer", category_id=2),
        Product(id=7, name="Apple", category_id=1),
        Product(id=3, name="Milk", category_id=2),
    )
    return build_catalog(users, categories, products)


@pytest.fixture
def example_rows():
    users = (User(id=1, name="Max", sex="m"),)
    categories = (Category(id=1, title="Fruits", icon="🍎", owner_id=1),)
    products = (
        Product(id=1, name="Banana", category_id=1),
        Product(id=2, name="Apple", category_id=1),
    )
    return build_catalog(users, categories, products)


def names(rows):
    return [r.name for r in rows]


def test_sort_by_id_is_numeric(rows):
    assert [r.id for r in sort_rows(rows, SORT_BY_ID)] == [2, 3, 7, 10]


def test_sort_by_product_ignores_case(rows):
    assert names(sort_rows(rows, SORT_BY_PRODUCT)) == ["Apple", "beer", "Milk", "Sugar"]


def test_sort_by_category_is_stable(rows):
    """Drinks раньше Grocery, внутри категории - исходный порядок"""
    assert names(sort_rows(rows, SORT_BY_CATEGORY)) == ["beer", "Milk", "Sugar", "Apple"]


def test_sort_by_user(rows):
    assert [r.user.name for r in sort_rows(rows, SORT_BY_USER)] == [
        "Anna",
        "Anna",
        "roma",
        "roma",
    ]


def test_sort_without_field_keeps_order(rows):
    assert sort_rows(rows, None) == rows
    assert sort_rows(rows, "Price") == rows


def test_collation_key_accents_and_case():
    words = ["zebra", "Éclair", "eclair", "Apple", "apple"]
    assert sorted(words, key=collation_key) == [
        "apple",
        "Apple",
        "eclair",
        "Éclair",
        "zebra",
    ]


def test_reverse_without_sort_reverses_join_order(rows):
    state = SelectionState(is_reversed=True)
    assert derive_rows(rows, state) == tuple(reversed(rows))


@pytest.mark.parametrize("field", (None,) + HEADERS)
def test_reverse_involution(rows, field):
    forward = derive_rows(rows, SelectionState(sort_field=field))
    backward = derive_rows(rows, SelectionState(sort_field=field, is_reversed=True))
    assert tuple(reversed(backward)) == forward


def test_example_query_an(example_rows):
    state = SelectionState(query="an")
    assert names(derive_rows(example_rows, state)) == ["Banana"]


def test_example_sort_product_then_reverse(example_rows):
    state = SelectionState(sort_field=SORT_BY_PRODUCT)
    assert names(derive_rows(example_rows, state)) == ["Apple", "Banana"]

    reversed_state = replace(state, is_reversed=True)
    assert names(derive_rows(example_rows, reversed_state)) == ["Banana", "Apple"]


def test_derive_rows_is_cached(example_rows):
    """Одинаковые входы - один и тот же результат из кэша"""
    derive_rows.cache_clear()
    state = SelectionState(sort_field=SORT_BY_ID)

    first = derive_rows(example_rows, state)
    second = derive_rows(example_rows, SelectionState(sort_field=SORT_BY_ID))

    assert first is second
    assert derive_rows.cache_info().hits == 1


def test_collation_key_punctuation_before_letters():
    """Пробел < пунктуация < цифры < буквы, как в localeCompare"""
    assert sorted(["ab", "a{", "a1", "a b"], key=collation_key) == [
        "a b",
        "a{",
        "a1",
        "ab",
    ]
