import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest
from core.domain import Category, Product, User, SORT_BY_PRODUCT
from core.frp import select_owner, set_query, reset_filters, click_header
from core.presentation import table_view
from core.service import CatalogViewModel
from core.transforms import CatalogIntegrityError

SEED_PATH = os.path.join(os.path.dirname(__file__), "..", "data", "seed.json")

USERS = (
    User(id=1, name="Roma", sex="m"),
    User(id=2, name="Anna", sex="f"),
    User(id=4, name="John", sex="m"),
)
CATEGORIES = (
    Category(id=1, title="Grocery", icon="🍞", owner_id=2),
    Category(id=2, title="Drinks", icon="🍺", owner_id=1),
)
PRODUCTS = (
    Product(id=1, name="Milk", category_id=2),
    Product(id=2, name="Bread", category_id=1),
    Product(id=3, name="Beer", category_id=2),
)


@pytest.fixture
def vm():
    return CatalogViewModel.from_tables(USERS, CATEGORIES, PRODUCTS)


def test_initial_view_shows_everything(vm):
    assert [r.id for r in vm.visible_rows()] == [1, 2, 3]
    assert vm.has_results()


def test_dispatch_updates_state(vm):
    state = vm.dispatch(select_owner(1))
    assert vm.state is state
    assert [r.name for r in vm.visible_rows()] == ["Milk", "Beer"]

    vm.dispatch(click_header(SORT_BY_PRODUCT))
    assert [r.name for r in vm.visible_rows()] == ["Beer", "Milk"]


def test_reset_keeps_sorting(vm):
    vm.dispatch(click_header(SORT_BY_PRODUCT))
    vm.dispatch(set_query("zzz"))
    assert not vm.has_results()

    vm.dispatch(reset_filters())
    assert [r.name for r in vm.visible_rows()] == ["Beer", "Bread", "Milk"]


def test_owner_without_categories_has_no_results(vm):
    """У John нет категорий - таблица пустая, показывается сообщение"""
    vm.dispatch(select_owner(4))

    message, cells = table_view(vm.visible_rows())

    assert vm.visible_rows() == ()
    assert message == "No products matching selected criteria"
    assert cells == []


def test_non_empty_result_has_rows_and_no_message(vm):
    vm.dispatch(select_owner(2))

    message, cells = table_view(vm.visible_rows())

    assert message is None
    assert [c["Product"] for c in cells] == ["Bread"]
    assert cells[0]["user_color"] == "red"


def test_owners_and_categories_come_from_tables(vm):
    assert vm.owners() == USERS
    assert vm.categories() == CATEGORIES


def test_owners_fallback_to_joined_rows(vm):
    bare = CatalogViewModel(vm.rows)
    assert [u.name for u in bare.owners()] == ["Roma", "Anna"]
    assert [c.title for c in bare.categories()] == ["Drinks", "Grocery"]


def test_from_seed():
    vm = CatalogViewModel.from_seed(SEED_PATH)
    assert len(vm.visible_rows()) == len(vm.rows) > 0


def test_from_tables_rejects_orphans():
    with pytest.raises(CatalogIntegrityError):
        CatalogViewModel.from_tables(
            USERS, CATEGORIES, PRODUCTS + (Product(id=9, name="X", category_id=5),)
        )
