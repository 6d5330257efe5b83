import sys
import os
import logging
import streamlit as st

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.config import load_settings
from core.domain import HEADERS
from core.frp import (
    create_catalog_event_bus,
    initial_state,
    select_owner,
    set_query,
    clear_query,
    toggle_category,
    select_all_categories,
    reset_filters,
    click_header,
)
from core.presentation import (
    sort_glyph,
    table_view,
    is_owner_active,
    is_category_active,
    all_categories_outlined,
    show_clear_button,
)
from core.service import CatalogViewModel

settings = load_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


# ============ Кэширование данных ============
@st.cache_resource
def get_catalog() -> CatalogViewModel:
    """Join выполняется один раз на процесс"""
    return CatalogViewModel.from_seed(
        settings.seed_path, skip_orphans=settings.skip_orphans
    )


@st.cache_resource
def get_event_bus():
    return create_catalog_event_bus()


# ============ Инициализация ============
st.set_page_config(page_title="Product Categories", page_icon="🛒", layout="wide")

catalog = get_catalog()
bus = get_event_bus()

if "selection" not in st.session_state:
    st.session_state.selection = initial_state()

if "search_field" not in st.session_state:
    st.session_state.search_field = st.session_state.selection.query


def view() -> CatalogViewModel:
    """View model поверх общего join и состояния текущей сессии"""
    return CatalogViewModel(
        catalog.rows,
        bus=bus,
        state=st.session_state.selection,
        users=catalog.owners(),
        categories=catalog.categories(),
    )


def dispatch(event):
    st.session_state.selection = view().dispatch(event)


# ============ Обработчики (callbacks) ============
def on_query_change():
    dispatch(set_query(st.session_state.search_field))


def on_clear_query():
    st.session_state.search_field = ""
    dispatch(clear_query())


def on_reset_filters():
    st.session_state.search_field = ""
    dispatch(reset_filters())


state = st.session_state.selection

# ============ HEADER ============
st.title("Product Categories")

# ============ Фильтры ============
with st.container(border=True):
    st.markdown("**Filters**")

    owner_cols = st.columns(len(catalog.owners()) + 1)
    owner_cols[0].button(
        "All",
        key="owner_all",
        type="primary" if is_owner_active(state, None) else "secondary",
        on_click=dispatch,
        args=(select_owner(None),),
    )
    for col, user in zip(owner_cols[1:], catalog.owners()):
        col.button(
            user.name,
            key=f"owner_{user.id}",
            type="primary" if is_owner_active(state, user.id) else "secondary",
            on_click=dispatch,
            args=(select_owner(user.id),),
        )

    search_col, clear_col = st.columns([10, 1])
    with search_col:
        st.text_input(
            "Search",
            key="search_field",
            placeholder="Search",
            label_visibility="collapsed",
            on_change=on_query_change,
        )
    with clear_col:
        if show_clear_button(state):
            st.button("✖", key="clear_query", on_click=on_clear_query)

    category_cols = st.columns(len(catalog.categories()) + 1)
    category_cols[0].button(
        "All",
        key="categories_all",
        type="secondary" if all_categories_outlined(state) else "primary",
        on_click=dispatch,
        args=(select_all_categories(),),
    )
    for col, category in zip(category_cols[1:], catalog.categories()):
        col.button(
            category.title,
            key=f"category_{category.id}",
            type="primary" if is_category_active(state, category.id) else "secondary",
            on_click=dispatch,
            args=(toggle_category(category.id),),
        )

    st.button(
        "Reset all filters",
        key="reset_all",
        use_container_width=True,
        on_click=on_reset_filters,
    )

# ============ Таблица ============
message, cells = table_view(view().visible_rows())

with st.container(border=True):
    if message:
        st.write(message)
    else:
        widths = [1, 3, 3, 2]
        header_cols = st.columns(widths)
        for col, header in zip(header_cols, HEADERS):
            col.button(
                f"{header} {sort_glyph(state, header)}",
                key=f"sort_{header}",
                on_click=dispatch,
                args=(click_header(header),),
            )

        for cell in cells:
            cols = st.columns(widths)
            cols[0].markdown(f"**{cell['ID']}**")
            cols[1].write(cell["Product"])
            cols[2].write(cell["Category"])
            color = cell["user_color"]
            cols[3].markdown(f":{color}[{cell['User']}]" if color else cell["User"])
