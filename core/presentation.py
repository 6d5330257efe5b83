from typing import Iterable, List, Optional, Tuple

from .domain import Category, EnrichedProduct, SelectionState, User

NO_RESULTS_MESSAGE = "No products matching selected criteria"

SORT_ICON_NONE = "fa-sort"
SORT_ICON_ASC = "fa-sort-up"
SORT_ICON_DESC = "fa-sort-down"

SORT_GLYPHS = {
    SORT_ICON_NONE: "↕",
    SORT_ICON_ASC: "▲",
    SORT_ICON_DESC: "▼",
}


# ============ Заголовки таблицы ============


def sort_icon(state: SelectionState, field: str) -> str:
    """Иконка тройного состояния для колонки"""
    if state.sort_field != field:
        return SORT_ICON_NONE
    return SORT_ICON_DESC if state.is_reversed else SORT_ICON_ASC


def sort_glyph(state: SelectionState, field: str) -> str:
    return SORT_GLYPHS[sort_icon(state, field)]


# ============ Ячейки ============

USER_COLORS = {"has-text-link": "blue", "has-text-danger": "red"}


def category_label(category: Category) -> str:
    return f"{category.icon} - {category.title}"


def user_css_class(user: User) -> str:
    """Мужчины - синим, женщины - красным"""
    return {"m": "has-text-link", "f": "has-text-danger"}.get(user.sex, "")


def user_color(user: User) -> Optional[str]:
    """Цвет для markdown-разметки Streamlit (:blue[...], :red[...])"""
    return USER_COLORS.get(user_css_class(user))


def table_rows(rows: Iterable[EnrichedProduct]) -> List[dict]:
    """Строки таблицы как словари колонка -> значение (+ цвет владельца)"""
    return [
        {
            "ID": row.id,
            "Product": row.name,
            "Category": category_label(row.category),
            "User": row.user.name,
            "user_color": user_color(row.user),
        }
        for row in rows
    ]


def table_view(rows: Iterable[EnrichedProduct]) -> Tuple[Optional[str], List[dict]]:
    """
    Что показать под фильтрами: (сообщение, строки)
    Пустой результат - (NO_RESULTS_MESSAGE, []), иначе - (None, строки таблицы)
    """
    cells = table_rows(rows)
    if not cells:
        return NO_RESULTS_MESSAGE, []
    return None, cells


# ============ Состояние контролов ============


def is_owner_active(state: SelectionState, user_id: Optional[int]) -> bool:
    """user_id=None - ссылка "All", активна когда владелец не выбран"""
    return state.selected_user_id == user_id


def is_category_active(state: SelectionState, category_id: int) -> bool:
    return category_id in state.selected_category_ids


def all_categories_outlined(state: SelectionState) -> bool:
    """Кнопка "All" неактивна (outlined), если выбрана хотя бы одна категория"""
    return bool(state.selected_category_ids)


def show_clear_button(state: SelectionState) -> bool:
    # пробелы тоже считаются вводом
    return len(state.query) > 0
