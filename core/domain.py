from dataclasses import dataclass, field
from typing import Optional, Dict, FrozenSet


# ============ Поля сортировки (заголовки таблицы) ============

SORT_BY_ID = "ID"
SORT_BY_PRODUCT = "Product"
SORT_BY_CATEGORY = "Category"
SORT_BY_USER = "User"

HEADERS = (SORT_BY_ID, SORT_BY_PRODUCT, SORT_BY_CATEGORY, SORT_BY_USER)


@dataclass(frozen=True)
class User:
    id: int
    name: str
    sex: str  # "m" | "f"
    avatar: Optional[str] = None


@dataclass(frozen=True)
class Category:
    id: int
    title: str
    icon: str
    owner_id: int


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    category_id: int


@dataclass(frozen=True)
class EnrichedProduct:
    """Товар вместе со своей категорией и её владельцем (результат join)"""

    id: int
    name: str
    category_id: int
    category: Category
    user: User


@dataclass(frozen=True)
class SelectionState:
    """
    Выбор пользователя: фильтры + сортировка
    Иммутабелен, поэтому годится как ключ кэша
    """

    selected_user_id: Optional[int] = None
    query: str = ""
    selected_category_ids: FrozenSet[int] = field(default_factory=frozenset)
    sort_field: Optional[str] = None  # None | один из HEADERS
    is_reversed: bool = False


@dataclass(frozen=True)
class Event:
    id: str
    ts: str
    name: str
    payload: Dict
