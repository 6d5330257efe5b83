import json
import logging
import unicodedata
from functools import lru_cache, reduce
from typing import Callable, Iterable, Optional, Tuple

from .compose import pipe
from .ftypes import Maybe, Either
from .domain import (
    Category,
    EnrichedProduct,
    Product,
    SelectionState,
    User,
    SORT_BY_ID,
    SORT_BY_PRODUCT,
    SORT_BY_CATEGORY,
    SORT_BY_USER,
)

logger = logging.getLogger(__name__)


class CatalogIntegrityError(ValueError):
    """Товар ссылается на несуществующую категорию или категория - на владельца"""

    def __init__(self, error: dict):
        super().__init__(error.get("error", "catalog integrity error"))
        self.details = error


# ============ Загрузка данных ============


def _pick(record: dict, *keys: str):
    """Первое присутствующее поле: seed хранит ownerId/categoryId в camelCase"""
    return next((record[k] for k in keys if k in record), None)


def load_seed(
    path: str,
) -> Tuple[Tuple[User, ...], Tuple[Category, ...], Tuple[Product, ...]]:
    """Загружает seed.json и возвращает кортежи иммутабельных таблиц"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    users = tuple(
        User(
            id=int(u["id"]),
            name=str(u["name"]),
            sex=str(u.get("sex", "")),
            avatar=u.get("avatar"),
        )
        for u in data.get("users", [])
    )
    categories = tuple(
        Category(
            id=int(c["id"]),
            title=str(c["title"]),
            icon=str(c.get("icon", "")),
            owner_id=int(_pick(c, "ownerId", "owner_id")),
        )
        for c in data.get("categories", [])
    )
    products = tuple(
        Product(
            id=int(p["id"]),
            name=str(p["name"]),
            category_id=int(_pick(p, "categoryId", "category_id")),
        )
        for p in data.get("products", [])
    )

    logger.info(
        "Loaded %d users, %d categories, %d products from %s",
        len(users),
        len(categories),
        len(products),
        path,
    )
    return users, categories, products


# ============ Static join (Maybe/Either) ============


def safe_category(categories: Iterable[Category], category_id: int) -> Maybe[Category]:
    """Безопасный поиск категории по ID"""
    return Maybe.first(categories, lambda c: c.id == category_id)


def safe_user(users: Iterable[User], user_id: int) -> Maybe[User]:
    """Безопасный поиск пользователя по ID"""
    return Maybe.first(users, lambda u: u.id == user_id)


def enrich_product(
    product: Product, users: Tuple[User, ...], categories: Tuple[Category, ...]
) -> Either[dict, EnrichedProduct]:
    """
    Product -> Category -> User
    Left({"error": ...}) если какая-то ссылка не разрешается
    """

    def with_owner(category: Category) -> Either[dict, EnrichedProduct]:
        return (
            safe_user(users, category.owner_id)
            .to_either(
                {
                    "error": f"Category {category.id} references missing owner {category.owner_id}",
                    "category_id": category.id,
                    "product_id": product.id,
                }
            )
            .map(
                lambda user: EnrichedProduct(
                    id=product.id,
                    name=product.name,
                    category_id=product.category_id,
                    category=category,
                    user=user,
                )
            )
        )

    return (
        safe_category(categories, product.category_id)
        .to_either(
            {
                "error": f"Product {product.id} references missing category {product.category_id}",
                "product_id": product.id,
            }
        )
        .bind(with_owner)
    )


def join_catalog(
    users: Tuple[User, ...],
    categories: Tuple[Category, ...],
    products: Tuple[Product, ...],
) -> Either[dict, Tuple[EnrichedProduct, ...]]:
    """
    Денормализует все товары, сохраняя порядок таблицы products
    Останавливается на первой битой ссылке
    """

    def accumulate(acc: Either, product: Product) -> Either:
        if acc.is_left:
            return acc
        return enrich_product(product, users, categories).map(
            lambda row: acc.get_or_else(()) + (row,)
        )

    return reduce(accumulate, products, Either.right(()))


def build_catalog(
    users: Tuple[User, ...],
    categories: Tuple[Category, ...],
    products: Tuple[Product, ...],
    skip_orphans: bool = False,
) -> Tuple[EnrichedProduct, ...]:
    """
    Join при старте приложения.
    По умолчанию битая ссылка - CatalogIntegrityError (fail fast),
    с skip_orphans=True такие товары отбрасываются с предупреждением в лог
    """
    if not skip_orphans:
        result = join_catalog(users, categories, products)
        if result.is_left:
            raise CatalogIntegrityError(result.value)
        return result.value

    def keep_resolved(acc: tuple, product: Product) -> tuple:
        enriched = enrich_product(product, users, categories)
        if enriched.is_left:
            logger.warning("Skipping product %s: %s", product.id, enriched.value["error"])
            return acc
        return acc + (enriched.value,)

    return reduce(keep_resolved, products, ())


# ============ Замыкания-фильтры (HOF) ============


def pass_all(_row: EnrichedProduct) -> bool:
    return True


def by_owner(user_id: Optional[int]) -> Callable[[EnrichedProduct], bool]:
    """Фильтр по владельцу категории; None - все владельцы"""
    if user_id is None:
        return pass_all
    return lambda row: row.user.id == user_id


def by_query(query: str) -> Callable[[EnrichedProduct], bool]:
    """Подстрока в названии товара без учёта регистра; пустой запрос - всё"""
    normalized = (query or "").strip().lower()
    if not normalized:
        return pass_all
    return lambda row: normalized in row.name.lower()


def by_categories(category_ids: Iterable[int]) -> Callable[[EnrichedProduct], bool]:
    """Фильтр по множеству ID категорий; пустое множество - все категории"""
    ids = frozenset(category_ids)
    if not ids:
        return pass_all
    return lambda row: row.category.id in ids


def apply_filters(
    rows: Tuple[EnrichedProduct, ...], state: SelectionState
) -> Tuple[EnrichedProduct, ...]:
    """Владелец -> текст -> категории; каждый фильтр независим"""
    filters = (
        by_owner(state.selected_user_id),
        by_query(state.query),
        by_categories(state.selected_category_ids),
    )

    def combined_filter(row):
        return all(f(row) for f in filters)

    return tuple(filter(combined_filter, rows))


# ============ Сортировка ============


def _primary_weight(ch: str) -> int:
    """Пробелы < знаки препинания и символы < цифры < буквы"""
    kind = unicodedata.category(ch)[0]
    return {"Z": 0, "P": 1, "S": 1, "N": 2}.get(kind, 3)


def collation_key(text: str) -> tuple:
    """
    Ключ сравнения строк, близкий к localeCompare:
    сначала без учёта диакритики и регистра (пунктуация раньше букв),
    затем диакритика, затем регистр (строчные раньше заглавных)
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (
        tuple((_primary_weight(ch), ch) for ch in base.casefold()),
        decomposed.casefold(),
        tuple(ch.isupper() for ch in decomposed),
    )


SORT_KEYS = {
    SORT_BY_ID: lambda row: row.id,
    SORT_BY_PRODUCT: lambda row: collation_key(row.name),
    SORT_BY_CATEGORY: lambda row: collation_key(row.category.title),
    SORT_BY_USER: lambda row: collation_key(row.user.name),
}


def sort_rows(
    rows: Tuple[EnrichedProduct, ...], sort_field: Optional[str]
) -> Tuple[EnrichedProduct, ...]:
    """Стабильная сортировка; без поля (или с неизвестным полем) порядок не меняется"""
    key = SORT_KEYS.get(sort_field) if sort_field else None
    if key is None:
        return tuple(rows)
    return tuple(sorted(rows, key=key))


def reverse_rows(rows: Tuple[EnrichedProduct, ...]) -> Tuple[EnrichedProduct, ...]:
    return tuple(reversed(rows))


# ============ Derivation (мемоизация) ============


@lru_cache(maxsize=256)
def derive_rows(
    rows: Tuple[EnrichedProduct, ...], state: SelectionState
) -> Tuple[EnrichedProduct, ...]:
    """
    Строки для отображения: фильтры -> сортировка -> разворот.
    Чистая функция, поэтому кэшируется через lru_cache
    (rows и state - хешируемые frozen dataclass'ы)
    """
    pipeline = pipe(
        lambda rs: apply_filters(rs, state),
        lambda rs: sort_rows(rs, state.sort_field),
        lambda rs: reverse_rows(rs) if state.is_reversed else rs,
    )
    return pipeline(rows)
