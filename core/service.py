from typing import Optional, Tuple

from core.domain import Category, EnrichedProduct, Event, Product, SelectionState, User
from core.frp import EventBus, create_catalog_event_bus, initial_state
from core.transforms import build_catalog, derive_rows, load_seed


class CatalogViewModel:
    """
    Фасад страницы каталога: join-таблица + текущий выбор + шина действий
    Состояние меняется только через dispatch
    """

    def __init__(
        self,
        rows: Tuple[EnrichedProduct, ...],
        bus: Optional[EventBus] = None,
        state: Optional[SelectionState] = None,
        users: Tuple[User, ...] = (),
        categories: Tuple[Category, ...] = (),
    ):
        self.rows = tuple(rows)
        self.bus = bus or create_catalog_event_bus()
        self.state = state or initial_state()
        self._users = tuple(users)
        self._categories = tuple(categories)

    @classmethod
    def from_tables(
        cls,
        users: Tuple[User, ...],
        categories: Tuple[Category, ...],
        products: Tuple[Product, ...],
        skip_orphans: bool = False,
    ) -> "CatalogViewModel":
        rows = build_catalog(users, categories, products, skip_orphans=skip_orphans)
        return cls(rows, users=users, categories=categories)

    @classmethod
    def from_seed(cls, path, skip_orphans: bool = False) -> "CatalogViewModel":
        """Загрузка seed.json + join"""
        users, categories, products = load_seed(str(path))
        return cls.from_tables(users, categories, products, skip_orphans=skip_orphans)

    def dispatch(self, event: Event) -> SelectionState:
        """Применяет действие и сохраняет новое состояние"""
        self.state = self.bus.publish(event, self.state)
        return self.state

    def visible_rows(self) -> Tuple[EnrichedProduct, ...]:
        return derive_rows(self.rows, self.state)

    def has_results(self) -> bool:
        return len(self.visible_rows()) > 0

    def owners(self) -> Tuple[User, ...]:
        """Владельцы для ссылок-фильтров; без таблицы users - из join, без повторов"""
        if self._users:
            return self._users
        return tuple({row.user.id: row.user for row in self.rows}.values())

    def categories(self) -> Tuple[Category, ...]:
        if self._categories:
            return self._categories
        return tuple({row.category.id: row.category for row in self.rows}.values())
