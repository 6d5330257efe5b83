import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from functools import reduce
from typing import Callable, Iterable, Optional, Tuple

from .domain import Event, SelectionState, HEADERS

logger = logging.getLogger(__name__)

SELECT_OWNER = "SELECT_OWNER"
SET_QUERY = "SET_QUERY"
CLEAR_QUERY = "CLEAR_QUERY"
TOGGLE_CATEGORY = "TOGGLE_CATEGORY"
SELECT_ALL_CATEGORIES = "SELECT_ALL_CATEGORIES"
RESET_FILTERS = "RESET_FILTERS"
CLICK_HEADER = "CLICK_HEADER"

Handler = Callable[[Event, SelectionState], SelectionState]


@dataclass(frozen=True)
class EventBus:
    """
    Иммутабельная шина действий пользователя
    Подписчики - чистые функции: (Event, SelectionState) -> SelectionState
    """

    subscribers: Tuple[Tuple[str, Handler], ...] = ()

    def subscribe(self, event_name: str, handler: Handler) -> "EventBus":
        """Возвращает новую шину с добавленным подписчиком"""
        return EventBus(subscribers=self.subscribers + ((event_name, handler),))

    def publish(self, event: Event, state: SelectionState) -> SelectionState:
        """
        Применяет к состоянию все обработчики события (fold)
        Событие без подписчиков оставляет состояние как есть
        """
        matching_handlers = tuple(
            handler for name, handler in self.subscribers if name == event.name
        )
        if not matching_handlers:
            logger.debug("No handlers for event %s", event.name)
            return state

        logger.debug("Dispatch %s %s", event.name, event.payload)
        return reduce(lambda s, handler: handler(event, s), matching_handlers, state)


# ============ Конструкторы событий ============


def create_event(name: str, payload: Optional[dict] = None) -> Event:
    """Создаёт событие с автоматической меткой времени"""
    return Event(
        id=str(uuid.uuid4()),
        ts=datetime.now().isoformat(),
        name=name,
        payload=payload or {},
    )


def select_owner(user_id: Optional[int]) -> Event:
    """None - ссылка "All" """
    return create_event(SELECT_OWNER, {"user_id": user_id})


def set_query(query: str) -> Event:
    return create_event(SET_QUERY, {"query": query})


def clear_query() -> Event:
    return create_event(CLEAR_QUERY)


def toggle_category(category_id: int) -> Event:
    return create_event(TOGGLE_CATEGORY, {"category_id": category_id})


def select_all_categories() -> Event:
    return create_event(SELECT_ALL_CATEGORIES)


def reset_filters() -> Event:
    return create_event(RESET_FILTERS)


def click_header(field: str) -> Event:
    return create_event(CLICK_HEADER, {"field": field})


# ============ Чистые обработчики ============


def handle_select_owner(event: Event, state: SelectionState) -> SelectionState:
    return replace(state, selected_user_id=event.payload.get("user_id"))


def handle_set_query(event: Event, state: SelectionState) -> SelectionState:
    # запрос хранится как введён, trim только при фильтрации
    return replace(state, query=event.payload.get("query", ""))


def handle_clear_query(event: Event, state: SelectionState) -> SelectionState:
    return replace(state, query="")


def handle_toggle_category(event: Event, state: SelectionState) -> SelectionState:
    """Есть в множестве - убрать, нет - добавить (сравнение по ID)"""
    category_id = event.payload.get("category_id")
    selected = state.selected_category_ids

    if category_id in selected:
        updated = selected - {category_id}
    else:
        updated = selected | {category_id}

    return replace(state, selected_category_ids=frozenset(updated))


def handle_select_all_categories(event: Event, state: SelectionState) -> SelectionState:
    return replace(state, selected_category_ids=frozenset())


def handle_reset_filters(event: Event, state: SelectionState) -> SelectionState:
    """Сбрасывает только фильтры; сортировка остаётся"""
    return replace(
        state,
        selected_user_id=None,
        query="",
        selected_category_ids=frozenset(),
    )


def handle_click_header(event: Event, state: SelectionState) -> SelectionState:
    """
    Цикл для каждой колонки: нет сортировки -> по возрастанию -> по убыванию -> нет
    Клик по другой колонке всегда начинает с возрастания
    """
    field = event.payload.get("field")
    if field not in HEADERS:
        logger.warning("Ignoring click on unknown header %r", field)
        return state

    if state.sort_field != field:
        return replace(state, sort_field=field, is_reversed=False)
    if not state.is_reversed:
        return replace(state, is_reversed=True)
    return replace(state, sort_field=None, is_reversed=False)


# ============ Вспомогательные функции ============


def create_catalog_event_bus() -> EventBus:
    """Шина со всеми действиями страницы каталога"""
    bus = EventBus()
    bus = bus.subscribe(SELECT_OWNER, handle_select_owner)
    bus = bus.subscribe(SET_QUERY, handle_set_query)
    bus = bus.subscribe(CLEAR_QUERY, handle_clear_query)
    bus = bus.subscribe(TOGGLE_CATEGORY, handle_toggle_category)
    bus = bus.subscribe(SELECT_ALL_CATEGORIES, handle_select_all_categories)
    bus = bus.subscribe(RESET_FILTERS, handle_reset_filters)
    bus = bus.subscribe(CLICK_HEADER, handle_click_header)
    return bus


def initial_state() -> SelectionState:
    """Ничего не выбрано, без сортировки"""
    return SelectionState()


def apply_events(
    bus: EventBus, events: Iterable[Event], state: SelectionState
) -> SelectionState:
    """
    Применяет последовательность событий к состоянию
    Чистая функция: (events, initial_state) -> final_state
    """
    return reduce(lambda s, e: bus.publish(e, s), events, state)
