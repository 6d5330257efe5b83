# core/ftypes.py
# Result types for lookups and the catalog join.
# Maybe: value may be absent. Either: Left carries an error dict, Right the value.

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
L = TypeVar("L")
R = TypeVar("R")


@dataclass(frozen=True)
class Maybe(Generic[T]):
    """
    Значение, которого может не быть.
    Maybe.some(x) / Maybe.nothing() / Maybe.of(x) (None -> nothing).
    """

    value: Optional[T] = None

    @staticmethod
    def some(value: T) -> "Maybe[T]":
        return Maybe(value)

    @staticmethod
    def nothing() -> "Maybe[None]":
        return Maybe(None)

    @staticmethod
    def of(value: Optional[T]) -> "Maybe[T]":
        return Maybe.nothing() if value is None else Maybe.some(value)

    @staticmethod
    def first(items: Iterable[T], predicate: Callable[[T], bool]) -> "Maybe[T]":
        """Первый элемент, удовлетворяющий предикату"""
        return Maybe.of(next((x for x in items if predicate(x)), None))

    def is_some(self) -> bool:
        return self.value is not None

    def is_none(self) -> bool:
        return self.value is None

    def map(self, fn: Callable[[T], U]) -> "Maybe[U]":
        return Maybe.of(fn(self.value)) if self.is_some() else Maybe.nothing()

    def bind(self, fn: Callable[[T], "Maybe[U]"]) -> "Maybe[U]":
        return fn(self.value) if self.is_some() else Maybe.nothing()

    def to_either(self, error: L) -> "Either[L, T]":
        """Nothing превращается в Left(error)"""
        return Either.right(self.value) if self.is_some() else Either.left(error)

    def get_or_else(self, default: U) -> T | U:
        return self.value if self.is_some() else default

    def __repr__(self) -> str:
        return f"Some({self.value!r})" if self.is_some() else "Nothing"


@dataclass(frozen=True)
class Either(Generic[L, R]):
    """
    Left - ошибка (обычно dict с ключом "error"), Right - результат.
    map/bind работают только по правой ветке.
    """

    is_left: bool
    value: Union[L, R]

    @staticmethod
    def left(value: L) -> "Either[L, R]":
        return Either(True, value)

    @staticmethod
    def right(value: R) -> "Either[L, R]":
        return Either(False, value)

    @property
    def is_right(self) -> bool:
        return not self.is_left

    def map(self, fn: Callable[[R], U]) -> "Either[L, U]":
        return self if self.is_left else Either.right(fn(self.value))  # type: ignore[return-value]

    def bind(self, fn: Callable[[R], "Either[L, U]"]) -> "Either[L, U]":
        return self if self.is_left else fn(self.value)  # type: ignore[return-value]

    def get_or_else(self, default: U) -> R | U:
        return default if self.is_left else self.value  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Left({self.value!r})" if self.is_left else f"Right({self.value!r})"
