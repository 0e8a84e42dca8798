"""
Reactive store primitive.

Every mirror of remote state is a 'ReactiveStore': it holds the latest
value, replaces it wholesale on each snapshot and notifies listeners. When
the feeding subscription fails the store is frozen at its last value; a
later successful snapshot thaws it.
"""

from collections.abc import Callable
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")

Listener = Callable[[T], None]


class ReactiveStore(Generic[T]):
    """
    Holds one value of type 'T' and notifies subscribers when it is replaced.

    Attributes:
        frozen: True while the feeding subscription is broken.
        error: The error that froze the store, if any.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: list[Listener[T]] = []
        self.frozen = False
        self.error: Exception | None = None

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self.frozen = False
        self.error = None
        for listener in list(self._listeners):
            listener(value)

    def subscribe(self, listener: Listener[T]) -> Callable[[], None]:
        """Register 'listener' for future values and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def freeze(self, error: Exception) -> None:
        logger.warning(f"{type(self).__name__} frozen at its last snapshot: {error}")
        self.frozen = True
        self.error = error
