"""Process-wide shared state.

assistant_voice mirrors the persisted assistant voice so components outside
the settings page (the assistant loop, tray menus) can follow it without
re-reading the store.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ObservableCell(Generic[T]):
    """A single value with change subscribers.

    Subscribers are called synchronously with the new value when set()
    changes it. A failing subscriber is logged and does not stop the rest.
    """

    def __init__(self, name: str, initial: T) -> None:
        self._name = name
        self._value = initial
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Publish a new value.

        Returns:
            True if the value changed and subscribers were notified.
        """
        if value == self._value:
            return False
        self._value = value
        logger.debug("state: %s updated", self._name)
        for subscriber in list(self._subscribers):
            try:
                subscriber(value)
            except Exception as e:
                logger.error("state: %s subscriber failed: %s", self._name, e)
        return True

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a subscriber.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe


assistant_voice: ObservableCell[str] = ObservableCell("assistant_voice", "")
