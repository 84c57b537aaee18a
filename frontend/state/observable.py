"""
Subscription primitive shared by the state holders.
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class Observable:
    """Holds listeners and calls them after every state change"""

    def __init__(self):
        self._listeners: List[Callable] = []

    def subscribe(self, listener: Callable) -> Callable[[], None]:
        """Register ``listener(holder)``; returns an unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
