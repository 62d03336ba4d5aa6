"""Application lifecycle signals (background / foreground)."""

import itertools
from typing import Callable


class AppLifecycle:
    """Fan out background/foreground events to subscribers"""

    def __init__(self):
        self._subscribers: dict[int, tuple[Callable[[], None], Callable[[], None]]] = {}
        self._ids = itertools.count(1)
        self.in_background = False

    def subscribe(self, on_background: Callable[[], None],
                  on_foreground: Callable[[], None]) -> int:
        token = next(self._ids)
        self._subscribers[token] = (on_background, on_foreground)
        return token

    def unsubscribe(self, token: int):
        self._subscribers.pop(token, None)

    def enter_background(self):
        self.in_background = True
        for on_background, _ in list(self._subscribers.values()):
            on_background()

    def become_active(self):
        self.in_background = False
        for _, on_foreground in list(self._subscribers.values()):
            on_foreground()
