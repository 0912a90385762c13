"""Navigation path store.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Callable

from .routes import Route

logger = logging.getLogger(__name__)

PathListener = Callable[[tuple[Route, ...]], None]


class NavigationStore:
    """Stack of routes rendered by the presentation layer.

    One instance is created per UI session and passed to whatever composes
    the screens. Mutations happen on the event loop thread only.
    """

    def __init__(self) -> None:
        self._path: list[Route] = []
        self._listeners: list[PathListener] = []

    @property
    def path(self) -> tuple[Route, ...]:
        return tuple(self._path)

    @property
    def top(self) -> Route | None:
        return self._path[-1] if self._path else None

    def __len__(self) -> int:
        return len(self._path)

    def subscribe(self, listener: PathListener) -> Callable[[], None]:
        """Register ``listener`` for path changes.

        Returns:
            A callable that removes the listener.

        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def push(self, route: Route) -> None:
        self._path.append(route)
        logger.debug("Pushed %s (depth %d)", type(route).__name__, len(self._path))
        self._notify()

    def pop(self) -> None:
        if self._path:
            self._path.pop()
            self._notify()

    def pop_to_root(self) -> None:
        self._path.clear()
        self._notify()

    def reset(self) -> None:
        self._path = []
        self._notify()

    def _notify(self) -> None:
        snapshot = self.path
        for listener in list(self._listeners):
            listener(snapshot)
