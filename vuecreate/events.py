"""Lifecycle events emitted while a project is being created.

Observers (a progress UI, a test harness) subscribe a callable to an
``EventBus``; the pipeline emits regardless of whether anybody listens.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class LifecycleEvent(str, Enum):
    """Named progress markers, one per pipeline state transition."""

    CREATING = "creating"
    FETCH_REMOTE_PRESET = "fetch-remote-preset"
    GIT_INIT = "git-init"
    PLUGINS_INSTALL = "plugins-install"
    INVOKING_GENERATORS = "invoking-generators"
    DEPS_INSTALL = "deps-install"
    COMPLETION_HOOKS = "completion-hooks"
    DONE = "done"


@dataclass(frozen=True)
class CreationEvent:
    event: LifecycleEvent


EventListener = Callable[[CreationEvent], None]


class EventBus:
    """Fan-out of creation events to subscribed listeners, in subscription order."""

    def __init__(self, listeners: list[EventListener] | None = None) -> None:
        self._listeners: list[EventListener] = list(listeners or [])

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register *listener* and return a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: LifecycleEvent) -> None:
        payload = CreationEvent(event=event)
        for listener in list(self._listeners):
            listener(payload)
