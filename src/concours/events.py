"\"\"\"Committed change feed shared by pollers and push subscribers.\"\"\""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import structlog

from .schemas import ChangeEvent, ChangeKind

Subscriber = Callable[[ChangeEvent], None]


class ChangeFeed:
    """Append change events in the caller's unit of work.

    Pollers read ``since(cursor)``; subscribers are called after the unit of
    work commits, so both observe the same sequence and never a rolled-back
    change.
    """

    def __init__(self, store) -> None:
        self._store = store
        self._subscribers: list[Subscriber] = []
        self._logger = structlog.get_logger(__name__)

    def publish(self, kind: ChangeKind, applicant_id: str, at: datetime) -> ChangeEvent:
        event = self._store.append_event(kind, applicant_id, at)
        self._store.after_commit(lambda: self._deliver(event))
        return event

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def since(self, cursor: int = 0) -> list[ChangeEvent]:
        return self._store.events_since(cursor)

    def _deliver(self, event: ChangeEvent) -> None:
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:  # noqa: BLE001
                self._logger.exception(
                    "change_feed.subscriber_failed",
                    sequence=event.sequence,
                    kind=event.kind,
                )
