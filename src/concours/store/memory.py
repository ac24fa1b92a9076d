"\"\"\"Dictionary-backed store with snapshot transactions.\"\"\""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Iterator

import structlog

from ..schemas import (
    CATALOGS,
    Applicant,
    CatalogName,
    ChangeEvent,
    ChangeKind,
    ListItem,
    Notification,
    Position,
    ScoreConfig,
)

_logger = structlog.get_logger(__name__)


@dataclass
class StoreState:
    """Complete logical state; dict insertion order is submission order."""

    applicants: dict[str, Applicant] = field(default_factory=dict)
    positions: dict[str, Position] = field(default_factory=dict)
    lists: dict[str, dict[str, ListItem]] = field(
        default_factory=lambda: {name: {} for name in CATALOGS}
    )
    notifications: dict[str, list[Notification]] = field(default_factory=dict)
    score_config: ScoreConfig = field(default_factory=ScoreConfig)
    events: list[ChangeEvent] = field(default_factory=list)

    def snapshot(self) -> "StoreState":
        # stored records are replaced, never mutated, so copying containers suffices
        return StoreState(
            applicants=dict(self.applicants),
            positions=dict(self.positions),
            lists={name: dict(items) for name, items in self.lists.items()},
            notifications={key: list(entries) for key, entries in self.notifications.items()},
            score_config=self.score_config,
            events=list(self.events),
        )


class TransactionAbortedError(RuntimeError):
    """Raised when an outer block commits after a nested block failed."""


def _run_callback(callback: Callable[[], None]) -> None:
    try:
        callback()
    except Exception:  # noqa: BLE001
        _logger.exception("store.after_commit_failed")


class InMemoryStore:
    """Single-writer store keeping everything in process memory.

    Records handed out are copies; callers write back through ``upsert_*``.
    """

    def __init__(self, state: StoreState | None = None) -> None:
        self._state = state or StoreState()
        self._lock = threading.RLock()
        self._depth = 0
        self._rollback_only = False
        self._pending_callbacks: list[Callable[[], None]] = []

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Open a unit of work; nested blocks join the outermost one.

        Only the outermost block snapshots the state. A failure escaping a
        nested block marks the whole unit of work for rollback, even when
        an outer block catches the exception.
        """
        callbacks: list[Callable[[], None]] = []
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                snapshot = self._state.snapshot()
                self._rollback_only = False
            self._depth += 1
            try:
                yield
                if outermost:
                    if self._rollback_only:
                        raise TransactionAbortedError("A nested block failed; unit of work rolled back")
                    self._commit()
            except BaseException:
                if outermost:
                    self._state = snapshot
                    self._pending_callbacks = []
                else:
                    self._rollback_only = True
                raise
            finally:
                self._depth -= 1
            if outermost:
                callbacks, self._pending_callbacks = self._pending_callbacks, []
        # subscribers run outside the lock so they may read the store
        for callback in callbacks:
            _run_callback(callback)

    def after_commit(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._depth:
                self._pending_callbacks.append(callback)
                return
        _run_callback(callback)

    def _commit(self) -> None:
        """Hook for subclasses that persist the committed state."""

    # applicants

    def all_applicants(self) -> list[Applicant]:
        with self._lock:
            return [applicant.model_copy() for applicant in self._state.applicants.values()]

    def get_applicant(self, applicant_id: str) -> Applicant | None:
        with self._lock:
            applicant = self._state.applicants.get(applicant_id)
            return applicant.model_copy() if applicant else None

    def upsert_applicant(self, applicant: Applicant) -> None:
        with self.transaction():
            self._state.applicants[applicant.id] = applicant.model_copy()

    def replace_applicants(self, applicants: Iterable[Applicant]) -> None:
        with self.transaction():
            self._state.applicants = {
                applicant.id: applicant.model_copy() for applicant in applicants
            }

    def delete_applicant(self, applicant_id: str) -> None:
        with self.transaction():
            self._state.applicants.pop(applicant_id, None)
            self._state.notifications.pop(applicant_id, None)

    # positions

    def all_positions(self) -> list[Position]:
        with self._lock:
            return [position.model_copy() for position in self._state.positions.values()]

    def get_position(self, code: str) -> Position | None:
        with self._lock:
            position = self._state.positions.get(code)
            return position.model_copy() if position else None

    def upsert_position(self, position: Position) -> None:
        with self.transaction():
            self._state.positions[position.code] = position.model_copy()

    def delete_position(self, code: str) -> None:
        with self.transaction():
            self._state.positions.pop(code, None)

    # classification lists

    def all_items(self, catalog: CatalogName) -> list[ListItem]:
        with self._lock:
            return [item.model_copy() for item in self._catalog(catalog).values()]

    def get_item(self, catalog: CatalogName, value: str) -> ListItem | None:
        with self._lock:
            item = self._catalog(catalog).get(value)
            return item.model_copy() if item else None

    def upsert_item(self, catalog: CatalogName, item: ListItem) -> None:
        with self.transaction():
            self._catalog(catalog)[item.value] = item.model_copy()

    def delete_item(self, catalog: CatalogName, value: str) -> None:
        with self.transaction():
            self._catalog(catalog).pop(value, None)

    def _catalog(self, catalog: CatalogName) -> dict[str, ListItem]:
        try:
            return self._state.lists[catalog]
        except KeyError as exc:
            raise KeyError(f"Unknown catalog: {catalog!r}") from exc

    # notifications

    def notifications_for(self, applicant_id: str) -> list[Notification]:
        with self._lock:
            return [n.model_copy() for n in self._state.notifications.get(applicant_id, [])]

    def append_notification(self, notification: Notification) -> None:
        with self.transaction():
            self._state.notifications.setdefault(notification.applicant_id, []).append(
                notification.model_copy()
            )

    def replace_notifications(self, applicant_id: str, notifications: Iterable[Notification]) -> None:
        with self.transaction():
            self._state.notifications[applicant_id] = [n.model_copy() for n in notifications]

    # configuration

    def load_score_config(self) -> ScoreConfig:
        with self._lock:
            return self._state.score_config.model_copy()

    def save_score_config(self, config: ScoreConfig) -> None:
        with self.transaction():
            self._state.score_config = config.model_copy()

    # change feed

    def append_event(self, kind: ChangeKind, applicant_id: str, at: datetime) -> ChangeEvent:
        with self.transaction():
            events = self._state.events
            sequence = events[-1].sequence + 1 if events else 1
            event = ChangeEvent(sequence=sequence, kind=kind, applicant_id=applicant_id, at=at)
            events.append(event)
            return event.model_copy()

    def events_since(self, cursor: int) -> list[ChangeEvent]:
        with self._lock:
            return [event.model_copy() for event in self._state.events if event.sequence > cursor]
