"\"\"\"Persistence adapters for admission state.\"\"\""

from __future__ import annotations

from datetime import datetime
from typing import Callable, ContextManager, Iterable, Protocol, runtime_checkable

from ..schemas import (
    Applicant,
    CatalogName,
    ChangeEvent,
    ChangeKind,
    ListItem,
    Notification,
    Position,
    ScoreConfig,
)
from .json_file import JsonFileStore
from .memory import InMemoryStore, TransactionAbortedError


@runtime_checkable
class AdmissionStore(Protocol):
    """Storage contract consumed by the admission core.

    Every collection supports get all / get one / upsert / delete. Mutations
    made inside ``transaction()`` become visible to other callers as one
    unit; an exception restores the state from before the block.
    """

    def transaction(self) -> ContextManager[None]:
        """Open a (re-entrant) unit of work."""

    def after_commit(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the outermost unit of work has committed."""

    def all_applicants(self) -> list[Applicant]: ...

    def get_applicant(self, applicant_id: str) -> Applicant | None: ...

    def upsert_applicant(self, applicant: Applicant) -> None: ...

    def replace_applicants(self, applicants: Iterable[Applicant]) -> None: ...

    def delete_applicant(self, applicant_id: str) -> None: ...

    def all_positions(self) -> list[Position]: ...

    def get_position(self, code: str) -> Position | None: ...

    def upsert_position(self, position: Position) -> None: ...

    def delete_position(self, code: str) -> None: ...

    def all_items(self, catalog: CatalogName) -> list[ListItem]: ...

    def get_item(self, catalog: CatalogName, value: str) -> ListItem | None: ...

    def upsert_item(self, catalog: CatalogName, item: ListItem) -> None: ...

    def delete_item(self, catalog: CatalogName, value: str) -> None: ...

    def notifications_for(self, applicant_id: str) -> list[Notification]: ...

    def append_notification(self, notification: Notification) -> None: ...

    def replace_notifications(self, applicant_id: str, notifications: Iterable[Notification]) -> None: ...

    def load_score_config(self) -> ScoreConfig: ...

    def save_score_config(self, config: ScoreConfig) -> None: ...

    def append_event(self, kind: ChangeKind, applicant_id: str, at: datetime) -> ChangeEvent: ...

    def events_since(self, cursor: int) -> list[ChangeEvent]: ...


__all__ = ["AdmissionStore", "InMemoryStore", "JsonFileStore", "TransactionAbortedError"]
