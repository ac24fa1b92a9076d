"\"\"\"JSON file persistence for admission state.\"\"\""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog

from ..schemas import (
    CATALOGS,
    Applicant,
    ChangeEvent,
    ListItem,
    Notification,
    Position,
    ScoreConfig,
)
from .memory import InMemoryStore, StoreState


class JsonFileStore(InMemoryStore):
    """In-memory store that rewrites one JSON document on every commit.

    The document is replaced atomically, so a reader never sees a partially
    written collection. Concurrent processes follow last-writer-wins.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._logger = structlog.get_logger(__name__)
        super().__init__(self._read_state())

    @property
    def path(self) -> Path:
        return self._path

    def _read_state(self) -> StoreState:
        if not self._path.exists():
            return StoreState()
        with self._path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid store JSON in {self._path}: {exc}") from exc
        return _state_from_dict(data)

    def _commit(self) -> None:
        payload = _state_to_dict(self._state)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._logger.debug("store.committed", path=str(self._path))


def _state_to_dict(state: StoreState) -> dict[str, Any]:
    return {
        "applicants": [a.model_dump(mode="json") for a in state.applicants.values()],
        "positions": [p.model_dump(mode="json") for p in state.positions.values()],
        "lists": {
            name: [item.model_dump(mode="json") for item in items.values()]
            for name, items in state.lists.items()
        },
        "notifications": {
            applicant_id: [n.model_dump(mode="json") for n in entries]
            for applicant_id, entries in state.notifications.items()
        },
        "score_config": state.score_config.model_dump(mode="json"),
        "events": [e.model_dump(mode="json") for e in state.events],
    }


def _state_from_dict(data: dict[str, Any]) -> StoreState:
    state = StoreState()
    for raw in data.get("applicants", []):
        applicant = Applicant.model_validate(raw)
        state.applicants[applicant.id] = applicant
    for raw in data.get("positions", []):
        position = Position.model_validate(raw)
        state.positions[position.code] = position
    lists = data.get("lists", {})
    for name in CATALOGS:
        for raw in lists.get(name, []):
            item = ListItem.model_validate(raw)
            state.lists[name][item.value] = item
    for applicant_id, entries in data.get("notifications", {}).items():
        state.notifications[applicant_id] = [Notification.model_validate(raw) for raw in entries]
    if data.get("score_config"):
        state.score_config = ScoreConfig.model_validate(data["score_config"])
    state.events = [ChangeEvent.model_validate(raw) for raw in data.get("events", [])]
    return state
