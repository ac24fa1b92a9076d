"\"\"\"Admission service: the operation surface used by forms, portal and CLI.\"\"\""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping

import structlog
from pydantic import ValidationError

from .core import (
    Countdown,
    DeadlineClock,
    NotificationDispatcher,
    RankedApplicant,
    RankingEngine,
    ReferenceCatalog,
    StageEntry,
    StageRankingKey,
    StatusWorkflow,
    compute_score,
    credentials_match,
    generate_password,
)
from .errors import (
    ApplicantNotFoundError,
    DuplicateEmailError,
    EditingClosedError,
    InvalidCapacityError,
    InvalidDraftError,
    InvalidPatchError,
    InvalidPositionError,
    SubmissionClosedError,
)
from .events import ChangeFeed, Subscriber
from .schemas import (
    EDITABLE_FIELDS,
    Applicant,
    ApplicantDraft,
    ApplicantStatus,
    CatalogName,
    ChangeEvent,
    ListItem,
    Notification,
    Position,
    ScoreConfig,
    email_key,
)
from . import __version__


@dataclass(slots=True)
class CandidateStanding:
    """What the candidate portal shows next to the dossier."""

    applicant_id: str
    status: ApplicantStatus
    score: float
    rank: int
    total_eligible: int
    position_code: str
    position_title: str
    open_positions: int
    written_exam_count: int
    deadline_expired: bool
    is_retained: bool
    unread_notifications: int
    poll_interval_seconds: float


class AdmissionService:
    """Coordinates the store, the catalog and the engines.

    Every mutation is one unit of work on the store: it either applies
    completely or leaves the stored state untouched.
    """

    def __init__(
        self,
        *,
        store,
        catalog: ReferenceCatalog,
        workflow: StatusWorkflow,
        dispatcher: NotificationDispatcher,
        ranking: RankingEngine,
        feed: ChangeFeed,
        clock: DeadlineClock | None = None,
        password_length: int | None = None,
        poll_interval_seconds: float | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._workflow = workflow
        self._dispatcher = dispatcher
        self._ranking = ranking
        self._feed = feed
        self._clock = clock or DeadlineClock()
        self._password_length = password_length or 8
        self._poll_interval = poll_interval_seconds or 2.0
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._logger = structlog.get_logger(__name__)

    @property
    def catalog(self) -> ReferenceCatalog:
        return self._catalog

    # applicants

    def submit(self, draft: ApplicantDraft | Mapping[str, Any]) -> Applicant:
        config = self._store.load_score_config()
        if self._clock.is_expired(config):
            self._logger.warning("applicant.submission_rejected", reason="closed")
            raise SubmissionClosedError()
        if not isinstance(draft, ApplicantDraft):
            try:
                draft = ApplicantDraft.model_validate(dict(draft))
            except ValidationError as exc:
                errors = _error_lines(exc)
                self._logger.warning("applicant.submission_rejected", reason="invalid", errors=errors)
                raise InvalidDraftError(errors) from exc

        with self._store.transaction():
            if self._catalog.resolve_position(draft.target_position_number) is None:
                raise InvalidPositionError(draft.target_position_number)
            if self._find_by_email(draft.email) is not None:
                raise DuplicateEmailError(draft.email)
            now = self._clock.now()
            applicant = Applicant(
                **draft.model_dump(),
                id=self._id_factory(),
                password=generate_password(self._password_length),
                submitted_at=now,
            )
            self._store.upsert_applicant(applicant)
            self._feed.publish("applicant.submitted", applicant.id, now)

        self._logger.info(
            "applicant.submitted",
            applicant_id=applicant.id,
            position=applicant.target_position_number,
        )
        return applicant

    def update_profile(self, applicant_id: str, patch: Mapping[str, Any]) -> Applicant:
        """Self-service edit, refused once the deadline has passed."""
        current = self.get_applicant(applicant_id)
        config = self._store.load_score_config()
        if self._clock.is_expired(config):
            self._logger.warning("applicant.edit_rejected", applicant_id=applicant_id, reason="closed")
            raise EditingClosedError(applicant_id)

        blocked = sorted(set(patch) - EDITABLE_FIELDS)
        if blocked:
            raise InvalidPatchError(blocked)

        with self._store.transaction():
            current = self.get_applicant(applicant_id)
            merged = current.model_dump()
            merged.update(patch)
            try:
                updated = Applicant.model_validate(merged)
            except ValidationError as exc:
                errors = _error_lines(exc)
                self._logger.warning(
                    "applicant.edit_rejected", applicant_id=applicant_id, reason="invalid", errors=errors
                )
                raise InvalidDraftError(errors) from exc
            if (
                updated.target_position_number != current.target_position_number
                and self._catalog.resolve_position(updated.target_position_number) is None
            ):
                raise InvalidPositionError(updated.target_position_number)
            self._store.upsert_applicant(updated)
            self._feed.publish("applicant.updated", applicant_id, self._clock.now())

        self._logger.info("applicant.updated", applicant_id=applicant_id, fields=sorted(patch))
        return updated

    def get_applicant(self, applicant_id: str) -> Applicant:
        applicant = self._store.get_applicant(applicant_id)
        if applicant is None:
            raise ApplicantNotFoundError(applicant_id)
        return applicant

    def list_applicants(self) -> list[Applicant]:
        return self._store.all_applicants()

    def set_status(self, applicant_id: str, new_status: ApplicantStatus, *, actor: str = "admin") -> None:
        self._workflow.set_status(applicant_id, new_status, actor=actor)

    def bulk_accept_pending(self, *, actor: str = "admin") -> int:
        return len(self._workflow.bulk_accept_pending(actor=actor))

    # accounts

    def login(self, email: str, password: str) -> Applicant | None:
        applicant = self._find_by_email(email)
        if applicant is None or not credentials_match(applicant.password, password):
            self._logger.info("applicant.login_failed")
            return None
        return applicant

    def reset_password(self, email: str) -> str | None:
        with self._store.transaction():
            applicant = self._find_by_email(email)
            if applicant is None:
                return None
            password = generate_password(self._password_length)
            self._store.upsert_applicant(applicant.model_copy(update={"password": password}))
        self._logger.info("applicant.password_reset", applicant_id=applicant.id)
        return password

    def _find_by_email(self, email: str) -> Applicant | None:
        key = email_key(email)
        for applicant in self._store.all_applicants():
            if email_key(applicant.email) == key:
                return applicant
        return None

    # ranking

    def rank_for_position(self, position_code: str) -> list[RankedApplicant]:
        return self._ranking.rank(
            position_code, self._store.all_applicants(), self._store.load_score_config()
        )

    def rank_oral_stage(self, position_code: str, key: StageRankingKey | None) -> list[StageEntry]:
        return self._ranking.rank_oral_stage(
            position_code, self._store.all_applicants(), self._store.load_score_config(), key
        )

    def global_ranking(self) -> list[RankedApplicant]:
        return self._ranking.global_ranking(
            self._store.all_applicants(), self._store.load_score_config()
        )

    def candidate_standing(self, applicant_id: str) -> CandidateStanding:
        applicant = self.get_applicant(applicant_id)
        config = self._store.load_score_config()
        rows = self._ranking.rank(
            applicant.target_position_number, self._store.all_applicants(), config
        )
        own = next((row for row in rows if row.applicant_id == applicant_id), None)
        position = self._store.get_position(applicant.target_position_number)
        return CandidateStanding(
            applicant_id=applicant_id,
            status=applicant.status,
            score=compute_score(applicant, config),
            rank=own.rank if own else 0,
            total_eligible=len(rows),
            position_code=applicant.target_position_number,
            position_title=position.title if position else applicant.target_position_number,
            open_positions=position.open_positions if position else 0,
            written_exam_count=config.written_exam_count,
            deadline_expired=self._clock.is_expired(config),
            is_retained=bool(own and own.is_retained),
            unread_notifications=self._dispatcher.unread_count(applicant_id),
            poll_interval_seconds=self._poll_interval,
        )

    # notifications and changes

    def get_notifications(self, applicant_id: str, *, since: datetime | None = None) -> list[Notification]:
        return self._dispatcher.list(applicant_id, since=since)

    def mark_all_read(self, applicant_id: str) -> int:
        return self._dispatcher.mark_all_read(applicant_id)

    def changes_since(self, cursor: int = 0) -> list[ChangeEvent]:
        return self._feed.since(cursor)

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        return self._feed.subscribe(subscriber)

    # configuration and deadline

    def score_config(self) -> ScoreConfig:
        return self._store.load_score_config()

    def save_score_config(self, config: ScoreConfig | Mapping[str, Any]) -> ScoreConfig:
        try:
            validated = ScoreConfig.model_validate(
                config.model_dump() if isinstance(config, ScoreConfig) else dict(config)
            )
        except ValidationError as exc:
            errors = _error_lines(exc)
            self._logger.warning("score_config.rejected", errors=errors)
            raise InvalidCapacityError(errors) from exc
        self._store.save_score_config(validated)
        self._logger.info(
            "score_config.saved",
            bac_weight=validated.bac_weight,
            grad_weight=validated.grad_weight,
            written_exam_count=validated.written_exam_count,
            oral_exam_count=validated.oral_exam_count,
            deadline=validated.deadline.isoformat() if validated.deadline else None,
            app_version=__version__,
        )
        return validated

    def submissions_open(self) -> bool:
        return not self._clock.is_expired(self._store.load_score_config())

    def time_left(self) -> Countdown | None:
        return self._clock.time_left(self._store.load_score_config())

    # reference data

    def add_position(self, position: Position | Mapping[str, Any]) -> Position:
        return self._catalog.add_position(_as_model(Position, position))

    def update_position(self, code: str, position: Position | Mapping[str, Any]) -> Position:
        return self._catalog.update_position(code, _as_model(Position, position))

    def remove_position(self, code: str) -> None:
        self._catalog.remove_position(code)

    def publish_position(self, code: str, published: bool = True) -> Position:
        return self._catalog.set_position_published(code, published)

    def position_title(self, code: str) -> str:
        return self._catalog.position_title(code)

    def add_list_item(self, catalog: CatalogName, item: ListItem | Mapping[str, Any]) -> ListItem:
        return self._catalog.add_item(catalog, _as_model(ListItem, item))

    def update_list_item(
        self, catalog: CatalogName, value: str, item: ListItem | Mapping[str, Any]
    ) -> ListItem:
        return self._catalog.update_item(catalog, value, _as_model(ListItem, item))

    def remove_list_item(self, catalog: CatalogName, value: str) -> None:
        self._catalog.remove_item(catalog, value)

    def publish_list_item(self, catalog: CatalogName, value: str, published: bool = True) -> ListItem:
        return self._catalog.set_item_published(catalog, value, published)

    def resolve_label(self, catalog: CatalogName, value: str) -> str:
        return self._catalog.resolve_label(catalog, value)


def _error_lines(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]


def _as_model(model, value):
    return value if isinstance(value, model) else model.model_validate(dict(value))
