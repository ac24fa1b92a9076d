"\"\"\"Per-position ranking and capacity funnels.\"\"\""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Protocol, runtime_checkable

from ..schemas import ACCEPTED, Applicant, ApplicantStatus, ScoreConfig, parse_average
from .scoring import ScoreCalculator


@dataclass(slots=True)
class RankedApplicant:
    """Ranking row; ``is_retained`` is ``None`` outside a funnel."""

    applicant_id: str
    full_name: str
    position_code: str
    status: ApplicantStatus
    score: float
    rank: int
    is_retained: bool | None


@dataclass(slots=True)
class StageEntry:
    """Oral-stage row built from a stage-1 row and its stage key."""

    applicant_id: str
    full_name: str
    written_rank: int
    stage_score: float
    rank: int
    is_retained: bool


def within_capacity(rank: int, capacity: int) -> bool:
    """True when a 1-based ``rank`` falls inside a funnel of ``capacity``."""
    return 1 <= rank <= capacity


@runtime_checkable
class StageRankingKey(Protocol):
    """Ordering key for a later funnel stage; ``None`` means no result."""

    def __call__(self, applicant: Applicant) -> float | None:
        """Return the applicant's result for the stage."""


class WrittenExamResults:
    """Stage key backed by a mapping of applicant id to written-exam mark."""

    def __init__(self, results: Mapping[str, object]):
        self._results = {
            str(applicant_id): mark
            for applicant_id, mark in (
                (key, parse_average(value)) for key, value in results.items()
            )
            if mark is not None
        }

    def __call__(self, applicant: Applicant) -> float | None:
        return self._results.get(applicant.id)

    def __len__(self) -> int:
        return len(self._results)


class RankingEngine:
    """Recomputes rankings from the current applicant set on every call."""

    def __init__(self, calculator: ScoreCalculator | None = None) -> None:
        self._calculator = calculator or ScoreCalculator()

    def rank(
        self,
        position_code: str,
        applicants: Iterable[Applicant],
        config: ScoreConfig,
    ) -> list[RankedApplicant]:
        """Stage-1 funnel for one position.

        Only accepted applicants targeting ``position_code`` take part. The
        sort is stable, so equal scores keep their submission order.
        """
        code = position_code.strip()
        eligible = [
            applicant
            for applicant in applicants
            if applicant.target_position_number == code and applicant.status == ACCEPTED
        ]
        rows = self._ordered(eligible, config)
        for row in rows:
            row.is_retained = within_capacity(row.rank, config.written_exam_count)
        return rows

    def global_ranking(
        self,
        applicants: Iterable[Applicant],
        config: ScoreConfig,
    ) -> list[RankedApplicant]:
        """Display ordering across all positions and statuses.

        Not an admission decision: rows carry no funnel flag.
        """
        return self._ordered(list(applicants), config)

    def rank_oral_stage(
        self,
        position_code: str,
        applicants: Iterable[Applicant],
        config: ScoreConfig,
        key: StageRankingKey | None,
    ) -> list[StageEntry]:
        """Stage-2 funnel over the stage-1 retained population.

        Applicants without a result for ``key`` do not take part. Without a
        key the stage is empty.
        """
        if key is None:
            return []
        applicants = list(applicants)
        by_id = {applicant.id: applicant for applicant in applicants}
        candidates: list[tuple[RankedApplicant, float]] = []
        for row in self.rank(position_code, applicants, config):
            if not row.is_retained:
                continue
            result = key(by_id[row.applicant_id])
            if result is None:
                continue
            candidates.append((row, float(result)))

        candidates.sort(key=lambda item: item[1], reverse=True)
        return [
            StageEntry(
                applicant_id=row.applicant_id,
                full_name=row.full_name,
                written_rank=row.rank,
                stage_score=result,
                rank=index,
                is_retained=within_capacity(index, config.oral_exam_count),
            )
            for index, (row, result) in enumerate(candidates, start=1)
        ]

    def _ordered(self, applicants: list[Applicant], config: ScoreConfig) -> list[RankedApplicant]:
        scored = [(applicant, self._calculator.score(applicant, config)) for applicant in applicants]
        # equal scores keep input order, reverse included
        scored.sort(key=lambda item: item[1], reverse=True)
        return [
            RankedApplicant(
                applicant_id=applicant.id,
                full_name=applicant.full_name,
                position_code=applicant.target_position_number,
                status=applicant.status,
                score=score,
                rank=index,
                is_retained=None,
            )
            for index, (applicant, score) in enumerate(scored, start=1)
        ]
