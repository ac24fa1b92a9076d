"\"\"\"Personal score computation.\"\"\""

from __future__ import annotations

from typing import Any, Mapping

from ..schemas import Applicant, ScoreConfig, parse_average


def compute_score(applicant: Applicant | Mapping[str, Any], config: ScoreConfig) -> float:
    """Weighted personal score: ``bac * bac_weight% + grad * grad_weight%``.

    Missing or non-numeric averages count as 0 so an incomplete dossier
    sorts last instead of breaking the ranking.
    """
    bac = _average(applicant, "bac_average")
    grad = _average(applicant, "grad_average")
    return bac * (config.bac_weight / 100) + grad * (config.grad_weight / 100)


def _average(applicant: Applicant | Mapping[str, Any], name: str) -> float:
    if isinstance(applicant, Mapping):
        raw = applicant.get(name)
    else:
        raw = getattr(applicant, name, None)
    value = parse_average(raw)
    return 0.0 if value is None else value


class ScoreCalculator:
    """Stateless scorer; the configuration is supplied on every call."""

    def score(self, applicant: Applicant | Mapping[str, Any], config: ScoreConfig) -> float:
        return compute_score(applicant, config)
