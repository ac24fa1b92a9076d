from __future__ import annotations

import pytest
from pydantic import ValidationError

from concours.schemas import EDITABLE_FIELDS, AppConfig, ApplicantDraft, ScoreConfig, load_config


def build_draft(**kwargs) -> ApplicantDraft:
    defaults = {"email": "  salma@example.tn ", "target_position_number": " 101 "}
    defaults.update(kwargs)
    return ApplicantDraft(**defaults)


def test_draft_defaults_and_normalization():
    draft = build_draft()

    assert draft.email == "salma@example.tn"
    assert draft.target_position_number == "101"
    assert draft.bac_average is None
    assert draft.full_name == ""


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("15,5", 15.5), ("  12.25 ", 12.25), (14, 14.0), ("", None), ("abc", None), (None, None), ("nan", None)],
)
def test_averages_are_parsed_leniently(raw, expected):
    assert build_draft(bac_average=raw).bac_average == expected


def test_social_security_none_clears_number():
    draft = build_draft(social_security_type="none", cnss_number="12345")

    assert draft.cnss_number == ""


def test_draft_rejects_unknown_fields_and_bad_email():
    with pytest.raises(ValidationError):
        build_draft(favourite_colour="blue")
    with pytest.raises(ValidationError):
        build_draft(email="not-an-email")


def test_identity_fields_are_not_editable():
    assert "email" not in EDITABLE_FIELDS
    assert "status" not in EDITABLE_FIELDS
    assert "bac_average" in EDITABLE_FIELDS
    assert "target_position_number" in EDITABLE_FIELDS


def test_score_config_defaults():
    config = ScoreConfig()

    assert (config.bac_weight, config.grad_weight) == (40.0, 60.0)
    assert (config.written_exam_count, config.oral_exam_count) == (20, 10)
    assert config.deadline is None
    assert ScoreConfig(deadline="").deadline is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"written_exam_count": -1},
        {"oral_exam_count": 2.5},
        {"written_exam_count": "many"},
        {"written_exam_count": "3"},
        {"written_exam_count": True},
        {"oral_exam_count": 4.0},
        {"bac_weight": -10},
        {"grad_weight": float("inf")},
    ],
)
def test_score_config_rejects_malformed_values(overrides):
    with pytest.raises(ValidationError):
        ScoreConfig(**overrides)


def test_load_config_validation():
    app_config = load_config(
        {"store": {"path": "state.json"}, "workflow": {"notify_on_reset": True}}
    )

    assert isinstance(app_config, AppConfig)
    settings = app_config.to_settings()
    assert str(settings["store"]["path"]) == "state.json"
    assert settings["workflow"]["notify_on_reset"] is True
    assert settings["portal"]["poll_interval_seconds"] == 2.0


def test_load_config_rejects_non_mapping():
    with pytest.raises(ValidationError):
        load_config(["not", "a", "mapping"])
