"""Tests for environment-driven settings and ranking calibration."""

import pytest
from pydantic import ValidationError

from config.calibration import RankingCalibration
from config.settings import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("FLOW_CANDIDATE_COUNT", raising=False)
    current = Settings(_env_file=None)

    assert current.flow_candidate_count == 6
    assert current.flow_min_candidates == 3
    assert current.flow_generation_max_tokens == 7000
    assert current.flow_roleplay_max_tokens == 2600
    assert current.prompt_render_max_tokens == 1200
    assert current.calibration == RankingCalibration()


def test_allowed_origins_are_split(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.test, http://b.test ,")
    assert Settings(_env_file=None).allowed_origins == ["http://a.test", "http://b.test"]


def test_calibration_overridable_from_env(monkeypatch):
    monkeypatch.setenv("CALIBRATION__MIN_SCORE", "80")
    monkeypatch.setenv("CALIBRATION__PROMOTE_BOOST", "12.5")

    calibration = Settings(_env_file=None).calibration

    assert calibration.min_score == 80
    assert calibration.promote_boost == 12.5
    assert calibration.max_negative_risk == 25


def test_calibration_is_frozen():
    calibration = RankingCalibration()
    with pytest.raises(ValidationError):
        calibration.min_score = 10


def test_calibration_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        RankingCalibration(min_scor=10)
