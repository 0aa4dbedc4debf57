"""
Ranking calibration for roleplay-screened flow selection.

The defaults are the hand-tuned constants the selection policy has always used.
They are kept as named, frozen fields so they can be overridden per call or
through settings without touching the ranking code.
"""

from pydantic import BaseModel, ConfigDict, Field


class RankingCalibration(BaseModel):
    """Coefficients for the rank score and thresholds for the quality gate."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Rank score weights
    open_weight: float = Field(default=0.15)
    reply_weight: float = Field(default=0.50)
    positive_reply_weight: float = Field(default=0.45)
    clarity_weight: float = Field(default=0.25)
    negative_risk_weight: float = Field(default=0.75)

    promote_boost: float = Field(default=10.0)
    revise_boost: float = Field(default=2.0)
    reject_boost: float = Field(default=-15.0)

    # Quality gate thresholds (inclusive)
    min_score: int = Field(default=72)
    min_reply_likelihood: int = Field(default=18)
    min_positive_reply_likelihood: int = Field(default=10)
    min_clarity: int = Field(default=70)
    max_negative_risk: int = Field(default=25)

    # Number of near-miss candidates attached to a gate failure
    diagnostic_top_n: int = Field(default=3, ge=1)
