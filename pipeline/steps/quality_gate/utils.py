"""
Quality Gate Utilities

Deterministic rank score, gate predicate and selection. No network calls.
"""

from typing import List, Optional

from config.calibration import RankingCalibration
from pipeline.models.candidates import (
    CandidateEvaluation,
    CandidateGraph,
    Decision,
    RankedCandidate,
)

DEFAULT_CALIBRATION = RankingCalibration()


def decision_boost(decision: Decision, calibration: RankingCalibration = DEFAULT_CALIBRATION) -> float:
    if decision == Decision.PROMOTE:
        return calibration.promote_boost
    if decision == Decision.REVISE:
        return calibration.revise_boost
    return calibration.reject_boost


def roleplay_rank(
    evaluation: CandidateEvaluation,
    calibration: RankingCalibration = DEFAULT_CALIBRATION,
) -> float:
    """
    rank = score + 0.15*open + 0.50*reply + 0.45*positiveReply
         + 0.25*clarity - 0.75*negativeRisk + decisionBoost

    (weights shown at their default calibration)
    """
    return (
        evaluation.score
        + calibration.open_weight * evaluation.open_likelihood
        + calibration.reply_weight * evaluation.reply_likelihood
        + calibration.positive_reply_weight * evaluation.positive_reply_likelihood
        + calibration.clarity_weight * evaluation.clarity
        - calibration.negative_risk_weight * evaluation.negative_risk
        + decision_boost(evaluation.decision, calibration)
    )


def passes_gate(
    evaluation: CandidateEvaluation,
    calibration: RankingCalibration = DEFAULT_CALIBRATION,
) -> bool:
    """All thresholds are inclusive; a reject verdict always fails."""
    if evaluation.decision == Decision.REJECT:
        return False
    if evaluation.score < calibration.min_score:
        return False
    if evaluation.reply_likelihood < calibration.min_reply_likelihood:
        return False
    if evaluation.positive_reply_likelihood < calibration.min_positive_reply_likelihood:
        return False
    if evaluation.clarity < calibration.min_clarity:
        return False
    if evaluation.negative_risk > calibration.max_negative_risk:
        return False
    return True


def rank_candidates(
    candidates: List[CandidateGraph],
    evaluations: List[CandidateEvaluation],
    calibration: RankingCalibration = DEFAULT_CALIBRATION,
) -> List[RankedCandidate]:
    """
    Pair candidates with their evaluation and sort best first.

    The sort is stable, so equal ranks keep generator order. Candidates
    without an evaluation are left out.
    """
    by_index = {evaluation.index: evaluation for evaluation in evaluations}

    paired = [
        RankedCandidate(
            candidate=candidate,
            evaluation=by_index[candidate.index],
            rank=roleplay_rank(by_index[candidate.index], calibration),
            passes_gate=passes_gate(by_index[candidate.index], calibration),
        )
        for candidate in candidates
        if candidate.index in by_index
    ]
    return sorted(paired, key=lambda row: row.rank, reverse=True)


def select_candidate(ranked: List[RankedCandidate]) -> Optional[RankedCandidate]:
    """First candidate in rank order that passes the gate."""
    for row in ranked:
        if row.passes_gate:
            return row
    return None
