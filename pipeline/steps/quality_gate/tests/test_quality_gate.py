"""
Test suite for Quality Gate Step

Rank formula, inclusive gate boundaries and rank-order selection.
"""

import json
import pytest
from uuid import uuid4

from config.calibration import RankingCalibration
from pipeline.core.exceptions import QualityGateFailure, ValidationError
from pipeline.models.candidates import SCREENED_MODE, CandidateEvaluation, CandidateGraph, Decision
from pipeline.models.core import FlowGenerationData
from pipeline.models.flow_graph import ConversationFlowGraph
from pipeline.steps.quality_gate.main import QualityGateStep
from pipeline.steps.quality_gate.utils import (
    decision_boost,
    passes_gate,
    rank_candidates,
    roleplay_rank,
    select_candidate,
)


PASSING = {
    "score": 80,
    "open_likelihood": 50,
    "reply_likelihood": 30,
    "positive_reply_likelihood": 20,
    "negative_risk": 10,
    "clarity": 80,
    "decision": Decision.PROMOTE,
}


def evaluation(index: int = 0, **overrides) -> CandidateEvaluation:
    fields = dict(PASSING, index=index, summary=f"candidate {index}")
    fields.update(overrides)
    return CandidateEvaluation(**fields)


@pytest.fixture
def candidates(make_graph):
    return [
        CandidateGraph(index=i, graph=ConversationFlowGraph.model_validate(make_graph(f"g{i}")))
        for i in range(4)
    ]


def create_pipeline_data(generation_context, candidates, evaluations) -> FlowGenerationData:
    return FlowGenerationData(
        task_id=str(uuid4()),
        context=generation_context,
        candidates=candidates,
        evaluations=evaluations,
    )


# ===================================================================
# TESTS - Rank formula
# ===================================================================

def test_rank_matches_formula():
    row = evaluation(
        score=80, open_likelihood=40, reply_likelihood=30, positive_reply_likelihood=20,
        clarity=80, negative_risk=10, decision=Decision.PROMOTE,
    )
    expected = 80 + 0.15 * 40 + 0.50 * 30 + 0.45 * 20 + 0.25 * 80 - 0.75 * 10 + 10

    assert roleplay_rank(row) == pytest.approx(expected)


def test_decision_boosts():
    assert decision_boost(Decision.PROMOTE) == 10
    assert decision_boost(Decision.REVISE) == 2
    assert decision_boost(Decision.REJECT) == -15


@pytest.mark.parametrize(
    "field",
    ["score", "open_likelihood", "reply_likelihood", "positive_reply_likelihood", "clarity"],
)
def test_rank_increases_with_positive_signals(field):
    base = evaluation(**{field: 50})
    higher = evaluation(**{field: 51})

    assert roleplay_rank(higher) > roleplay_rank(base)


def test_rank_decreases_with_negative_risk():
    assert roleplay_rank(evaluation(negative_risk=11)) < roleplay_rank(evaluation(negative_risk=10))


def test_custom_calibration_changes_rank():
    calibration = RankingCalibration(promote_boost=0)
    assert roleplay_rank(evaluation(), calibration) == pytest.approx(roleplay_rank(evaluation()) - 10)


# ===================================================================
# TESTS - Gate boundaries
# ===================================================================

@pytest.mark.parametrize(
    "overrides,expected",
    [
        ({}, True),
        ({"score": 72}, True),
        ({"score": 71}, False),
        ({"reply_likelihood": 18}, True),
        ({"reply_likelihood": 17}, False),
        ({"positive_reply_likelihood": 10}, True),
        ({"positive_reply_likelihood": 9}, False),
        ({"clarity": 70}, True),
        ({"clarity": 69}, False),
        ({"negative_risk": 25}, True),
        ({"negative_risk": 26}, False),
        ({"decision": Decision.REVISE}, True),
        ({"decision": Decision.REJECT}, False),
        ({"decision": Decision.REJECT, "score": 100, "negative_risk": 0}, False),
    ],
)
def test_gate_boundaries(overrides, expected):
    assert passes_gate(evaluation(**overrides)) is expected


def test_gate_thresholds_follow_calibration():
    strict = RankingCalibration(min_score=90)
    assert passes_gate(evaluation(score=85)) is True
    assert passes_gate(evaluation(score=85), strict) is False


# ===================================================================
# TESTS - Ranking and selection
# ===================================================================

def test_ranking_is_stable_for_equal_ranks(candidates):
    evaluations = [evaluation(i) for i in range(4)]

    ranked = rank_candidates(candidates, evaluations)

    assert [row.candidate.index for row in ranked] == [0, 1, 2, 3]


def test_selection_skips_top_ranked_failure(candidates):
    """Top rank fails the gate on negativeRisk; the next passing row wins."""
    evaluations = [
        evaluation(0, score=70),
        evaluation(1, score=100, reply_likelihood=100, positive_reply_likelihood=100, negative_risk=26),
        evaluation(2, score=75),
        evaluation(3, decision=Decision.REJECT),
    ]

    ranked = rank_candidates(candidates, evaluations)
    selected = select_candidate(ranked)

    assert ranked[0].candidate.index == 1
    assert ranked[0].passes_gate is False
    assert selected.candidate.index == 2


def test_select_candidate_returns_none_when_nothing_passes(candidates):
    ranked = rank_candidates(candidates, [evaluation(i, clarity=10) for i in range(4)])
    assert select_candidate(ranked) is None


# ===================================================================
# TESTS - Step
# ===================================================================

@pytest.mark.asyncio
async def test_step_selects_promoted_candidate(generation_context, candidates):
    """Scenario: one clearly strong candidate among weaker ones is selected."""
    evaluations = [
        evaluation(0, score=60, decision=Decision.REVISE),
        evaluation(1, score=85, reply_likelihood=30, positive_reply_likelihood=20, clarity=80, negative_risk=10,
                   summary="Direct and specific."),
        evaluation(2, score=65, decision=Decision.REJECT),
        evaluation(3, score=50),
    ]
    data = create_pipeline_data(generation_context, candidates, evaluations)

    result = await QualityGateStep().execute(data)

    assert result.success is True
    assert data.result.mode == SCREENED_MODE
    assert data.result.selected_index == 1
    assert data.result.score == 85
    assert data.result.summary == "Direct and specific."
    assert data.result.graph.start_node_id == "g11"


@pytest.mark.asyncio
async def test_step_raises_gate_failure_with_top_three(generation_context, candidates):
    """Scenario: every candidate is too risky; the top three by rank are reported."""
    evaluations = [evaluation(i, score=80 + i, negative_risk=40) for i in range(4)]
    data = create_pipeline_data(generation_context, candidates, evaluations)

    with pytest.raises(QualityGateFailure) as exc_info:
        await QualityGateStep().execute(data)

    error = exc_info.value
    assert error.status_code == 422
    assert [row["index"] for row in error.top_candidates] == [3, 2, 1]
    assert error.top_candidates[0]["negativeRisk"] == 40
    assert json.loads(error.details)["top"] == error.top_candidates
    assert data.result is None


@pytest.mark.asyncio
async def test_step_requires_evaluations(generation_context, candidates):
    data = create_pipeline_data(generation_context, candidates, [])

    with pytest.raises(ValidationError):
        await QualityGateStep().execute(data)
