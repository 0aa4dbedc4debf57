"""
Test suite for Roleplay Evaluator Step

Row coercion (clamping, fallbacks, decision reading) and the
one-evaluation-per-candidate contract.
"""

import pytest
from uuid import uuid4

from pipeline.core.exceptions import EvaluationCountMismatchError, ValidationError
from pipeline.models.candidates import CandidateGraph, Decision
from pipeline.models.core import FlowGenerationData
from pipeline.models.flow_graph import ConversationFlowGraph
from pipeline.steps.roleplay_evaluator.main import RoleplayEvaluatorStep
from pipeline.steps.roleplay_evaluator.prompts import create_roleplay_prompt
from pipeline.steps.roleplay_evaluator.utils import normalize_evaluations


@pytest.fixture
def candidates(make_graph):
    return [
        CandidateGraph(index=i, graph=ConversationFlowGraph.model_validate(make_graph(f"c{i}")), rationale=f"angle {i}")
        for i in range(3)
    ]


@pytest.fixture
def pipeline_data(generation_context, candidates):
    return FlowGenerationData(task_id=str(uuid4()), context=generation_context, candidates=candidates)


# ===================================================================
# TESTS - Row normalization
# ===================================================================

def test_percent_fields_round_half_up_and_clamp(make_evaluation):
    rows = normalize_evaluations(
        [make_evaluation(0, score=72.5, openLikelihood=-4, replyLikelihood=140, clarity="69.5")],
        valid_indexes=[0],
    )

    assert rows[0].score == 73
    assert rows[0].open_likelihood == 0
    assert rows[0].reply_likelihood == 100
    assert rows[0].clarity == 70


def test_non_numeric_scores_fall_back(make_evaluation):
    row = make_evaluation(0, score="great", negativeRisk=None, clarity=[1])
    del row["positiveReplyLikelihood"]

    evaluation = normalize_evaluations([row], valid_indexes=[0])[0]

    assert evaluation.score == 0
    assert evaluation.positive_reply_likelihood == 0
    assert evaluation.clarity == 0
    assert evaluation.negative_risk == 100


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("PROMOTE", Decision.PROMOTE),
        (" reject ", Decision.REJECT),
        ("revise", Decision.REVISE),
        ("ship it", Decision.REVISE),
        (None, Decision.REVISE),
    ],
)
def test_decision_coercion(make_evaluation, raw, expected):
    evaluation = normalize_evaluations([make_evaluation(0, decision=raw)], valid_indexes=[0])[0]
    assert evaluation.decision == expected


def test_unknown_duplicate_and_fractional_indexes_are_dropped(make_evaluation):
    rows = normalize_evaluations(
        [
            make_evaluation(0),
            make_evaluation(0, summary="duplicate"),
            make_evaluation(9),
            make_evaluation(1.5),
            make_evaluation("2"),
            {"score": 90},
            "not a row",
        ],
        valid_indexes=[0, 1, 2],
    )

    assert [row.index for row in rows] == [0, 2]
    assert rows[0].summary == "Candidate 0 reads clearly."


def test_lists_are_sanitized_and_capped(make_evaluation):
    evaluation = normalize_evaluations(
        [make_evaluation(0, strengths=["", "clear", " ", "specific", "short", "warm"], risks="none")],
        valid_indexes=[0],
    )[0]

    assert evaluation.strengths == ["clear", "specific", "short"]
    assert evaluation.risks == []


def test_summary_is_sanitized(make_evaluation):
    evaluation = normalize_evaluations(
        [make_evaluation(0, summary="Mentions Apify actors twice")],
        valid_indexes=[0],
    )[0]

    assert evaluation.summary == "Mentions lead sourcing sources twice"


# ===================================================================
# TESTS - Prompt
# ===================================================================

def test_roleplay_prompt_includes_every_candidate(generation_context, candidates):
    prompt = create_roleplay_prompt(generation_context, candidates)

    for candidate in candidates:
        assert candidate.graph.start_node_id in prompt
    assert "evaluations" in prompt


# ===================================================================
# TESTS - Step
# ===================================================================

@pytest.mark.asyncio
async def test_step_stores_one_evaluation_per_candidate(fake_client, make_evaluation, pipeline_data):
    client = fake_client({"evaluations": [make_evaluation(2), make_evaluation(0), make_evaluation(1)]})
    step = RoleplayEvaluatorStep(client=client, max_output_tokens=2600)

    result = await step.execute(pipeline_data)

    assert result.success is True
    assert sorted(evaluation.index for evaluation in pipeline_data.evaluations) == [0, 1, 2]
    assert client.calls[0]["max_output_tokens"] == 2600


@pytest.mark.asyncio
async def test_step_aborts_on_partial_evaluation_set(fake_client, make_evaluation, pipeline_data):
    """Three candidates, two valid rows: nothing is ranked."""
    client = fake_client({"evaluations": [make_evaluation(0), make_evaluation(1), make_evaluation(7)]})
    step = RoleplayEvaluatorStep(client=client)

    with pytest.raises(EvaluationCountMismatchError) as exc_info:
        await step.execute(pipeline_data)

    assert exc_info.value.status_code == 502
    assert exc_info.value.details == "expected=3, actual=2"
    assert pipeline_data.evaluations == []


@pytest.mark.asyncio
async def test_step_requires_candidates(fake_client, generation_context):
    client = fake_client()
    step = RoleplayEvaluatorStep(client=client)
    data = FlowGenerationData(task_id=str(uuid4()), context=generation_context)

    with pytest.raises(ValidationError):
        await step.execute(data)

    assert client.calls == []
