"""Prompts for the Roleplay Evaluator pipeline step."""

import json
from typing import List

from pipeline.models.candidates import CandidateGraph
from pipeline.models.context import GenerationContext


OUTPUT_SHAPE = (
    '{ "evaluations": [{ "index": number, "score": number, "openLikelihood": number, '
    '"replyLikelihood": number, "positiveReplyLikelihood": number, "negativeRisk": number, '
    '"clarity": number, "decision": "promote"|"revise"|"reject", "summary": string, '
    '"strengths": string[], "risks": string[] }] }'
)


def _candidates_json(candidates: List[CandidateGraph]) -> str:
    rows = [
        {
            "index": candidate.index,
            "rationale": candidate.rationale,
            "graph": candidate.graph.model_dump(mode="json", by_alias=True),
        }
        for candidate in candidates
    ]
    return json.dumps(rows)


def create_roleplay_prompt(context: GenerationContext, candidates: List[CandidateGraph]) -> str:
    """
    Build the recipient-panel prompt scoring every candidate in one call.

    Args:
        context: Same context the candidates were generated from
        candidates: Surviving candidates (index, rationale, graph)

    Returns:
        Prompt text
    """
    lines = [
        "You are a strict recipient-simulation panel for B2B cold outreach email flows.",
        "Evaluate each candidate as real recipients: busy, skeptical, annoyed, cautious, curious.",
        "Assume inbox pressure and limited attention.",
        "",
        "Per candidate, run hidden roleplay checks and score:",
        "- openLikelihood",
        "- replyLikelihood",
        "- positiveReplyLikelihood",
        "- negativeRisk (spam/annoyance/unsubscribe risk)",
        "- clarity",
        "",
        "Return JSON only:",
        OUTPUT_SHAPE,
        "",
        "Rules:",
        "- 0-100 integer scores.",
        f"- Return exactly one evaluation per candidate ({len(candidates)} total), keyed by its index.",
        "- decision=reject for generic, vague, or risky copy.",
        "- strengths/risks max 3 each, concrete and short.",
        f"Context: {context.to_prompt_json()}",
        f"Candidates: {_candidates_json(candidates)}",
    ]
    return "\n".join(lines)
