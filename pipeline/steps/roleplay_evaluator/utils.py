"""
Roleplay Evaluator Utilities

Normalization of raw evaluation rows into CandidateEvaluation records.
"""

from typing import Any, Iterable, List, Set

import logfire

from pipeline.models.candidates import CandidateEvaluation
from utils.coercion import clamp_percent
from utils.sanitizer import Sanitizer, sanitize_ai_text, sanitize_all

from .models import MAX_LIST_ITEMS, RawEvaluationRow


def normalize_evaluations(
    value: Any,
    valid_indexes: Iterable[int],
    sanitizer: Sanitizer = sanitize_ai_text,
) -> List[CandidateEvaluation]:
    """
    Keep one clamped evaluation per known candidate index.

    Rows are dropped when their index is not an integer, is not one of
    `valid_indexes`, or repeats an index already seen.

    Args:
        value: Raw `evaluations` value from the model (anything)
        valid_indexes: Indexes of the candidates that were evaluated
        sanitizer: Text sanitizer for summary/strengths/risks

    Returns:
        Evaluations in the order the model returned them
    """
    if not isinstance(value, list):
        return []

    allowed: Set[int] = set(valid_indexes)
    seen: Set[int] = set()
    rows: List[CandidateEvaluation] = []

    for item in value:
        if not isinstance(item, dict):
            continue

        raw = RawEvaluationRow.model_validate(item)
        index = raw.valid_index()
        if index is None or index not in allowed or index in seen:
            logfire.debug("Dropping evaluation row", raw_index=str(raw.index))
            continue
        seen.add(index)

        rows.append(
            CandidateEvaluation(
                index=index,
                score=clamp_percent(raw.score, 0),
                open_likelihood=clamp_percent(raw.open_likelihood, 0),
                reply_likelihood=clamp_percent(raw.reply_likelihood, 0),
                positive_reply_likelihood=clamp_percent(raw.positive_reply_likelihood, 0),
                negative_risk=clamp_percent(raw.negative_risk, 100),
                clarity=clamp_percent(raw.clarity, 0),
                decision=raw.decision,
                summary=sanitizer(raw.summary),
                strengths=sanitize_all(raw.strengths, sanitizer)[:MAX_LIST_ITEMS],
                risks=sanitize_all(raw.risks, sanitizer)[:MAX_LIST_ITEMS],
            )
        )

    return rows
