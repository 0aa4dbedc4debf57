"""
Candidate Generator Utilities

Normalization of raw model candidates into schema-valid CandidateGraph rows.
"""

from typing import Any, List, Set

import logfire
from pydantic import ValidationError as SchemaValidationError

from pipeline.models.candidates import CandidateGraph
from pipeline.models.flow_graph import ConversationFlowGraph
from utils.sanitizer import Sanitizer, sanitize_ai_text

from .models import RawCandidateRow


def normalize_candidate_graphs(
    value: Any,
    sanitizer: Sanitizer = sanitize_ai_text,
) -> List[CandidateGraph]:
    """
    Turn the model's raw `candidates` value into valid candidates.

    Rules, applied per row:
    - index is the declared non-negative integer, else the array position
    - the first row with a given index wins; later duplicates are dropped
    - the graph must be a non-empty object
    - the graph must pass strict schema validation
    A failing row is dropped on its own; the rest of the batch continues.

    Args:
        value: Raw `candidates` value from the model (anything)
        sanitizer: Text sanitizer applied to rationales

    Returns:
        Valid candidates in generator order
    """
    if not isinstance(value, list):
        return []

    rows: List[CandidateGraph] = []
    seen: Set[int] = set()

    for position, item in enumerate(value):
        # Non-object rows still claim their position index
        raw = RawCandidateRow.model_validate(item if isinstance(item, dict) else {})
        index = raw.declared_index(position)
        if index in seen:
            logfire.debug("Dropping duplicate candidate index", index=index)
            continue
        seen.add(index)

        if not raw.graph:
            logfire.info("Dropping candidate without graph", index=index)
            continue

        try:
            graph = ConversationFlowGraph.model_validate(raw.graph)
        except SchemaValidationError as e:
            logfire.info(
                "Dropping structurally invalid candidate",
                index=index,
                error_count=e.error_count(),
                first_error=str(e.errors()[0].get("msg", "")) if e.errors() else "",
            )
            continue

        rationale = raw.rationale if isinstance(raw.rationale, str) else str(raw.rationale or "")
        rows.append(
            CandidateGraph(
                index=index,
                graph=graph,
                rationale=sanitizer(rationale.strip()),
            )
        )

    return rows
