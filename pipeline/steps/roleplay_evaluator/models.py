"""
Roleplay Evaluator Step Models

Coercion of one raw evaluation row. Scores fail closed: a missing
negativeRisk reads as 100 (unsafe), other missing scores read as 0.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pipeline.models.candidates import Decision
from utils.coercion import to_finite_number

MAX_LIST_ITEMS = 3


class RawEvaluationRow(BaseModel):
    """One row of the model's `evaluations` array after coercion."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    index: Any = None
    score: Any = None
    open_likelihood: Any = None
    reply_likelihood: Any = None
    positive_reply_likelihood: Any = None
    negative_risk: Any = None
    clarity: Any = None
    decision: Decision = Decision.REVISE
    summary: str = ""
    strengths: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)

    @field_validator("decision", mode="before")
    @classmethod
    def coerce_decision(cls, v: Any) -> Decision:
        """Unknown verdicts become REVISE: neither auto-accept nor auto-reject."""
        raw = str(v if v is not None else "").strip().lower()
        if raw in (Decision.PROMOTE.value, Decision.REJECT.value):
            return Decision(raw)
        return Decision.REVISE

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_summary(cls, v: Any) -> str:
        return str(v if v is not None else "").strip()

    @field_validator("strengths", "risks", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> List[str]:
        if not isinstance(v, list):
            return []
        return [str(item if item is not None else "").strip() for item in v]

    def valid_index(self) -> Optional[int]:
        """Integer index, or None when the row's index is unusable."""
        if isinstance(self.index, bool):
            return None
        if isinstance(self.index, int):
            return self.index
        number = to_finite_number(self.index)
        if number is not None and number.is_integer():
            return int(number)
        return None
