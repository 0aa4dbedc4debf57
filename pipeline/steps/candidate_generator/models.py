"""
Candidate Generator Step Models

Shape of one raw row in the model's `candidates` array, before strict
graph validation.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawCandidateRow(BaseModel):
    """
    Loosely-typed envelope around a candidate graph.

    Only the envelope is read here; the graph itself is validated by
    ConversationFlowGraph in the normalizer.
    """

    model_config = ConfigDict(extra="ignore")

    index: Any = None
    rationale: Any = ""
    graph: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("graph", mode="before")
    @classmethod
    def graph_must_be_object(cls, v: Any) -> Dict[str, Any]:
        """Anything other than a JSON object counts as an empty graph."""
        return v if isinstance(v, dict) else {}

    def declared_index(self, position: int) -> int:
        """Declared non-negative integer index, or the row's array position."""
        if isinstance(self.index, bool):
            return position
        if isinstance(self.index, int) and self.index >= 0:
            return self.index
        if isinstance(self.index, float) and self.index.is_integer() and self.index >= 0:
            return int(self.index)
        if isinstance(self.index, str) and self.index.strip().isdigit():
            return int(self.index.strip())
        return position
