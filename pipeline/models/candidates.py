"""Candidate, evaluation and selection records for screened flow generation."""

from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pipeline.models.flow_graph import ConversationFlowGraph


SCREENED_MODE = "openai_roleplay_screened"


class Decision(str, Enum):
    """Panel verdict for one candidate. Unknown verdicts are read as REVISE."""
    PROMOTE = "promote"
    REVISE = "revise"
    REJECT = "reject"


class CandidateModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CandidateGraph(CandidateModel):
    """One proposed flow. Lives only for the duration of a generation call."""

    index: int = Field(ge=0)
    graph: ConversationFlowGraph
    rationale: str = ""


class CandidateEvaluation(CandidateModel):
    """Roleplay panel scores for one candidate, already clamped to [0, 100]."""

    index: int = Field(ge=0)
    score: int = Field(ge=0, le=100)
    open_likelihood: int = Field(ge=0, le=100)
    reply_likelihood: int = Field(ge=0, le=100)
    positive_reply_likelihood: int = Field(ge=0, le=100)
    negative_risk: int = Field(ge=0, le=100)
    clarity: int = Field(ge=0, le=100)
    decision: Decision = Decision.REVISE
    summary: str = ""
    strengths: List[str] = Field(default_factory=list, max_length=3)
    risks: List[str] = Field(default_factory=list, max_length=3)


class RankedCandidate(CandidateModel):
    candidate: CandidateGraph
    evaluation: CandidateEvaluation
    rank: float
    passes_gate: bool

    def diagnostics(self) -> dict:
        """Fields attached to a quality gate failure."""
        return {
            "index": self.candidate.index,
            "score": self.evaluation.score,
            "decision": self.evaluation.decision.value,
            "replyLikelihood": self.evaluation.reply_likelihood,
            "positiveReplyLikelihood": self.evaluation.positive_reply_likelihood,
            "negativeRisk": self.evaluation.negative_risk,
            "clarity": self.evaluation.clarity,
            "summary": self.evaluation.summary,
        }


class ScreenedFlowResult(CandidateModel):
    """Accepted flow, tagged with the mode that produced it."""

    mode: Literal["openai_roleplay_screened"] = SCREENED_MODE
    graph: ConversationFlowGraph
    selected_index: int
    score: int
    summary: str = ""
