"""
Models package for pipeline models

NOTE: not database models
"""

from .core import (
    # Enums
    JobStatus,

    # Core data models
    FlowGenerationData,
    StepResult,
)
from .candidates import (
    SCREENED_MODE,
    CandidateEvaluation,
    CandidateGraph,
    Decision,
    RankedCandidate,
    ScreenedFlowResult,
)
from .context import ConversationPromptRenderContext, GenerationContext
from .flow_graph import (
    ConversationFlowEdge,
    ConversationFlowGraph,
    ConversationFlowNode,
    CopyMode,
    EdgeTrigger,
    NodeKind,
    PromptPolicy,
    ReplyIntent,
)

__all__ = [
    # Enums
    "JobStatus",
    "Decision",
    "NodeKind",
    "CopyMode",
    "EdgeTrigger",
    "ReplyIntent",

    # Core data models
    "FlowGenerationData",
    "StepResult",

    # Graph schema
    "ConversationFlowGraph",
    "ConversationFlowNode",
    "ConversationFlowEdge",
    "PromptPolicy",

    # Candidates
    "SCREENED_MODE",
    "CandidateGraph",
    "CandidateEvaluation",
    "RankedCandidate",
    "ScreenedFlowResult",

    # Context
    "GenerationContext",
    "ConversationPromptRenderContext",
]
