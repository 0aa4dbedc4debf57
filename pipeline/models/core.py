"""Core data models for the flow generation pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, List
from datetime import datetime, timezone

from pipeline.models.candidates import (
    CandidateEvaluation,
    CandidateGraph,
    RankedCandidate,
    ScreenedFlowResult,
)
from pipeline.models.context import GenerationContext


class JobStatus(Enum):
    """Outcome of one generation run, used in logs."""
    RUNNING = "running"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FlowGenerationData:
    """
    In-memory state passed between pipeline steps. Never persisted.

    Only the selected graph leaves the pipeline (in `result`).
    """

    # Input data
    task_id: str
    """Correlation id for Logfire"""

    context: GenerationContext
    """Brand / campaign / experiment context for both model calls"""

    candidate_count: int = 6
    """How many candidates the generator asks for"""

    # Step 1 outputs (CandidateGenerator)
    raw_candidate_count: int = 0
    """Rows returned by the model before normalization"""

    candidates: List[CandidateGraph] = field(default_factory=list)
    """Schema-valid, deduplicated candidates in generator order"""

    # Step 2 outputs (RoleplayEvaluator)
    evaluations: List[CandidateEvaluation] = field(default_factory=list)
    """Exactly one evaluation per candidate"""

    # Step 3 outputs (QualityGate)
    ranked: List[RankedCandidate] = field(default_factory=list)
    """Candidates sorted by rank, best first"""

    result: Optional[ScreenedFlowResult] = None
    """Selected flow. Set only when a candidate passes the gate."""

    # Transient data (logged to Logfire, not persisted)
    started_at: datetime = field(default_factory=_utcnow)

    step_timings: Dict[str, float] = field(default_factory=dict)
    """Duration of each step in seconds"""

    errors: List[str] = field(default_factory=list)
    """Errors recorded by failed steps"""

    metadata: Dict[str, Any] = field(default_factory=dict)

    # ===================================================================
    # HELPER METHODS
    # ===================================================================

    def total_duration(self) -> float:
        """Calculate total pipeline execution time in seconds"""
        return (_utcnow() - self.started_at).total_seconds()

    def add_timing(self, step_name: str, duration: float) -> None:
        """Record step timing"""
        self.step_timings[step_name] = duration

    def add_error(self, step_name: str, error_message: str) -> None:
        """Record step error"""
        self.errors.append(f"{step_name}: {error_message}")

    @property
    def candidate_indexes(self) -> List[int]:
        return [candidate.index for candidate in self.candidates]


# ===================================================================
# STEP RESULT
# ===================================================================

@dataclass
class StepResult:
    """
    Result of a pipeline step execution.

    Returned by BasePipelineStep.execute() to indicate success/failure.
    """

    success: bool
    """Whether the step completed successfully"""

    step_name: str
    """Name of the step that produced this result"""

    error: Optional[str] = None
    """Error message if success=False"""

    metadata: Optional[Dict[str, Any]] = None
    """
    Optional metadata about execution:
    - duration: float (seconds)
    - counts produced by the step
    """

    warnings: List[str] = field(default_factory=list)
    """Non-fatal warnings (e.g., 'dropped 2 malformed candidates')"""

    def __post_init__(self):
        """Validation: if success=False, error must be set"""
        if not self.success and not self.error:
            raise ValueError("StepResult with success=False must have error message")
