"""
Quality Gate Step - Step 3

Ranks evaluated candidates and selects the best one that clears every
threshold. Never falls back to a failing candidate.
"""

import logfire
from typing import Optional

from config.calibration import RankingCalibration
from config.settings import settings
from pipeline.core.exceptions import QualityGateFailure
from pipeline.core.runner import BasePipelineStep
from pipeline.models.candidates import ScreenedFlowResult
from pipeline.models.core import FlowGenerationData, StepResult

from .utils import rank_candidates, select_candidate


class QualityGateStep(BasePipelineStep):
    """
    Step 3: Rank and gate.

    Updates FlowGenerationData fields:
    - ranked: List[RankedCandidate]
    - result: ScreenedFlowResult
    """

    def __init__(self, calibration: Optional[RankingCalibration] = None):
        """Initialize quality gate step."""
        super().__init__(step_name="quality_gate")
        self.calibration = calibration or settings.calibration

    async def _validate_input(self, pipeline_data: FlowGenerationData) -> Optional[str]:
        if not pipeline_data.candidates:
            return "candidates are missing (CandidateGenerator must run first)"
        if not pipeline_data.evaluations:
            return "evaluations are missing (RoleplayEvaluator must run first)"
        return None

    async def _execute_step(self, pipeline_data: FlowGenerationData) -> StepResult:
        """
        Execute ranking and gating.

        Raises:
            QualityGateFailure: no candidate passes, with top-N diagnostics
        """
        ranked = rank_candidates(
            pipeline_data.candidates,
            pipeline_data.evaluations,
            self.calibration,
        )
        pipeline_data.ranked = ranked

        logfire.info(
            "Candidates ranked",
            order=[row.candidate.index for row in ranked],
            ranks=[round(row.rank, 2) for row in ranked],
            passing=[row.candidate.index for row in ranked if row.passes_gate],
        )

        selected = select_candidate(ranked)
        if selected is None:
            top = [row.diagnostics() for row in ranked[: self.calibration.diagnostic_top_n]]
            logfire.warning(
                "No candidate passed quality gate",
                task_id=pipeline_data.task_id,
                top=top,
            )
            raise QualityGateFailure(top_candidates=top)

        pipeline_data.result = ScreenedFlowResult(
            graph=selected.candidate.graph,
            selected_index=selected.candidate.index,
            score=selected.evaluation.score,
            summary=selected.evaluation.summary,
        )

        logfire.info(
            "Candidate selected",
            selected_index=selected.candidate.index,
            rank=selected.rank,
            score=selected.evaluation.score,
        )

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={
                "selected_index": selected.candidate.index,
                "rank": selected.rank,
                "passing_count": sum(1 for row in ranked if row.passes_gate),
            },
        )
