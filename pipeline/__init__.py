"""
Pipeline factory function.

This module provides create_flow_pipeline() which instantiates
all screening steps in the correct order.
"""

from typing import TYPE_CHECKING, Optional

from config.calibration import RankingCalibration
from pipeline.core.runner import PipelineRunner
from utils.sanitizer import Sanitizer, sanitize_ai_text

if TYPE_CHECKING:
    # utils.llm_agent imports pipeline.core.exceptions, which loads this package
    from utils.llm_agent import JsonCompletionClient


def create_flow_pipeline(
    generator_client: Optional["JsonCompletionClient"] = None,
    evaluator_client: Optional["JsonCompletionClient"] = None,
    calibration: Optional[RankingCalibration] = None,
    sanitizer: Sanitizer = sanitize_ai_text,
) -> PipelineRunner:
    """
    Factory function to create a fully configured screened-flow pipeline.

    Steps are registered in execution order:
    1. CandidateGenerator: one call, normalize candidates, enforce minimum
    2. RoleplayEvaluator: one call, score every candidate
    3. QualityGate: rank, gate, select

    Clients default to ones routed through utils.llm_router.

    Example:
        ```python
        from pipeline import create_flow_pipeline
        from pipeline.models.core import FlowGenerationData

        runner = create_flow_pipeline()
        result = await runner.run(FlowGenerationData(task_id="abc-123", context=context))
        print(result.selected_index, result.score)
        ```
    """
    runner = PipelineRunner()

    # Import step classes lazily to avoid circular dependencies at package import time
    from pipeline.steps.candidate_generator.main import CandidateGeneratorStep
    from pipeline.steps.roleplay_evaluator.main import RoleplayEvaluatorStep
    from pipeline.steps.quality_gate.main import QualityGateStep

    runner.register_step(CandidateGeneratorStep(client=generator_client, sanitizer=sanitizer))
    runner.register_step(RoleplayEvaluatorStep(client=evaluator_client, sanitizer=sanitizer))
    runner.register_step(QualityGateStep(calibration=calibration))

    return runner
