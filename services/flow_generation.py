"""Screened conversation-flow generation service."""

import uuid
from typing import Awaitable, Callable, Optional

import logfire

from config.settings import settings
from pipeline import create_flow_pipeline
from pipeline.core.exceptions import QualityGateFailure
from pipeline.core.runner import PipelineRunner
from pipeline.models.candidates import ScreenedFlowResult
from pipeline.models.context import GenerationContext
from pipeline.models.core import FlowGenerationData, JobStatus

ProgressCallback = Callable[[str, str], Awaitable[None]]


async def generate_screened_flow(
    context: GenerationContext,
    task_id: Optional[str] = None,
    candidate_count: Optional[int] = None,
    runner: Optional[PipelineRunner] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> ScreenedFlowResult:
    """
    Generate candidate flows, screen them and return the winner.

    Args:
        context: Brand / campaign / experiment context
        task_id: Correlation id for logs (random if omitted)
        candidate_count: Candidates to request (default: FLOW_CANDIDATE_COUNT)
        runner: Pre-built pipeline (default: create_flow_pipeline())
        progress_callback: Receives (step_name, status) after each step event,
            once it has been logged

    Returns:
        ScreenedFlowResult for the selected candidate

    Raises:
        PipelineExecutionError: any typed failure, including QualityGateFailure
            when no candidate is acceptable
    """
    task_id = task_id or str(uuid.uuid4())
    pipeline_data = FlowGenerationData(
        task_id=task_id,
        context=context,
        candidate_count=candidate_count or settings.flow_candidate_count,
    )

    with logfire.span(
        "flow_generation.generate",
        task_id=task_id,
        experiment=context.experiment.experiment_record_name,
        candidate_count=pipeline_data.candidate_count,
    ):
        runner = runner or create_flow_pipeline()
        logfire.info("Flow generation started", task_id=task_id, status=JobStatus.RUNNING.value)

        async def on_progress(step_name: str, status: str) -> None:
            logfire.info(
                "Flow generation progress",
                task_id=task_id,
                step=step_name,
                step_status=status,
            )
            if progress_callback:
                await progress_callback(step_name, status)

        try:
            result = await runner.run(pipeline_data, progress_callback=on_progress)
        except Exception as e:
            status = JobStatus.REJECTED if isinstance(e, QualityGateFailure) else JobStatus.FAILED
            logfire.error(
                "Flow generation failed",
                task_id=task_id,
                status=status.value,
                error=str(e),
                error_type=type(e).__name__,
                step_errors=pipeline_data.errors,
            )
            raise

        logfire.info(
            "Flow generation accepted",
            task_id=task_id,
            status=JobStatus.ACCEPTED.value,
            selected_index=result.selected_index,
            score=result.score,
            raw_candidates=pipeline_data.raw_candidate_count,
            valid_candidates=len(pipeline_data.candidates),
        )
        return result
