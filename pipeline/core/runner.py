"""
Core pipeline infrastructure - base classes for all steps.

BasePipelineStep: Abstract base class for pipeline steps
PipelineRunner: Orchestrates sequential step execution
"""

from abc import ABC, abstractmethod
from typing import Optional, Callable, Awaitable, List
import time
import logfire

from pipeline.models.core import FlowGenerationData, StepResult
from pipeline.models.candidates import ScreenedFlowResult
from pipeline.core.exceptions import PipelineExecutionError, StepExecutionError, ValidationError


class BasePipelineStep(ABC):
    """
    Abstract base class for all pipeline steps.

    Each step must implement:
    - _execute_step(): Core business logic
    - Optionally: _validate_input(): Input validation

    The execute() method wraps step execution with:
    - Logfire observability spans
    - Error handling and logging
    - Timing metrics
    """

    def __init__(self, step_name: str):
        """
        Initialize pipeline step.

        Args:
            step_name: Unique identifier for this step (used in logs)
        """
        self.step_name = step_name

    async def execute(
        self,
        pipeline_data: FlowGenerationData,
        progress_callback: Optional[Callable[[str, str], Awaitable[None]]] = None
    ) -> StepResult:
        """
        Execute the pipeline step with full observability.

        Typed pipeline errors (gate failure, count mismatch, upstream errors)
        propagate unchanged so callers keep their status codes. Anything else
        is wrapped in StepExecutionError.

        Args:
            pipeline_data: Shared data object (modified in-place)
            progress_callback: Optional async callback for progress updates
                             Signature: callback(step_name, status)

        Returns:
            StepResult indicating success/failure
        """
        start_time = time.perf_counter()

        with logfire.span(
            f"pipeline.{self.step_name}",
            task_id=pipeline_data.task_id,
            step=self.step_name
        ):
            try:
                logfire.info(
                    f"{self.step_name} started",
                    task_id=pipeline_data.task_id
                )

                if progress_callback:
                    await progress_callback(self.step_name, "started")

                # Validate input prerequisites
                validation_error = await self._validate_input(pipeline_data)
                if validation_error:
                    raise ValidationError(f"Input validation failed: {validation_error}")

                result = await self._execute_step(pipeline_data)

                duration = time.perf_counter() - start_time
                pipeline_data.add_timing(self.step_name, duration)

                if result.metadata is None:
                    result.metadata = {}
                result.metadata["duration"] = duration

                logfire.info(
                    f"{self.step_name} completed",
                    task_id=pipeline_data.task_id,
                    duration=duration,
                    success=result.success
                )

                if progress_callback:
                    status = "completed" if result.success else "failed"
                    await progress_callback(self.step_name, status)

                return result

            except Exception as e:
                duration = time.perf_counter() - start_time
                pipeline_data.add_timing(self.step_name, duration)

                logfire.error(
                    f"{self.step_name} failed",
                    task_id=pipeline_data.task_id,
                    error=str(e),
                    error_type=type(e).__name__,
                    details=getattr(e, "details", ""),
                    duration=duration,
                    exc_info=True
                )

                pipeline_data.add_error(self.step_name, str(e))

                if progress_callback:
                    await progress_callback(self.step_name, "failed")

                if isinstance(e, PipelineExecutionError):
                    raise
                raise StepExecutionError(self.step_name, e) from e

    async def _validate_input(self, pipeline_data: FlowGenerationData) -> Optional[str]:
        """
        Validate that prerequisites for this step are met.

        Args:
            pipeline_data: Shared data object

        Returns:
            Error message if validation fails, None if valid
        """
        return None

    @abstractmethod
    async def _execute_step(self, pipeline_data: FlowGenerationData) -> StepResult:
        """
        Execute step-specific business logic.

        MUST BE IMPLEMENTED by each step.

        Args:
            pipeline_data: Shared data object (modify in-place)

        Returns:
            StepResult with success=True/False
        """
        pass


class PipelineRunner:
    """
    Orchestrates sequential execution of all pipeline steps.

    Responsibilities:
    - Register steps in execution order
    - Execute steps sequentially, stopping at the first failure
    - Return the selected flow
    """

    def __init__(self, steps: Optional[List[BasePipelineStep]] = None):
        """
        Initialize pipeline runner.

        Args:
            steps: Optional list of steps (if None, use default factory)
        """
        self.steps = steps or []

    def register_step(self, step: BasePipelineStep) -> None:
        """
        Add a step to the pipeline.

        Steps execute in the order they are registered.
        """
        self.steps.append(step)

    async def run(
        self,
        pipeline_data: FlowGenerationData,
        progress_callback: Optional[Callable[[str, str], Awaitable[None]]] = None
    ) -> ScreenedFlowResult:
        """
        Run all pipeline steps sequentially.

        Args:
            pipeline_data: Shared data object
            progress_callback: Optional callback for progress updates

        Returns:
            The screened flow selected by the quality gate

        Raises:
            PipelineExecutionError: If any step fails (typed subclasses pass through)
            ValueError: If no step set pipeline_data.result
        """
        with logfire.span(
            "pipeline.full_run",
            task_id=pipeline_data.task_id,
            candidate_count=pipeline_data.candidate_count
        ):
            logfire.info(
                "Pipeline execution started",
                task_id=pipeline_data.task_id,
                total_steps=len(self.steps)
            )

            for i, step in enumerate(self.steps):
                progress_pct = int(((i + 1) / len(self.steps)) * 100)
                logfire.info(
                    f"Executing step {i+1}/{len(self.steps)}",
                    step=step.step_name,
                    progress_pct=progress_pct
                )

                result = await step.execute(pipeline_data, progress_callback)

                if not result.success:
                    raise StepExecutionError(
                        step.step_name,
                        Exception(result.error or "Unknown error")
                    )

            if pipeline_data.result is None:
                raise ValueError(
                    "Pipeline completed but no flow was selected. "
                    "QualityGate step must set pipeline_data.result"
                )

            logfire.info(
                "Pipeline execution completed",
                task_id=pipeline_data.task_id,
                selected_index=pipeline_data.result.selected_index,
                score=pipeline_data.result.score,
                total_duration=pipeline_data.total_duration(),
                step_timings=pipeline_data.step_timings
            )

            return pipeline_data.result
