"""
Roleplay Evaluator Step - Step 2

Has the generative service act as a panel of skeptical recipients and
score every surviving candidate in a single call.
"""

import logfire
from typing import Optional

from config.settings import settings
from pipeline.core.exceptions import EvaluationCountMismatchError
from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import FlowGenerationData, StepResult
from utils.llm_agent import JsonCompletionClient
from utils.llm_router import LlmTask, resolve_model
from utils.sanitizer import Sanitizer, sanitize_ai_text

from .prompts import create_roleplay_prompt
from .utils import normalize_evaluations


class RoleplayEvaluatorStep(BasePipelineStep):
    """
    Step 2: Score candidates as simulated recipients.

    A partial evaluation set is never ranked: if the number of valid rows
    differs from the number of candidates the whole run aborts.

    Updates FlowGenerationData fields:
    - evaluations: List[CandidateEvaluation]
    """

    def __init__(
        self,
        client: Optional[JsonCompletionClient] = None,
        sanitizer: Sanitizer = sanitize_ai_text,
        max_output_tokens: Optional[int] = None,
    ):
        """Initialize roleplay evaluator step."""
        super().__init__(step_name="roleplay_evaluator")

        self.client = client or JsonCompletionClient(
            model=resolve_model(LlmTask.CONVERSATION_FLOW_ROLEPLAY)
        )
        self.sanitizer = sanitizer
        self.max_output_tokens = max_output_tokens or settings.flow_roleplay_max_tokens

    async def _validate_input(self, pipeline_data: FlowGenerationData) -> Optional[str]:
        if not pipeline_data.candidates:
            return "candidates are missing (CandidateGenerator must run first)"
        return None

    async def _execute_step(self, pipeline_data: FlowGenerationData) -> StepResult:
        """
        Execute roleplay evaluation.

        Raises:
            EvaluationCountMismatchError: valid rows != candidates
        """
        prompt = create_roleplay_prompt(
            context=pipeline_data.context,
            candidates=pipeline_data.candidates,
        )

        logfire.info(
            "Running roleplay evaluation",
            model=self.client.model_name,
            candidate_count=len(pipeline_data.candidates),
            prompt_length=len(prompt),
        )

        parsed = await self.client.complete_json(prompt, max_output_tokens=self.max_output_tokens)

        evaluations = normalize_evaluations(
            parsed.get("evaluations"),
            valid_indexes=pipeline_data.candidate_indexes,
            sanitizer=self.sanitizer,
        )

        if len(evaluations) != len(pipeline_data.candidates):
            raise EvaluationCountMismatchError(
                expected=len(pipeline_data.candidates),
                actual=len(evaluations),
            )

        pipeline_data.evaluations = evaluations

        logfire.info(
            "Roleplay evaluation completed",
            evaluated=len(evaluations),
            decisions=[evaluation.decision.value for evaluation in evaluations],
        )

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={
                "evaluated": len(evaluations),
                "model_used": self.client.model_name,
            },
        )
