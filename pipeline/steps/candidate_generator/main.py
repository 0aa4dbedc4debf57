"""
Candidate Generator Step - Step 1

Asks the generative service for several structurally distinct conversation
flows for one experiment and keeps only the ones that pass strict graph
validation.
"""

import logfire
from typing import Optional

from config.settings import settings
from pipeline.core.exceptions import TooFewCandidatesError
from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import FlowGenerationData, StepResult
from utils.llm_agent import JsonCompletionClient
from utils.llm_router import LlmTask, resolve_model
from utils.sanitizer import Sanitizer, sanitize_ai_text

from .prompts import create_generation_prompt
from .utils import normalize_candidate_graphs


class CandidateGeneratorStep(BasePipelineStep):
    """
    Step 1: Generate candidate conversation flows.

    Responsibilities:
    - Build the generation prompt from the experiment context
    - Make exactly one completion call
    - Normalize the raw candidates (dedupe, strict schema, sanitize)
    - Enforce the minimum candidate count

    Updates FlowGenerationData fields:
    - raw_candidate_count: int
    - candidates: List[CandidateGraph]
    """

    def __init__(
        self,
        client: Optional[JsonCompletionClient] = None,
        sanitizer: Sanitizer = sanitize_ai_text,
        min_candidates: Optional[int] = None,
        max_output_tokens: Optional[int] = None,
    ):
        """Initialize candidate generator step."""
        super().__init__(step_name="candidate_generator")

        self.client = client or JsonCompletionClient(
            model=resolve_model(LlmTask.CONVERSATION_FLOW_GENERATION)
        )
        self.sanitizer = sanitizer
        self.min_candidates = min_candidates if min_candidates is not None else settings.flow_min_candidates
        self.max_output_tokens = max_output_tokens or settings.flow_generation_max_tokens

    async def _validate_input(self, pipeline_data: FlowGenerationData) -> Optional[str]:
        if pipeline_data.candidate_count < self.min_candidates:
            return (
                f"candidate_count ({pipeline_data.candidate_count}) is below the "
                f"minimum of {self.min_candidates}"
            )
        return None

    async def _execute_step(self, pipeline_data: FlowGenerationData) -> StepResult:
        """
        Execute candidate generation.

        Raises:
            TooFewCandidatesError: fewer than min_candidates survive normalization
        """
        prompt = create_generation_prompt(
            context=pipeline_data.context,
            candidate_count=pipeline_data.candidate_count,
        )

        logfire.info(
            "Requesting candidate conversation maps",
            model=self.client.model_name,
            candidate_count=pipeline_data.candidate_count,
            prompt_length=len(prompt),
        )

        parsed = await self.client.complete_json(prompt, max_output_tokens=self.max_output_tokens)

        raw_candidates = parsed.get("candidates")
        raw_count = len(raw_candidates) if isinstance(raw_candidates, list) else 0
        candidates = normalize_candidate_graphs(raw_candidates, sanitizer=self.sanitizer)

        pipeline_data.raw_candidate_count = raw_count
        pipeline_data.candidates = candidates

        logfire.info(
            "Candidates normalized",
            raw_count=raw_count,
            valid_count=len(candidates),
            indexes=[candidate.index for candidate in candidates],
        )

        if len(candidates) < self.min_candidates:
            raise TooFewCandidatesError(valid_candidates=len(candidates), minimum=self.min_candidates)

        warnings = []
        if raw_count > len(candidates):
            warnings.append(f"dropped {raw_count - len(candidates)} malformed or duplicate candidates")

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={
                "raw_count": raw_count,
                "valid_count": len(candidates),
                "model_used": self.client.model_name,
            },
            warnings=warnings,
        )
