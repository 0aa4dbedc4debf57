"""Conversation-flow generation and message rendering endpoints."""

from typing import Optional, Union

import logfire
from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_flow_runner, get_render_client
from pipeline.core.exceptions import PipelineExecutionError
from pipeline.core.runner import PipelineRunner
from pipeline.models.candidates import ScreenedFlowResult
from pipeline.steps.prompt_renderer import ConversationPromptRenderer, RenderFailure, RenderSuccess
from schemas.conversation_flow import GenerateFlowRequest, RenderMessageRequest
from services.flow_generation import generate_screened_flow
from utils.llm_agent import JsonCompletionClient


router = APIRouter(prefix="/api/conversation-flows", tags=["Conversation Flows"])


@router.post("/generate", response_model=ScreenedFlowResult, response_model_by_alias=True)
async def generate_flow(
    request: GenerateFlowRequest,
    runner: PipelineRunner = Depends(get_flow_runner),
):
    """
    Generate candidate flows for one experiment and return the screened winner.

    Raises:
        HTTPException 422: No candidate passed the quality gate (detail carries top-3)
        HTTPException 502: Upstream failure, malformed output, too few candidates,
            or an evaluation count mismatch
        HTTPException 503: OPENAI_API_KEY missing
    """
    with logfire.span(
        "api.generate_flow",
        experiment=request.context.experiment.experiment_record_name,
    ):
        try:
            return await generate_screened_flow(
                context=request.context,
                candidate_count=request.candidate_count,
                runner=runner,
            )
        except PipelineExecutionError as e:
            logfire.warning(
                "Flow generation request failed",
                error=str(e),
                error_type=type(e).__name__,
                status_code=e.status_code,
            )
            raise HTTPException(status_code=e.status_code, detail=e.to_dict())
        except Exception as e:
            logfire.error(
                "Flow generation request crashed",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "Failed to generate conversation flow", "details": str(e)},
            )


@router.post(
    "/render",
    response_model=Union[RenderSuccess, RenderFailure],
    response_model_by_alias=True,
)
async def render_message(
    request: RenderMessageRequest,
    client: Optional[JsonCompletionClient] = Depends(get_render_client),
):
    """
    Render one message node for a live thread.

    Always 200: check `ok` in the body. Failures carry `reason` and the trace.
    """
    with logfire.span(
        "api.render_message",
        node_id=request.node.id,
        session_id=request.context.thread.session_id,
    ):
        renderer = ConversationPromptRenderer(client=client, model=request.model)
        return await renderer.render(request.node, request.context)
