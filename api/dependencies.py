"""Dependencies that supply pipeline collaborators to route handlers."""

from typing import Optional

from pipeline import create_flow_pipeline
from pipeline.core.runner import PipelineRunner
from utils.llm_agent import JsonCompletionClient


def get_flow_runner() -> PipelineRunner:
    """Fresh screened-flow pipeline per request; steps hold no request state."""
    return create_flow_pipeline()


def get_render_client() -> Optional[JsonCompletionClient]:
    """
    Completion client for the renderer.

    None lets the renderer build a routed client, honouring any per-request
    model override.
    """
    return None
