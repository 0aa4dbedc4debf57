"""Request schemas for the conversation-flow API."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pipeline.models.context import ConversationPromptRenderContext, GenerationContext
from pipeline.models.flow_graph import ConversationFlowNode


class GenerateFlowRequest(BaseModel):
    """Request schema for POST /api/conversation-flows/generate"""

    context: GenerationContext

    candidate_count: Optional[int] = Field(
        default=None,
        ge=3,
        le=12,
        description="Candidates to request from the model (default: FLOW_CANDIDATE_COUNT)"
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "context": {
                    "brand": {"name": "Acme", "website": "https://acme.test", "tone": "plain"},
                    "campaign": {"campaignName": "Q3 outbound", "objectiveGoal": "book demos"},
                    "experiment": {"experimentRecordName": "exp-1", "offer": "free audit", "cta": "Open to a 15-minute call?"},
                },
                "candidateCount": 6,
            }
        }
    )


class RenderMessageRequest(BaseModel):
    """Request schema for POST /api/conversation-flows/render"""

    node: ConversationFlowNode
    context: ConversationPromptRenderContext = Field(default_factory=ConversationPromptRenderContext)

    model: Optional[str] = Field(
        default=None,
        description="Model override (default: routed per task)"
    )

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
