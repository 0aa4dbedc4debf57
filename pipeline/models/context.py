"""
Read-only context records supplied by the caller.

These are assembled outside this service (brand, campaign, experiment, lead
and thread storage) and are only serialized into prompts here.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pipeline.models.flow_graph import ReplyIntent


class ContextModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_prompt_json(self) -> str:
        """camelCase JSON used inside prompts."""
        return self.model_dump_json(by_alias=True)


# ===================================================================
# GENERATION CONTEXT
# ===================================================================

class BrandContext(ContextModel):
    id: Optional[str] = None
    name: str = ""
    website: str = ""
    tone: str = ""
    notes: str = ""


class GenerationCampaign(ContextModel):
    campaign_name: str = ""
    objective_goal: str = ""
    objective_constraints: str = ""
    angle_title: str = ""
    angle_rationale: str = ""
    target_audience: str = ""
    variant_name: str = ""
    variant_notes: str = ""


class GenerationExperiment(ContextModel):
    experiment_record_name: str = ""
    offer: str = ""
    cta: str = ""
    audience: str = ""
    test_envelope: Any = None


class GenerationContext(ContextModel):
    """Everything the flow generator and roleplay evaluator know about one experiment."""

    brand: BrandContext = Field(default_factory=BrandContext)
    campaign: GenerationCampaign = Field(default_factory=GenerationCampaign)
    experiment: GenerationExperiment = Field(default_factory=GenerationExperiment)


# ===================================================================
# RENDER CONTEXT
# ===================================================================

class RenderCampaign(ContextModel):
    id: Optional[str] = None
    name: str = ""
    objective_goal: str = ""
    objective_constraints: str = ""


class RenderExperiment(ContextModel):
    id: Optional[str] = None
    name: str = ""
    offer: str = ""
    cta: str = ""
    audience: str = ""
    notes: str = ""


class LeadContext(ContextModel):
    id: Optional[str] = None
    email: str = ""
    name: str = ""
    company: str = ""
    title: str = ""
    domain: str = ""
    status: str = ""


class ThreadContext(ContextModel):
    session_id: str = ""
    node_id: str = ""
    parent_message_id: str = ""
    latest_inbound_subject: str = ""
    latest_inbound_body: str = ""
    intent: ReplyIntent = ReplyIntent.NONE
    confidence: float = Field(default=0, ge=0, le=1)
    prior_node_path: List[str] = Field(default_factory=list)

    @property
    def has_inbound(self) -> bool:
        return bool(self.latest_inbound_subject.strip() or self.latest_inbound_body.strip())


class SafetyContext(ContextModel):
    max_depth: int = 5
    daily_cap: int = 0
    hourly_cap: int = 0
    min_spacing_minutes: int = 0
    timezone: str = "UTC"


class ConversationPromptRenderContext(ContextModel):
    """Live send-time context for rendering one message node."""

    brand: BrandContext = Field(default_factory=BrandContext)
    campaign: RenderCampaign = Field(default_factory=RenderCampaign)
    experiment: RenderExperiment = Field(default_factory=RenderExperiment)
    lead: LeadContext = Field(default_factory=LeadContext)
    thread: ThreadContext = Field(default_factory=ThreadContext)
    safety: SafetyContext = Field(default_factory=SafetyContext)
