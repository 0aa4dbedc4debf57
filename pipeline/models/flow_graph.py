"""
Conversation flow graph schema.

Strict decoding for model-generated graphs: a missing required field, an
unknown enum value, an out-of-range number or a dangling node reference
raises pydantic.ValidationError instead of being defaulted away.
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class NodeKind(str, Enum):
    """Message nodes send email; terminal nodes end the conversation."""
    MESSAGE = "message"
    TERMINAL = "terminal"


class CopyMode(str, Enum):
    """How a message node produces copy at send time."""
    PROMPT_V1 = "prompt_v1"
    LEGACY_TEMPLATE = "legacy_template"


class EdgeTrigger(str, Enum):
    INTENT = "intent"
    TIMER = "timer"
    FALLBACK = "fallback"


class ReplyIntent(str, Enum):
    """Classified intent of an inbound reply. NONE is used by timer/fallback edges."""
    QUESTION = "question"
    INTEREST = "interest"
    OBJECTION = "objection"
    UNSUBSCRIBE = "unsubscribe"
    OTHER = "other"
    NONE = ""


MAX_WAIT_MINUTES = 10080  # one week


class FlowModel(BaseModel):
    """Base for graph records: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        use_enum_values=False,
    )


class PromptPolicy(FlowModel):
    """
    Per-node limits as authored. Values are rounded and clamped by the
    renderer, so any number is accepted here.
    """

    subject_max_words: Optional[float] = None
    body_max_words: Optional[float] = None
    exactly_one_cta: Optional[bool] = None


class ConversationFlowNode(FlowModel):
    id: str = Field(min_length=1)
    kind: NodeKind
    title: str = ""
    copy_mode: CopyMode = CopyMode.PROMPT_V1
    prompt_template: str = ""
    prompt_version: int = Field(default=1, ge=1)
    prompt_policy: Optional[PromptPolicy] = None
    subject: str = ""
    body: str = ""
    auto_send: bool = True
    delay_minutes: float = Field(default=0, ge=0, le=MAX_WAIT_MINUTES)
    x: float = 0
    y: float = 0

    @field_validator("id", "title", "prompt_template", "subject", "body")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def message_has_copy(self) -> "ConversationFlowNode":
        """A message node needs either a prompt template or static body copy."""
        if self.kind == NodeKind.MESSAGE and not (self.prompt_template or self.body):
            raise ValueError(f"message node '{self.id}' has neither promptTemplate nor body")
        if not self.id:
            raise ValueError("node id cannot be empty")
        return self


class ConversationFlowEdge(FlowModel):
    id: str = Field(min_length=1)
    from_node_id: str = Field(min_length=1)
    to_node_id: str = Field(min_length=1)
    trigger: EdgeTrigger
    intent: ReplyIntent = ReplyIntent.NONE
    wait_minutes: float = Field(default=0, ge=0, le=MAX_WAIT_MINUTES)
    confidence_threshold: float = Field(default=0.7, ge=0, le=1)
    priority: int = Field(default=1, ge=1, le=100)

    @field_validator("id", "from_node_id", "to_node_id")
    @classmethod
    def strip_ids(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("identifier cannot be blank")
        return v


class ConversationFlowGraph(FlowModel):
    """
    A full conversation flow.

    Invariants (checked on construction):
    - node ids are unique
    - startNodeId names an existing node
    - every edge endpoint names an existing node
    """

    version: Literal[1] = 1
    max_depth: int = Field(default=5, ge=1, le=5)
    start_node_id: str = Field(min_length=1)
    nodes: List[ConversationFlowNode] = Field(min_length=1)
    edges: List[ConversationFlowEdge] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_references(self) -> "ConversationFlowGraph":
        node_ids = [node.id for node in self.nodes]
        known = set(node_ids)

        if len(known) != len(node_ids):
            raise ValueError("duplicate node ids in graph")

        if self.start_node_id not in known:
            raise ValueError(f"startNodeId '{self.start_node_id}' does not reference a node")

        for edge in self.edges:
            if edge.from_node_id not in known:
                raise ValueError(f"edge '{edge.id}' fromNodeId '{edge.from_node_id}' does not reference a node")
            if edge.to_node_id not in known:
                raise ValueError(f"edge '{edge.id}' toNodeId '{edge.to_node_id}' does not reference a node")

        return self

    def get_node(self, node_id: str) -> Optional[ConversationFlowNode]:
        """Look up a node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def message_nodes(self) -> List[ConversationFlowNode]:
        """Nodes that can be rendered into an email."""
        return [node for node in self.nodes if node.kind == NodeKind.MESSAGE]
