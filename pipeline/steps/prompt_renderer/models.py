"""
Prompt Renderer Models

The trace is built once per render call and returned with the result.
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PROMPT_MODE = "prompt_v1"


class RenderModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResolvedPromptPolicy(RenderModel):
    """Policy after clamping: subject 3-20 words, body 40-260 words."""

    subject_max_words: int = Field(default=8, ge=3, le=20)
    body_max_words: int = Field(default=120, ge=40, le=260)
    exactly_one_cta: bool = True


class TraceValidation(RenderModel):
    passed: bool = False
    reason: str = ""
    subject_words: int = 0
    body_words: int = 0
    cta_occurrences: int = 0
    unresolved_template_tokens: bool = False
    banned_phrase: str = ""


class TraceQuality(RenderModel):
    """Model self-assessment. Missing data reads as unclear and risky."""

    clarity: float = Field(default=0, ge=0, le=1)
    specificity: float = Field(default=0, ge=0, le=1)
    risk: float = Field(default=1, ge=0, le=1)


class ConversationPromptTrace(RenderModel):
    mode: Literal["prompt_v1"] = PROMPT_MODE
    model: str
    prompt_version: int = Field(default=1, ge=1)
    prompt_hash: str = ""
    policy: ResolvedPromptPolicy = Field(default_factory=ResolvedPromptPolicy)
    validation: TraceValidation = Field(default_factory=TraceValidation)
    quality: TraceQuality = Field(default_factory=TraceQuality)


class RenderSuccess(RenderModel):
    ok: Literal[True] = True
    subject: str
    body: str
    cta: str
    trace: ConversationPromptTrace


class RenderFailure(RenderModel):
    ok: Literal[False] = False
    reason: str
    trace: ConversationPromptTrace


RenderResult = Union[RenderSuccess, RenderFailure]
