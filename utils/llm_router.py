"""
Per-task model resolution.

Precedence: explicit override, then OPENAI_MODEL_TASK_<TASK>, then the
legacy env var for the task (if any), then the tier model from settings.
"""

import os
import re
from enum import Enum
from typing import Optional

from config.settings import get_settings

DEFAULT_PROVIDER = "openai"


class LlmTask(str, Enum):
    CONVERSATION_FLOW_GENERATION = "conversation_flow_generation"
    CONVERSATION_FLOW_ROLEPLAY = "conversation_flow_roleplay"
    CONVERSATION_PROMPT_RENDER = "conversation_prompt_render"


# All three tasks need the strongest model available.
TASK_TIER = {
    LlmTask.CONVERSATION_FLOW_GENERATION: "high",
    LlmTask.CONVERSATION_FLOW_ROLEPLAY: "high",
    LlmTask.CONVERSATION_PROMPT_RENDER: "high",
}

LEGACY_MODEL_ENV = {
    LlmTask.CONVERSATION_PROMPT_RENDER: "CONVERSATION_PROMPT_MODEL",
}


def task_env_key(task: LlmTask) -> str:
    """OPENAI_MODEL_TASK_CONVERSATION_PROMPT_RENDER etc."""
    return "OPENAI_MODEL_TASK_" + re.sub(r"[^A-Z0-9]+", "_", task.value.upper())


def with_provider(model: str) -> str:
    """Prefix bare model names with the default provider."""
    return model if ":" in model else f"{DEFAULT_PROVIDER}:{model}"


def resolve_model(task: LlmTask, override: Optional[str] = None) -> str:
    """Return a pydantic-ai model string for the task."""
    explicit = (override or "").strip()
    if explicit:
        return with_provider(explicit)

    by_task = os.getenv(task_env_key(task), "").strip()
    if by_task:
        return with_provider(by_task)

    legacy_env = LEGACY_MODEL_ENV.get(task)
    if legacy_env:
        legacy = os.getenv(legacy_env, "").strip()
        if legacy:
            return with_provider(legacy)

    settings = get_settings()
    default_model = settings.openai_model_default.strip() or "gpt-5.2"
    if TASK_TIER.get(task) == "high":
        return with_provider(settings.openai_model_high.strip() or default_model)
    return with_provider(default_model)
