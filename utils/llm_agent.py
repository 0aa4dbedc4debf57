"""Utilities for creating instrumented pydantic-ai agents and JSON completion calls."""

import asyncio
import json
import logging
import os
from typing import Any, Dict, Optional, Union

import httpx
import logfire
from openai import APIConnectionError
from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError, UnexpectedModelBehavior
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from config.settings import get_settings
from pipeline.core.exceptions import (
    ConfigurationError,
    MalformedOutputError,
    UpstreamCallError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

ModelLike = Union[str, Model]

JSON_SYSTEM_PROMPT = (
    "You are a precise assistant that always answers with a single raw JSON object. "
    "Never wrap the JSON in markdown code fences and never add commentary."
)

# Upstream statuses worth retrying
RETRYABLE_STATUS_CODES = frozenset({408, 409, 429})

DETAILS_LIMIT = 600


def _model_label(model: ModelLike) -> str:
    if isinstance(model, str):
        return model
    return getattr(model, "model_name", type(model).__name__)


def create_agent(
    model: ModelLike,
    system_prompt: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: int = 2000,
    retries: int = 0,
    timeout: Optional[float] = None,
) -> Agent[None, str]:
    """Create a pydantic-ai Agent returning raw text."""
    model_settings: Dict[str, Any] = {"max_tokens": max_tokens}
    # Reasoning models reject an explicit temperature, so it is only sent when set.
    if temperature is not None:
        model_settings["temperature"] = temperature
    if timeout is not None:
        model_settings["timeout"] = timeout

    agent = Agent(
        model=model,
        output_type=str,
        system_prompt=system_prompt or "You are a helpful AI assistant.",
        retries=retries,
        model_settings=model_settings,
    )

    logger.debug(
        "Created agent: model=%s, temperature=%s, max_tokens=%s, retries=%s, timeout=%s",
        _model_label(model),
        temperature,
        max_tokens,
        retries,
        timeout,
    )

    return agent


def parse_json_object(output_text: str) -> Dict[str, Any]:
    """
    Decode model output that must be a single JSON object.

    Raises:
        MalformedOutputError: invalid JSON, or JSON that is not an object
    """
    text = (output_text or "").strip()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        raise MalformedOutputError("Model output was not valid JSON.", details=text[:DETAILS_LIMIT])

    if not isinstance(parsed, dict):
        raise MalformedOutputError("Model output was not a JSON object.", details=text[:DETAILS_LIMIT])
    return parsed


class JsonCompletionClient:
    """
    One call contract for the generative text service:
    (prompt, max_output_tokens) -> JSON object.

    Each attempt is bounded by `timeout`. Only UpstreamUnavailableError is
    retried, with exponential backoff starting at `retry_base_delay`.
    """

    def __init__(
        self,
        model: ModelLike,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        system_prompt: str = JSON_SYSTEM_PROMPT,
    ):
        settings = get_settings()
        self.model = model
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.timeout = timeout if timeout is not None else settings.llm_timeout_seconds
        self.max_attempts = max(1, max_attempts if max_attempts is not None else settings.llm_max_attempts)
        self.retry_base_delay = (
            retry_base_delay if retry_base_delay is not None else settings.llm_retry_base_delay
        )
        self.system_prompt = system_prompt

    @property
    def model_name(self) -> str:
        return _model_label(self.model)

    def _build_model(self) -> ModelLike:
        """
        Bind the client's key to `openai:` model strings.

        The key goes to the provider directly so an explicit api_key wins
        over whatever OPENAI_API_KEY holds.
        """
        if not isinstance(self.model, str) or not self.model.startswith("openai:"):
            return self.model
        api_key = self.api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is missing.")
        return OpenAIChatModel(
            self.model.split(":", 1)[1],
            provider=OpenAIProvider(api_key=api_key),
        )

    async def complete_json(self, prompt: str, max_output_tokens: int) -> Dict[str, Any]:
        """
        Run one completion and decode its JSON object output.

        Raises:
            ConfigurationError: credential missing (no call made)
            UpstreamUnavailableError: transient failure persisted through all attempts
            UpstreamCallError: non-retryable non-success response
            MalformedOutputError: output was not a JSON object
        """
        agent = create_agent(
            model=self._build_model(),
            system_prompt=self.system_prompt,
            max_tokens=max_output_tokens,
            retries=0,
            timeout=self.timeout,
        )

        for attempt in range(1, self.max_attempts + 1):
            try:
                output_text = await self._run_once(agent, prompt)
                return parse_json_object(output_text)

            except UpstreamUnavailableError as e:
                if attempt >= self.max_attempts:
                    logfire.error(
                        "Generative service unavailable after all attempts",
                        model=self.model_name,
                        attempts=attempt,
                        error=str(e),
                    )
                    raise

                delay = self.retry_base_delay * (2 ** (attempt - 1))
                logfire.warning(
                    "Generative service call failed, retrying",
                    model=self.model_name,
                    error=str(e),
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    retry_delay=delay,
                )
                await asyncio.sleep(delay)

        raise RuntimeError("Unreachable: retry loop must return or raise")  # pragma: no cover

    async def _run_once(self, agent: Agent, prompt: str) -> str:
        """Single attempt, with upstream exceptions mapped onto the pipeline taxonomy."""
        try:
            result = await asyncio.wait_for(agent.run(prompt), timeout=self.timeout)
            return str(result.output or "")

        except asyncio.TimeoutError:
            raise UpstreamUnavailableError(
                f"Generative service call timed out after {self.timeout}s."
            )
        except ModelHTTPError as e:
            body = e.body if isinstance(e.body, str) else json.dumps(e.body, default=str)
            error_cls = (
                UpstreamUnavailableError
                if e.status_code in RETRYABLE_STATUS_CODES or e.status_code >= 500
                else UpstreamCallError
            )
            raise error_cls(
                f"Generative service request failed (HTTP {e.status_code}).",
                details=(body or "")[:DETAILS_LIMIT],
            ) from e
        except (APIConnectionError, httpx.TransportError) as e:
            raise UpstreamUnavailableError(
                f"Generative service connection failed: {type(e).__name__}",
                details=str(e)[:DETAILS_LIMIT],
            ) from e
        except UnexpectedModelBehavior as e:
            raise MalformedOutputError(
                "Model returned an unusable response.",
                details=str(e)[:DETAILS_LIMIT],
            ) from e
        except AgentRunError as e:
            raise UpstreamCallError(
                "Generative service call failed.",
                details=str(e)[:DETAILS_LIMIT],
            ) from e
