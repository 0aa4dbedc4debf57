"""
Prompt Renderer - send-time message rendering

Turns one message node plus live context into a validated
subject/body/CTA triple. Rendering never raises for business failures:
callers branch on `result.ok`.
"""

import logfire
from typing import Any, Dict, Optional, Tuple

from config.settings import settings
from pipeline.models.context import ConversationPromptRenderContext
from pipeline.models.flow_graph import ConversationFlowNode, NodeKind
from utils.llm_agent import JsonCompletionClient
from utils.llm_router import LlmTask, resolve_model
from utils.sanitizer import Sanitizer, sanitize_ai_text

from .models import (
    ConversationPromptTrace,
    RenderFailure,
    RenderResult,
    RenderSuccess,
    TraceQuality,
    TraceValidation,
)
from .prompts import create_render_prompt
from .utils import (
    BANNED_VAGUE_PHRASES,
    clamp_quality,
    normalize_whitespace,
    one_line,
    prompt_hash,
    resolve_policy,
    validate_output,
)


class ConversationPromptRenderer:
    """
    Renders one message node per call.

    Steps, in order:
    1. reject non-message nodes and empty templates (no model call)
    2. resolve the node's prompt policy
    3. build and hash the prompt
    4. one completion call
    5. normalize and sanitize subject/body/cta
    6. validate (first failing check wins)
    """

    def __init__(
        self,
        client: Optional[JsonCompletionClient] = None,
        sanitizer: Sanitizer = sanitize_ai_text,
        banned_phrases: Tuple[str, ...] = BANNED_VAGUE_PHRASES,
        max_output_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ):
        self.client = client or JsonCompletionClient(
            model=resolve_model(LlmTask.CONVERSATION_PROMPT_RENDER, override=model)
        )
        self.sanitizer = sanitizer
        self.banned_phrases = tuple(banned_phrases)
        self.max_output_tokens = max_output_tokens or settings.prompt_render_max_tokens

    def _initial_trace(self, node: ConversationFlowNode) -> ConversationPromptTrace:
        return ConversationPromptTrace(
            model=self.client.model_name,
            prompt_version=max(1, node.prompt_version or 1),
            policy=resolve_policy(node),
        )

    async def render(
        self,
        node: ConversationFlowNode,
        context: ConversationPromptRenderContext,
    ) -> RenderResult:
        """
        Render one email for `node`.

        Returns:
            RenderSuccess when every validation check passes, else RenderFailure.
            Errors from the completion call become RenderFailure as well.
        """
        trace = self._initial_trace(node)

        with logfire.span(
            "prompt_renderer.render",
            node_id=node.id,
            session_id=context.thread.session_id,
            model=trace.model,
            has_inbound=context.thread.has_inbound,
        ):
            if node.kind != NodeKind.MESSAGE:
                return self._fail("Node is not a message node", trace, node)

            if not node.prompt_template.strip():
                return self._fail("Node prompt template is empty", trace, node)

            prompt = create_render_prompt(node=node, policy=trace.policy, context=context)
            trace.prompt_hash = prompt_hash(prompt)

            try:
                parsed = await self.client.complete_json(prompt, max_output_tokens=self.max_output_tokens)
            except Exception as e:
                reason = str(e)
                details = getattr(e, "details", "")
                if details:
                    reason = f"{reason} {details[:220]}"
                logfire.error(
                    "Message generation call failed",
                    node_id=node.id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return self._fail(reason, trace, node)

            trace.quality = self._read_quality(parsed.get("quality"))

            subject = self.sanitizer(normalize_whitespace(self._text(parsed.get("subject"))))
            body = self.sanitizer(normalize_whitespace(self._text(parsed.get("body"))))
            cta = self.sanitizer(one_line(self._text(parsed.get("cta"))))

            validation = validate_output(
                subject=subject,
                body=body,
                cta=cta,
                policy=trace.policy,
                banned_phrases=self.banned_phrases,
            )
            trace.validation = TraceValidation(
                passed=validation.ok,
                reason=validation.reason,
                subject_words=validation.subject_words,
                body_words=validation.body_words,
                cta_occurrences=validation.cta_occurrences,
                unresolved_template_tokens=validation.unresolved,
                banned_phrase=validation.banned_phrase,
            )

            if not validation.ok:
                return self._fail(validation.reason, trace, node)

            logfire.info(
                "Message rendered",
                node_id=node.id,
                prompt_hash=trace.prompt_hash,
                subject_words=validation.subject_words,
                body_words=validation.body_words,
                quality_risk=trace.quality.risk,
            )
            return RenderSuccess(subject=subject, body=body, cta=cta, trace=trace)

    @staticmethod
    def _text(value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @staticmethod
    def _read_quality(value: Any) -> TraceQuality:
        raw: Dict[str, Any] = value if isinstance(value, dict) else {}
        return TraceQuality(
            clarity=clamp_quality(raw.get("clarity"), 0),
            specificity=clamp_quality(raw.get("specificity"), 0),
            risk=clamp_quality(raw.get("risk"), 1),
        )

    @staticmethod
    def _fail(reason: str, trace: ConversationPromptTrace, node: ConversationFlowNode) -> RenderFailure:
        trace.validation.passed = False
        trace.validation.reason = reason
        logfire.warning(
            "Message render rejected",
            node_id=node.id,
            reason=reason,
            prompt_hash=trace.prompt_hash,
        )
        return RenderFailure(reason=reason, trace=trace)


async def render_conversation_message(
    node: ConversationFlowNode,
    context: ConversationPromptRenderContext,
    model: Optional[str] = None,
) -> RenderResult:
    """Render with a default-configured renderer."""
    renderer = ConversationPromptRenderer(model=model)
    return await renderer.render(node, context)
