"""Prompts for the Prompt Renderer."""

from pipeline.models.context import ConversationPromptRenderContext
from pipeline.models.flow_graph import ConversationFlowNode

from .models import ResolvedPromptPolicy


OUTPUT_SHAPE = '{"subject":"...","body":"...","cta":"...","quality":{"clarity":0-1,"specificity":0-1,"risk":0-1}}'


def create_render_prompt(
    node: ConversationFlowNode,
    policy: ResolvedPromptPolicy,
    context: ConversationPromptRenderContext,
) -> str:
    """
    Build the prompt for one outbound email.

    The prompt is hashed into the trace, so any change here changes
    every prompt hash.

    Args:
        node: Message node whose template is rendered
        policy: Resolved (clamped) policy for the node
        context: Live send-time context

    Returns:
        Prompt text
    """
    cta_rule = (
        "- Include exactly one explicit CTA sentence in the body, and make the same CTA text "
        "available in the cta field."
        if policy.exactly_one_cta
        else "- Include a clear CTA in the body."
    )

    lines = [
        "You are an outbound email copywriter for managed B2B outreach automation.",
        "Write ONE outbound email for the given node.",
        "Return JSON only with this exact shape:",
        OUTPUT_SHAPE,
        "",
        "Hard constraints:",
        f"- Subject must be <= {policy.subject_max_words} words.",
        f"- Body must be <= {policy.body_max_words} words.",
        "- Body must be specific, concrete, and easy to understand.",
        "- No buzzwords, no placeholder tokens, no unresolved variables.",
        "- If context includes prior inbound message, respond to that context.",
        cta_rule,
        "",
        f"Node title: {node.title}",
        f"Node kind: {node.kind.value}",
        f"Node prompt template:\n{node.prompt_template.strip()}",
        "",
        f"Execution context JSON:\n{context.to_prompt_json()}",
    ]
    return "\n".join(lines)
