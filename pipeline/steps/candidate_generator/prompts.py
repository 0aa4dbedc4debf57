"""
Prompts for the Candidate Generator pipeline step.

The graph shape in OUTPUT_SHAPE must stay in sync with
pipeline.models.flow_graph, since every candidate is validated against it.
"""

from pipeline.models.context import GenerationContext


ALLOWED_VARIABLES = (
    "{{firstName}}",
    "{{company}}",
    "{{brandName}}",
    "{{campaignGoal}}",
    "{{shortAnswer}}",
)

OUTPUT_SHAPE = (
    '{ "candidates": [{ "index": number, "rationale": string, "graph": { "version": 1, '
    '"maxDepth": number, "startNodeId": string, "nodes": [{ "id": string, '
    '"kind": "message"|"terminal", "title": string, "copyMode": "prompt_v1", '
    '"promptTemplate": string, "promptVersion": 1, "promptPolicy": { "subjectMaxWords": number, '
    '"bodyMaxWords": number, "exactlyOneCta": boolean }, "subject": string, "body": string, '
    '"autoSend": boolean, "delayMinutes": number, "x": number, "y": number }], '
    '"edges": [{ "id": string, "fromNodeId": string, "toNodeId": string, '
    '"trigger": "intent"|"timer"|"fallback", '
    '"intent": "question"|"interest"|"objection"|"unsubscribe"|"other"|"", '
    '"waitMinutes": number, "confidenceThreshold": number, "priority": number }] } }] }'
)


def create_generation_prompt(context: GenerationContext, candidate_count: int) -> str:
    """
    Build the prompt asking for `candidate_count` distinct conversation maps.

    Args:
        context: Brand / campaign / experiment context
        candidate_count: Number of candidates to request

    Returns:
        Prompt text
    """
    lines = [
        "You write high-performing B2B outbound email conversation maps.",
        f"Generate {candidate_count} distinct candidate maps for the same experiment.",
        "Each candidate must use a different opening angle and framing while staying true "
        "to the exact offer and CTA.",
        "",
        "Hard requirements:",
        "- Plain, concrete language. No buzzwords, no generic hype.",
        "- Subject lines <= 7 words. Message bodies <= 90 words.",
        "- Every non-terminal message includes exactly one clear CTA.",
        f"- Use only these variables when needed: {', '.join(ALLOWED_VARIABLES)}.",
        "- Every non-terminal message MUST directly reflect experiment offer + CTA context.",
        "- No provider/tool implementation terms.",
        "- Every edge must connect node ids that exist in the same graph, and startNodeId "
        "must be one of the node ids.",
        "",
        "Return JSON only:",
        OUTPUT_SHAPE,
        f"Context: {context.to_prompt_json()}",
    ]
    return "\n".join(lines)
