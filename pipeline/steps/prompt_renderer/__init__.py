"""
Prompt Renderer

Send-time rendering of one conversation-flow message node into a single
validated email (subject, body, CTA) plus a diagnostic trace.
"""

from .main import ConversationPromptRenderer, render_conversation_message
from .models import ConversationPromptTrace, RenderFailure, RenderResult, RenderSuccess

__all__ = [
    "ConversationPromptRenderer",
    "render_conversation_message",
    "ConversationPromptTrace",
    "RenderFailure",
    "RenderResult",
    "RenderSuccess",
]
