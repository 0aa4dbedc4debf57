"""
Pydantic schemas for request/response validation.
"""

from schemas.conversation_flow import GenerateFlowRequest, RenderMessageRequest

__all__ = [
    "GenerateFlowRequest",
    "RenderMessageRequest",
]
