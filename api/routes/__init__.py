"""
API route handlers.
"""

from api.routes.conversation_flow import router as conversation_flow_router

__all__ = ["conversation_flow_router"]
