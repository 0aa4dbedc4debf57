"""
Services module for business logic called by the API layer.
"""

from services.flow_generation import generate_screened_flow

__all__ = ["generate_screened_flow"]
