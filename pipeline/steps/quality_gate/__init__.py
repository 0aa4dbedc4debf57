"""Quality Gate Step - deterministic ranking and threshold selection."""

from .main import QualityGateStep

__all__ = ["QualityGateStep"]
