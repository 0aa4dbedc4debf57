"""
Candidate Generator Step

Requests several distinct conversation-flow candidates in one model call
and keeps the ones that pass strict graph validation.
"""

from .main import CandidateGeneratorStep

__all__ = ["CandidateGeneratorStep"]
