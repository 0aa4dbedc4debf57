"""
Roleplay Evaluator Step

Scores every candidate as a panel of skeptical inbox recipients would.
"""

from .main import RoleplayEvaluatorStep

__all__ = ["RoleplayEvaluatorStep"]
