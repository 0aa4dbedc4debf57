"""
Custom exceptions for pipeline execution.

Every exception carries an HTTP-equivalent status_code and a free-text
details string so the API layer can surface diagnostics without
inspecting exception types one by one.
"""

import json
from typing import Any, Dict, List, Optional


class PipelineExecutionError(Exception):
    """
    Base exception for pipeline execution failures.

    All step-specific exceptions inherit from this.
    """

    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, details: str = "", status_code: Optional[int] = None):
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Error payload for API responses."""
        return {"error": self.message, "details": self.details}


class StepExecutionError(PipelineExecutionError):
    """
    Raised when a pipeline step fails unexpectedly.

    Attributes:
        step_name: Name of the failed step
        original_error: The underlying exception
    """

    def __init__(self, step_name: str, original_error: Exception):
        self.step_name = step_name
        self.original_error = original_error
        # Embed step_name in message so it survives serialization
        super().__init__(f"Step '{step_name}' failed: {str(original_error)}")


class ValidationError(PipelineExecutionError):
    """
    Raised when step input prerequisites are not met.

    Example: the evaluator runs before any candidates were generated.
    """

    status_code = 400


class ConfigurationError(PipelineExecutionError):
    """Raised when the model credential is missing. Never retried."""

    status_code = 503


class UpstreamCallError(PipelineExecutionError):
    """
    Raised when the generative service returns a non-success response.

    The raw response body is truncated into `details`.
    """

    status_code = 502


class UpstreamUnavailableError(UpstreamCallError):
    """
    Transient upstream failure (timeout, connection error, 429, 5xx).

    This is the only retryable error class.
    """

    retryable = True


class MalformedOutputError(PipelineExecutionError):
    """Raised when model output is not a JSON object. Not retryable without changing the prompt."""

    status_code = 502


class TooFewCandidatesError(PipelineExecutionError):
    """Raised when fewer than the minimum number of candidate graphs survive normalization."""

    status_code = 502

    def __init__(self, valid_candidates: int, minimum: int):
        self.valid_candidates = valid_candidates
        self.minimum = minimum
        super().__init__(
            "Model returned too few valid conversation-map candidates.",
            details=f"validCandidates={valid_candidates}",
        )


class EvaluationCountMismatchError(PipelineExecutionError):
    """Raised when the evaluator does not return exactly one valid row per candidate."""

    status_code = 502

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Roleplay evaluation count mismatch.",
            details=f"expected={expected}, actual={actual}",
        )


class QualityGateFailure(PipelineExecutionError):
    """
    Raised when no ranked candidate passes the quality gate.

    This is a correct run that found nothing acceptable, not a fault.
    `top_candidates` holds the diagnostics of the best-ranked near misses.
    """

    status_code = 422

    def __init__(self, top_candidates: List[Dict[str, Any]]):
        self.top_candidates = top_candidates
        super().__init__(
            "No conversation-flow candidate passed roleplay quality gate.",
            details=json.dumps({"top": top_candidates}),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["top"] = self.top_candidates
        return payload
