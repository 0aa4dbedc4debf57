"""Root conftest.py for pytest configuration.

This file configures pytest for the entire project, ensuring:
- Proper Python path setup for imports
- Logfire observability configuration
- Shared fixtures (fake completion client, sample graphs and contexts)
- Async test support
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import logfire
import pytest


# ============================================================================
# Python Path Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings and ensure project root is in sys.path."""

    # Add project root to sys.path to ensure 'pipeline' package is importable
    project_root = Path(__file__).parent.resolve()
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    # Register custom markers
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests (fast, no external dependencies)"
    )

    # Configure logfire for all tests; spans are exported only when a token is set
    logfire.configure(
        service_name="flow_screening_tests",
        environment="test",
        send_to_logfire="if-token-present",
        console=False,
    )

    logfire.instrument_pydantic_ai()

    logfire.info(
        "Starting test suite",
        project_root=str(project_root),
    )


def pytest_sessionfinish(session, exitstatus):
    """Log test session completion with summary statistics."""
    logfire.info(
        "Test suite completed",
        exit_status=exitstatus,
        tests_collected=session.testscollected,
        tests_failed=session.testsfailed,
    )


# ============================================================================
# Fake completion client
# ============================================================================

class FakeCompletionClient:
    """
    Stand-in for JsonCompletionClient.

    Replays queued responses in order; a queued exception is raised instead
    of returned. Every call is recorded in `calls`.
    """

    def __init__(self, responses: List[Any], model_name: str = "openai:test-model"):
        self.responses = list(responses)
        self.model_name = model_name
        self.calls: List[Dict[str, Any]] = []

    async def complete_json(self, prompt: str, max_output_tokens: int) -> Dict[str, Any]:
        self.calls.append({"prompt": prompt, "max_output_tokens": max_output_tokens})
        if not self.responses:
            raise AssertionError("Unexpected completion call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


# ============================================================================
# Shared Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def project_root():
    """Return the absolute path to the project root directory."""
    return Path(__file__).parent.resolve()


@pytest.fixture
def fake_client():
    """Factory for FakeCompletionClient.

    Usage:
        def test_something(fake_client):
            client = fake_client([{"candidates": []}])
    """
    def _make(*responses: Any, model_name: str = "openai:test-model") -> FakeCompletionClient:
        return FakeCompletionClient(list(responses), model_name=model_name)

    return _make


@pytest.fixture
def make_graph():
    """Factory for a valid two-node graph dict (camelCase, as the model returns it)."""
    def _make(prefix: str = "n", **overrides: Any) -> Dict[str, Any]:
        graph = {
            "version": 1,
            "maxDepth": 3,
            "startNodeId": f"{prefix}1",
            "nodes": [
                {
                    "id": f"{prefix}1",
                    "kind": "message",
                    "title": "Opener",
                    "copyMode": "prompt_v1",
                    "promptTemplate": "Open with the free audit offer for {{company}}.",
                    "promptVersion": 1,
                    "promptPolicy": {"subjectMaxWords": 7, "bodyMaxWords": 90, "exactlyOneCta": True},
                    "subject": "",
                    "body": "",
                    "autoSend": True,
                    "delayMinutes": 0,
                    "x": 0,
                    "y": 0,
                },
                {
                    "id": f"{prefix}2",
                    "kind": "terminal",
                    "title": "Done",
                    "delayMinutes": 0,
                    "x": 200,
                    "y": 0,
                },
            ],
            "edges": [
                {
                    "id": f"{prefix}e1",
                    "fromNodeId": f"{prefix}1",
                    "toNodeId": f"{prefix}2",
                    "trigger": "intent",
                    "intent": "interest",
                    "waitMinutes": 0,
                    "confidenceThreshold": 0.7,
                    "priority": 1,
                },
            ],
        }
        graph.update(overrides)
        return graph

    return _make


@pytest.fixture
def make_evaluation():
    """Factory for a raw evaluation row that passes the default gate."""
    def _make(index: int, **overrides: Any) -> Dict[str, Any]:
        row = {
            "index": index,
            "score": 80,
            "openLikelihood": 50,
            "replyLikelihood": 30,
            "positiveReplyLikelihood": 20,
            "negativeRisk": 10,
            "clarity": 80,
            "decision": "promote",
            "summary": f"Candidate {index} reads clearly.",
            "strengths": ["specific offer"],
            "risks": ["long subject"],
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def generation_context():
    from pipeline.models.context import GenerationContext

    return GenerationContext.model_validate({
        "brand": {"name": "Acme Analytics", "website": "https://acme.test", "tone": "plain"},
        "campaign": {
            "campaignName": "Q3 outbound",
            "objectiveGoal": "book audit calls",
            "targetAudience": "ops leads at logistics firms",
        },
        "experiment": {
            "experimentRecordName": "exp-audit-1",
            "offer": "free 20-minute reporting audit",
            "cta": "Open to a 20-minute audit next week?",
            "audience": "ops leads",
        },
    })


@pytest.fixture
def render_context():
    from pipeline.models.context import ConversationPromptRenderContext

    return ConversationPromptRenderContext.model_validate({
        "brand": {"name": "Acme Analytics"},
        "experiment": {"offer": "free 20-minute reporting audit", "cta": "Open to a 20-minute audit next week?"},
        "lead": {"email": "sam@globex.test", "name": "Sam", "company": "Globex"},
        "thread": {"sessionId": "sess-1", "nodeId": "n1"},
    })


@pytest.fixture
def make_node():
    """Factory for a ConversationFlowNode (message node by default)."""
    from pipeline.models.flow_graph import ConversationFlowNode

    def _make(policy: Optional[Dict[str, Any]] = None, **overrides: Any) -> ConversationFlowNode:
        data: Dict[str, Any] = {
            "id": "n1",
            "kind": "message",
            "title": "Opener",
            "promptTemplate": "Offer the free audit to {{company}}.",
            "promptVersion": 1,
        }
        if policy is not None:
            data["promptPolicy"] = policy
        data.update(overrides)
        return ConversationFlowNode.model_validate(data)

    return _make
