"""Tests for strict conversation-flow graph decoding."""

import pytest
from pydantic import ValidationError

from pipeline.models.flow_graph import (
    ConversationFlowGraph,
    CopyMode,
    EdgeTrigger,
    NodeKind,
    ReplyIntent,
)


def test_valid_graph_decodes_camel_case(make_graph):
    graph = ConversationFlowGraph.model_validate(make_graph())

    assert graph.start_node_id == "n1"
    assert graph.nodes[0].kind == NodeKind.MESSAGE
    assert graph.nodes[0].copy_mode == CopyMode.PROMPT_V1
    assert graph.nodes[0].prompt_policy.subject_max_words == 7
    assert graph.edges[0].trigger == EdgeTrigger.INTENT
    assert graph.edges[0].intent == ReplyIntent.INTEREST
    assert [node.id for node in graph.message_nodes()] == ["n1"]
    assert graph.get_node("n2").kind == NodeKind.TERMINAL
    assert graph.get_node("missing") is None


def test_graph_round_trips_with_aliases(make_graph):
    graph = ConversationFlowGraph.model_validate(make_graph())
    dumped = graph.model_dump(mode="json", by_alias=True)

    assert dumped["startNodeId"] == "n1"
    assert dumped["edges"][0]["fromNodeId"] == "n1"
    assert ConversationFlowGraph.model_validate(dumped) == graph


def test_timer_edge_defaults_to_empty_intent(make_graph):
    data = make_graph()
    data["edges"][0] = {"id": "t1", "fromNodeId": "n1", "toNodeId": "n2", "trigger": "timer", "waitMinutes": 1440}

    edge = ConversationFlowGraph.model_validate(data).edges[0]

    assert edge.intent == ReplyIntent.NONE
    assert edge.confidence_threshold == 0.7
    assert edge.priority == 1


@pytest.mark.parametrize(
    "mutate",
    [
        lambda g: g.update(version=2),
        lambda g: g.update(maxDepth=0),
        lambda g: g.update(nodes=[]),
        lambda g: g.pop("startNodeId"),
        lambda g: g["nodes"].append(dict(g["nodes"][0])),
        lambda g: g["nodes"][0].pop("kind"),
        lambda g: g["nodes"][0].update(copyMode="static"),
        lambda g: g["nodes"][0].update(delayMinutes=10081),
        lambda g: g["nodes"][0].update(promptVersion=0),
        lambda g: g["edges"][0].update(fromNodeId="ghost"),
        lambda g: g["edges"][0].update(intent="maybe"),
        lambda g: g["edges"][0].update(confidenceThreshold=1.5),
        lambda g: g["edges"][0].update(priority=101),
        lambda g: g["edges"][0].update(id="   "),
    ],
)
def test_invalid_graphs_are_rejected(make_graph, mutate):
    data = make_graph()
    mutate(data)

    with pytest.raises(ValidationError):
        ConversationFlowGraph.model_validate(data)


def test_legacy_template_node_with_body_only_is_valid(make_graph):
    data = make_graph()
    data["nodes"][0].update(promptTemplate="", copyMode="legacy_template", subject="Hi", body="Template copy")

    graph = ConversationFlowGraph.model_validate(data)

    assert graph.nodes[0].copy_mode == CopyMode.LEGACY_TEMPLATE
    assert graph.nodes[0].body == "Template copy"


def test_fractional_policy_limits_are_accepted(make_graph):
    data = make_graph()
    data["nodes"][0]["promptPolicy"] = {"subjectMaxWords": 7.6, "bodyMaxWords": 90.5}

    policy = ConversationFlowGraph.model_validate(data).nodes[0].prompt_policy

    assert policy.subject_max_words == 7.6
    assert policy.body_max_words == 90.5
