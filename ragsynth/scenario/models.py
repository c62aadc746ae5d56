"""
Data models for the scenario module.
"""

from dataclasses import dataclass
from typing import List

from ..graph.models import GraphNode
from ..persona.models import Persona

QUERY_LENGTHS = ("short", "medium", "long")
QUERY_STYLES = ("web-search", "conversational", "technical")
QUERY_TYPES = ("single-hop", "multi-hop")


@dataclass(frozen=True)
class QueryShape:
    length: str
    style: str
    type: str


@dataclass(frozen=True)
class ScenarioContext:
    nodes: List[GraphNode]

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]


@dataclass(frozen=True)
class Scenario:
    """A (persona, context, query shape) tuple driving one synthesis call."""
    persona: Persona
    context: ScenarioContext
    query: QueryShape


def scenario(
    persona: Persona,
    nodes: List[GraphNode],
    length: str = "medium",
    style: str = "conversational",
    type: str = "single-hop",
) -> Scenario:
    """Create a scenario by hand instead of sampling it from a graph."""
    return Scenario(
        persona=persona,
        context=ScenarioContext(nodes=list(nodes)),
        query=QueryShape(length=length, style=style, type=type),
    )
