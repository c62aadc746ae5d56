"""
Scenario builders: sample chunk contexts and query shapes from a knowledge graph.
"""

import itertools
import logging
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

import networkx as nx

from ..exceptions import ConfigurationError
from ..graph.knowledge_graph import KnowledgeGraph
from ..graph.models import GraphNode
from ..persona.models import Persona
from ..utils import shuffle
from .models import QUERY_LENGTHS, QUERY_STYLES, QUERY_TYPES, QueryShape, Scenario, ScenarioContext

logger = logging.getLogger(__name__)


class ScenarioBuilder(ABC):
    """Base class for scenario builders."""

    query_type: str = ""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.query_lengths = list(config.get("query_lengths", QUERY_LENGTHS))
        self.query_styles = list(config.get("query_styles", QUERY_STYLES))
        self.rng: random.Random = config.get("rng") or random.Random()

        if not self.query_lengths or not self.query_styles:
            raise ConfigurationError("query_lengths and query_styles must not be empty")
        for length in self.query_lengths:
            if length not in QUERY_LENGTHS:
                raise ConfigurationError(f"Unknown query length: {length}")
        for style in self.query_styles:
            if style not in QUERY_STYLES:
                raise ConfigurationError(f"Unknown query style: {style}")

        self.query_configs: List[Tuple[str, str]] = list(
            itertools.product(self.query_lengths, self.query_styles)
        )

    @abstractmethod
    def build(self, graph: KnowledgeGraph, persona: Persona, count: int) -> List[Scenario]:
        """Build exactly ``count`` scenarios, or none if the graph has no usable chunks."""
        pass

    def _fill(self, persona: Persona, contexts: List[List[GraphNode]], count: int) -> List[Scenario]:
        """Cycle through ``contexts``, reshuffling after every full pass, until ``count`` scenarios exist."""
        scenarios = []
        index = 0

        while len(scenarios) < count:
            nodes = contexts[index % len(contexts)]
            length, style = self.rng.choice(self.query_configs)
            scenarios.append(
                Scenario(
                    persona=persona,
                    context=ScenarioContext(nodes=list(nodes)),
                    query=QueryShape(length=length, style=style, type=self.query_type),
                )
            )

            index += 1
            if index % len(contexts) == 0:
                contexts = shuffle(contexts, self.rng)

        return scenarios


class SingleHopScenarioBuilder(ScenarioBuilder):
    """Builds scenarios whose context is a single chunk node."""

    query_type = "single-hop"

    def build(self, graph: KnowledgeGraph, persona: Persona, count: int) -> List[Scenario]:
        chunk_nodes = shuffle(graph.get_nodes_by_type("chunk"), self.rng)
        if not chunk_nodes:
            logger.warning("No chunk nodes in graph, cannot build single-hop scenarios")
            return []

        return self._fill(persona, [[node] for node in chunk_nodes], count)


class MultiHopScenarioBuilder(ScenarioBuilder):
    """Builds scenarios whose context is a group of connected chunk nodes."""

    query_type = "multi-hop"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        config = config or {}
        self.min_similarity_score = config.get("min_similarity_score", 0.5)
        self.max_hops = config.get("max_hops", 2)

        if self.max_hops < 1:
            raise ConfigurationError("max_hops must be at least 1")

    def build(self, graph: KnowledgeGraph, persona: Persona, count: int) -> List[Scenario]:
        chunk_nodes = shuffle(graph.get_nodes_by_type("chunk"), self.rng)
        if len(chunk_nodes) < 2:
            logger.warning("Multi-hop scenarios need at least two chunk nodes")
            return []

        groups = self.find_connected_groups(graph, chunk_nodes)
        if not groups:
            logger.info("No connected chunk groups found, pairing chunks instead")
            groups = [
                [chunk_nodes[i], chunk_nodes[i + 1]]
                for i in range(0, len(chunk_nodes) - 1, 2)
            ]

        return self._fill(persona, groups, count)

    def is_qualifying(self, relationship) -> bool:
        if relationship.type == "hierarchy":
            return True
        if relationship.type == "similarity":
            return relationship.score >= self.min_similarity_score
        return False

    def find_connected_groups(
        self, graph: KnowledgeGraph, chunk_nodes: Sequence[GraphNode]
    ) -> List[List[GraphNode]]:
        """
        Breadth-first groups of chunks reachable within ``max_hops`` hops.

        A node joins at most one group: every node reached from a start node
        is marked visited, including members of groups that end up discarded
        for being larger than ``max_hops + 1``.
        """
        chunk_graph = graph.to_networkx(chunk_nodes, edge_filter=self.is_qualifying)
        visited = set()
        unvisited = nx.subgraph_view(chunk_graph, filter_node=lambda n: n not in visited)
        groups = []

        for start in chunk_nodes:
            if start.id in visited:
                continue

            member_ids = [start.id] + [
                target for _, target in nx.bfs_edges(unvisited, start.id, depth_limit=self.max_hops)
            ]
            visited.update(member_ids)

            if 2 <= len(member_ids) <= self.max_hops + 1:
                groups.append([graph.get_node(node_id) for node_id in member_ids])

        logger.debug(f"Found {len(groups)} connected chunk groups")
        return groups


BUILDERS = {
    "single-hop": SingleHopScenarioBuilder,
    "multi-hop": MultiHopScenarioBuilder,
}


def generate_scenarios(
    graph: KnowledgeGraph,
    persona: Persona,
    count: int,
    type: str,
    config: Optional[Dict[str, Any]] = None,
) -> List[Scenario]:
    """
    Generate scenarios for a persona.

    Args:
        graph: Knowledge graph containing chunk nodes
        persona: Persona the questions are written for
        count: Number of scenarios to build
        type: "single-hop" or "multi-hop"
        config: Optional builder settings (query_lengths, query_styles,
            min_similarity_score, max_hops, rng)

    Returns:
        Exactly ``count`` scenarios, or an empty list when the graph has too
        few chunk nodes for the requested type
    """
    if type not in QUERY_TYPES:
        raise ConfigurationError(f"Unknown scenario type: {type}")
    if count < 0:
        raise ConfigurationError("Scenario count must not be negative")

    builder = BUILDERS[type](config)
    return builder.build(graph, persona, count)
