"""
In-memory knowledge graph of document and chunk nodes.
"""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

import networkx as nx

from ..exceptions import NotFoundError, SerializationError
from .models import GraphNode, Relationship

logger = logging.getLogger(__name__)


class KnowledgeGraph:
    """
    Knowledge graph keyed by node id.

    Edges live in each node's ``relationships`` map (neighbor id -> relationship),
    so an edge is owned by its source node and stored one-directionally.
    """

    def __init__(self, nodes: Optional[Iterable[GraphNode]] = None):
        self.nodes: Dict[str, GraphNode] = {}
        for node in nodes or []:
            self.add_node(node)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(list(self.nodes.values()))

    def add_node(self, node: GraphNode):
        """Add a node, replacing any node that already has the same id."""
        if node.id in self.nodes:
            logger.warning(f"Node with id {node.id} already exists, replacing")
        self.nodes[node.id] = node

    def remove_node(self, node_id: str):
        """Remove a node and every edge pointing at it."""
        if node_id not in self.nodes:
            raise NotFoundError(f"Node {node_id} not found")

        del self.nodes[node_id]
        for node in self.nodes.values():
            node.relationships.pop(node_id, None)

    def add_relationship(self, source_id: str, target_id: str, relationship: Relationship):
        """Add (or replace) the edge source -> target. Both nodes must exist."""
        source_node = self._require_node(source_id, "Source")
        self._require_node(target_id, "Target")
        source_node.relationships[target_id] = relationship

    def remove_relationship(self, source_id: str, target_id: str):
        """Remove the edge source -> target if present."""
        source_node = self._require_node(source_id, "Source")
        source_node.relationships.pop(target_id, None)

    def get_relationships(self, node_id: str) -> List[Relationship]:
        """Get the outgoing relationships of a node."""
        return list(self._require_node(node_id).relationships.values())

    def get_neighbors(self, node_id: str, relationship_type: Optional[str] = None) -> List[GraphNode]:
        """
        Get the nodes reachable over one outgoing edge.

        Args:
            node_id: Source node id
            relationship_type: Only follow edges of this type ("similarity",
                "hierarchy" or "entity")

        Returns:
            Neighbor nodes present in the graph, in edge insertion order
        """
        node = self._require_node(node_id)

        neighbors = []
        for neighbor_id, relationship in node.relationships.items():
            if relationship_type and relationship.type != relationship_type:
                continue
            neighbor = self.nodes.get(neighbor_id)
            if neighbor is not None:
                neighbors.append(neighbor)
        return neighbors

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self.nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    def get_nodes(self) -> List[GraphNode]:
        return list(self.nodes.values())

    def get_nodes_by_type(self, node_type: str) -> List[GraphNode]:
        """Get all nodes of a variant ("document" or "chunk")."""
        return [node for node in self.nodes.values() if node.type == node_type]

    def get_nodes_by(self, predicate: Callable[[GraphNode], bool]) -> List[GraphNode]:
        return [node for node in self.nodes.values() if predicate(node)]

    def traverse(self, node_id: str, max_depth: Optional[int] = None) -> Iterator[GraphNode]:
        """
        Breadth-first traversal from ``node_id``.

        Yields each reachable node once, the start node first, never going
        further than ``max_depth`` hops (unbounded when None). The returned
        generator is lazy and can only be consumed once.
        """
        start = self.nodes.get(node_id)
        if start is None:
            return
        yield start

        if max_depth is not None and max_depth <= 0:
            return
        for _, target in nx.bfs_edges(self.to_networkx(), node_id, depth_limit=max_depth):
            yield self.nodes[target]

    def to_networkx(
        self,
        nodes: Optional[Iterable[GraphNode]] = None,
        edge_filter: Optional[Callable[[Relationship], bool]] = None,
    ) -> nx.DiGraph:
        """
        Directed networkx graph of node ids, edges in insertion order.

        Args:
            nodes: Restrict the graph to these nodes (all nodes when None);
                edges leaving the set and dangling edges are dropped
            edge_filter: Optional predicate selecting the relationships to keep
        """
        members = list(self.nodes.values()) if nodes is None else list(nodes)
        digraph = nx.DiGraph()
        digraph.add_nodes_from(node.id for node in members)

        for node in members:
            for neighbor_id, relationship in node.relationships.items():
                if neighbor_id in digraph and (edge_filter is None or edge_filter(relationship)):
                    digraph.add_edge(node.id, neighbor_id)

        return digraph

    def get_stats(self) -> Dict[str, Any]:
        """Get node and edge counts of the graph."""
        node_types = Counter(node.type for node in self.nodes.values())
        relationship_types = Counter(
            relationship.type
            for node in self.nodes.values()
            for relationship in node.relationships.values()
        )

        return {
            "total_nodes": len(self.nodes),
            "total_relationships": sum(relationship_types.values()),
            "node_types": dict(node_types),
            "relationship_types": dict(relationship_types),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"nodes": [node.to_dict() for node in self.nodes.values()]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KnowledgeGraph":
        """Rebuild a graph from ``{"nodes": [...]}``."""
        if not isinstance(data, dict):
            raise SerializationError("Graph data must be an object with a 'nodes' list")

        nodes = data.get("nodes", [])
        if not isinstance(nodes, list):
            raise SerializationError("Graph 'nodes' must be a list")

        graph = cls()
        for node_data in nodes:
            if not isinstance(node_data, dict):
                raise SerializationError(f"Node entry must be an object, got {type(node_data).__name__}")
            graph.add_node(GraphNode.from_dict(node_data))
        return graph

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "KnowledgeGraph":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid graph JSON: {e}") from e
        return cls.from_dict(data)

    def save(self, filepath: Union[str, Path]):
        """Write the graph to a JSON file."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved graph with {len(self.nodes)} nodes to {path}")

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> "KnowledgeGraph":
        """Read a graph written by ``save``."""
        with open(filepath, "r", encoding="utf-8") as f:
            graph = cls.from_json(f.read())
        logger.info(f"Loaded graph with {len(graph)} nodes from {filepath}")
        return graph

    def _require_node(self, node_id: str, role: str = "Source") -> GraphNode:
        node = self.nodes.get(node_id)
        if node is None:
            raise NotFoundError(f"{role} node {node_id} not found")
        return node


def graph(nodes: Optional[Iterable[GraphNode]] = None) -> KnowledgeGraph:
    """Create a knowledge graph, optionally seeded with nodes."""
    return KnowledgeGraph(nodes)
