"""
Data models for the knowledge graph: relationship variants and node variants.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Type, Union

from ..exceptions import SerializationError


@dataclass(frozen=True)
class SimilarityRelationship:
    """Embedding similarity between two chunks."""
    score: float
    type: ClassVar[str] = "similarity"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "score": self.score}


@dataclass(frozen=True)
class HierarchyRelationship:
    """Document/chunk containment, seen from the edge's source node."""
    role: str
    type: ClassVar[str] = "hierarchy"
    roles: ClassVar[tuple] = ("parent", "child")

    def __post_init__(self):
        if self.role not in self.roles:
            raise SerializationError(f"Invalid hierarchy role: {self.role}")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "role": self.role}


@dataclass(frozen=True)
class EntityRelationship:
    """Link between nodes sharing an entity. Reserved for entity linking."""
    role: str = "related"
    type: ClassVar[str] = "entity"
    roles: ClassVar[tuple] = ("related",)

    def __post_init__(self):
        if self.role not in self.roles:
            raise SerializationError(f"Invalid entity role: {self.role}")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "role": self.role}


Relationship = Union[SimilarityRelationship, HierarchyRelationship, EntityRelationship]

RELATIONSHIP_TYPES = ("similarity", "hierarchy", "entity")


def relationship_from_dict(data: Dict[str, Any]) -> Relationship:
    """Rebuild a relationship from its serialized form."""
    if not isinstance(data, dict):
        raise SerializationError(f"Relationship must be an object, got {type(data).__name__}")

    rel_type = data.get("type")
    try:
        if rel_type == "similarity":
            return SimilarityRelationship(score=float(data["score"]))
        if rel_type == "hierarchy":
            return HierarchyRelationship(role=data["role"])
        if rel_type == "entity":
            return EntityRelationship(role=data.get("role", "related"))
    except (KeyError, TypeError, ValueError) as e:
        if isinstance(e, SerializationError):
            raise
        raise SerializationError(f"Malformed {rel_type} relationship {data}: {e}") from e

    raise SerializationError(f"Invalid relationship type: {rel_type}")


@dataclass
class GraphNode:
    """A node of the knowledge graph. Use DocumentNode or ChunkNode."""
    id: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    relationships: Dict[str, Relationship] = field(default_factory=dict)
    type: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the node, its metadata and its outgoing edges."""
        return {
            "id": self.id,
            "type": self.type,
            "content": self.content,
            "metadata": self.metadata,
            "relationships": [
                [neighbor_id, relationship.to_dict()]
                for neighbor_id, relationship in self.relationships.items()
            ],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "GraphNode":
        """
        Rebuild a node from its serialized form.

        The ``type`` field selects the node variant; unknown types are rejected.
        """
        node_type = data.get("type")
        node_class = NODE_TYPES.get(node_type)
        if node_class is None:
            raise SerializationError(f"Invalid node type: {node_type}")

        try:
            node = node_class(
                id=data["id"],
                content=data.get("content", ""),
                metadata=dict(data.get("metadata") or {}),
            )
        except KeyError as e:
            raise SerializationError(f"Node is missing required field {e}") from e

        relationships: List[Any] = data.get("relationships") or []
        for entry in relationships:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise SerializationError(
                    f"Relationship entry of node {node.id} must be a [neighbor_id, relationship] pair"
                )
            neighbor_id, rel_data = entry
            node.relationships[neighbor_id] = relationship_from_dict(rel_data)

        return node


@dataclass
class DocumentNode(GraphNode):
    """A source document."""
    type: ClassVar[str] = "document"


@dataclass
class ChunkNode(GraphNode):
    """One split segment of a source document."""
    type: ClassVar[str] = "chunk"


NODE_TYPES: Dict[str, Type[GraphNode]] = {
    DocumentNode.type: DocumentNode,
    ChunkNode.type: ChunkNode,
}
