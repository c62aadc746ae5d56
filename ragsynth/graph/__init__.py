"""
Knowledge graph data model.
"""

from .models import (
    ChunkNode,
    DocumentNode,
    EntityRelationship,
    GraphNode,
    HierarchyRelationship,
    Relationship,
    SimilarityRelationship,
    relationship_from_dict,
)
from .knowledge_graph import KnowledgeGraph, graph

__all__ = [
    "KnowledgeGraph",
    "graph",
    "GraphNode",
    "DocumentNode",
    "ChunkNode",
    "Relationship",
    "SimilarityRelationship",
    "HierarchyRelationship",
    "EntityRelationship",
    "relationship_from_dict",
]
