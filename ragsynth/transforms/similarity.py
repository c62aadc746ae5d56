"""
Relationship transform: link chunks whose embeddings are similar.
"""

import logging

import numpy as np

from ..graph.knowledge_graph import KnowledgeGraph
from ..graph.models import ChunkNode, SimilarityRelationship
from ..utils import cosine_similarity_matrix
from .base import Transform
from .embedding import EMBEDDING_KEY

logger = logging.getLogger(__name__)


class RelationshipTransform(Transform):
    """
    Add a similarity edge from the earlier to the later chunk of every pair
    whose cosine similarity reaches the threshold. Quadratic in the number
    of chunks.
    """
    name = "relationship"
    description = "Build relationships between the nodes in the graph"

    def __init__(self, threshold: float = 0.7):
        self.threshold = threshold

    async def apply(self, graph: KnowledgeGraph) -> KnowledgeGraph:
        nodes = [
            node for node in graph.get_nodes_by_type(ChunkNode.type)
            if node.metadata.get(EMBEDDING_KEY)
        ]
        if len(nodes) < 2:
            return graph

        similarities = cosine_similarity_matrix([node.metadata[EMBEDDING_KEY] for node in nodes])
        sources, targets = np.nonzero(np.triu(similarities >= self.threshold, k=1))

        for i, j in zip(sources.tolist(), targets.tolist()):
            graph.add_relationship(
                nodes[i].id,
                nodes[j].id,
                SimilarityRelationship(score=float(similarities[i, j])),
            )

        logger.info(
            f"Added {len(sources)} similarity relationships among {len(nodes)} chunks "
            f"(threshold {self.threshold})"
        )
        return graph


def relationship(threshold: float = 0.7) -> Transform:
    """
    Build similarity relationships between chunk nodes.

    Nodes without embeddings are skipped.

    Args:
        threshold: Minimum cosine similarity for an edge
    """
    return RelationshipTransform(threshold)
