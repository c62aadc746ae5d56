"""
Embedding transforms: embed chunk contents or any metadata string property.
"""

import logging
from typing import Callable, List, Optional

from ..graph.knowledge_graph import KnowledgeGraph
from ..graph.models import ChunkNode, GraphNode
from ..models.embeddings import EmbeddingProvider
from .base import Transform

logger = logging.getLogger(__name__)

EMBEDDING_KEY = "embeddings"

NodeFilter = Callable[[GraphNode], bool]


async def _embed_nodes(model: EmbeddingProvider, nodes: List[GraphNode], values: List[str], key: str):
    """Embed ``values`` in one batch call and store vector i on node i under ``key``."""
    embeddings = await model.embed_many(values)
    if len(embeddings) != len(nodes):
        raise ValueError(
            f"Embedding model returned {len(embeddings)} vectors for {len(nodes)} inputs"
        )

    for node, vector in zip(nodes, embeddings):
        node.metadata[key] = [float(x) for x in vector]


class EmbedTransform(Transform):
    """Embed the content of every non-empty chunk node."""
    name = "embed"
    description = "Embed the nodes in the graph"

    def __init__(self, model: EmbeddingProvider):
        self.model = model

    async def apply(self, graph: KnowledgeGraph) -> KnowledgeGraph:
        nodes = [
            node for node in graph.get_nodes_by_type(ChunkNode.type)
            if node.content.strip()
        ]
        if not nodes:
            logger.info("No chunk nodes with content to embed")
            return graph

        await _embed_nodes(self.model, nodes, [node.content for node in nodes], EMBEDDING_KEY)
        logger.info(f"Embedded {len(nodes)} chunk nodes")
        return graph


class EmbedPropertyTransform(Transform):
    """Embed a string metadata property and store the vector under another key."""
    name = "embed_property"

    def __init__(
        self,
        model: EmbeddingProvider,
        embed_property: str,
        property_name: str,
        filter: Optional[NodeFilter] = None,
    ):
        self.model = model
        self.embed_property = embed_property
        self.property_name = property_name
        self.filter = filter
        self.description = f"Embed {embed_property} property in nodes"

    async def apply(self, graph: KnowledgeGraph) -> KnowledgeGraph:
        nodes = graph.get_nodes_by(self.filter) if self.filter else graph.get_nodes()

        nodes_with_property = []
        for node in nodes:
            value = node.metadata.get(self.embed_property)
            if isinstance(value, str) and value.strip():
                nodes_with_property.append(node)

        if not nodes_with_property:
            logger.info(f"No nodes with a non-empty '{self.embed_property}' property to embed")
            return graph

        values = [node.metadata[self.embed_property] for node in nodes_with_property]
        await _embed_nodes(self.model, nodes_with_property, values, self.property_name)
        logger.info(
            f"Embedded '{self.embed_property}' of {len(nodes_with_property)} nodes "
            f"into '{self.property_name}'"
        )
        return graph


def embed(model: EmbeddingProvider) -> Transform:
    """
    Embed the chunk nodes in the graph by their content.

    Vectors are stored under the ``embeddings`` metadata key.
    """
    return EmbedTransform(model)


def embed_property(
    model: EmbeddingProvider,
    embed_property: str,
    property_name: str,
    filter: Optional[NodeFilter] = None,
) -> Transform:
    """
    Embed a metadata property (for example a summary) of the nodes in the graph.

    Args:
        model: Embedding model
        embed_property: Metadata key holding the text to embed
        property_name: Metadata key the vector is stored under
        filter: Optional predicate selecting the nodes to consider
    """
    return EmbedPropertyTransform(model, embed_property, property_name, filter)
