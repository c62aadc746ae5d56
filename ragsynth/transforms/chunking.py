"""
Chunk transform: split document nodes into chunk nodes.
"""

import logging
from typing import AsyncIterable, AsyncIterator, Iterable, Union

from ..graph.knowledge_graph import KnowledgeGraph
from ..graph.models import ChunkNode, DocumentNode, HierarchyRelationship
from ..splitters.models import Chunk, Document, Splitter
from .base import Transform

logger = logging.getLogger(__name__)


async def _iterate_chunks(chunks: Union[Iterable[Chunk], AsyncIterable[Chunk]]) -> AsyncIterator[Chunk]:
    """Iterate a splitter's output whether it is a sync or an async iterable."""
    if hasattr(chunks, "__aiter__"):
        async for item in chunks:
            yield item
    else:
        for item in chunks:
            yield item


class ChunkTransform(Transform):
    """Split every document node and attach the resulting chunk nodes."""
    name = "chunk"
    description = "Chunk the documents in the graph"

    def __init__(self, splitter: Splitter):
        self.splitter = splitter

    async def apply(self, graph: KnowledgeGraph) -> KnowledgeGraph:
        documents = graph.get_nodes_by_type(DocumentNode.type)
        if not documents:
            logger.info("No document nodes to chunk")
            return graph

        total_chunks = 0
        for node in documents:
            document = Document(id=node.id, content=node.content, metadata=dict(node.metadata))

            async for item in _iterate_chunks(self.splitter.split(document)):
                graph.add_node(ChunkNode(
                    id=item.id,
                    content=item.content,
                    metadata={**node.metadata, **item.metadata},
                ))
                graph.add_relationship(node.id, item.id, HierarchyRelationship(role="parent"))
                graph.add_relationship(item.id, node.id, HierarchyRelationship(role="child"))
                total_chunks += 1

        logger.info(f"Created {total_chunks} chunks from {len(documents)} documents")
        return graph


def chunk(splitter: Splitter) -> Transform:
    """
    Chunk the documents in the graph.

    Args:
        splitter: Splitter producing the chunks of each document
    """
    return ChunkTransform(splitter)
