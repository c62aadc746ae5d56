"""
Summarize transform: attach a short LLM-written summary to nodes.
"""

import logging
from typing import Callable, Optional

from ..graph.knowledge_graph import KnowledgeGraph
from ..graph.models import GraphNode
from ..models.llm_manager import LLMProvider
from ..utils import bounded_gather
from .base import Transform

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """Summarize the following document concisely. Focus on the main topics, key concepts, and primary purpose of the content.

Document:
{content}

Provide a concise summary (2-4 sentences):"""


class SummarizeTransform(Transform):
    """Generate summaries for nodes with bounded concurrency."""
    name = "summarize"
    description = "Generate summaries for nodes in the graph"

    def __init__(
        self,
        model: LLMProvider,
        filter: Optional[Callable[[GraphNode], bool]] = None,
        concurrency: int = 10,
        property_name: str = "summary",
    ):
        self.model = model
        self.filter = filter
        self.concurrency = concurrency
        self.property_name = property_name

    async def apply(self, graph: KnowledgeGraph) -> KnowledgeGraph:
        nodes = graph.get_nodes_by(self.filter) if self.filter else graph.get_nodes()
        if not nodes:
            return graph

        failures = 0

        async def summarize_node(node: GraphNode):
            nonlocal failures
            if not node.content.strip():
                return ""
            try:
                summary = await self.model.generate(SUMMARY_PROMPT.format(content=node.content))
                return (summary or "").strip()
            except Exception as e:
                failures += 1
                logger.error(f"Failed to generate summary for node {node.id}: {e}")
                return ""

        summaries = await bounded_gather(nodes, summarize_node, self.concurrency)

        for node, summary in zip(nodes, summaries):
            node.metadata[self.property_name] = summary

        if failures:
            logger.warning(f"Summaries failed for {failures} of {len(nodes)} nodes")
        logger.info(f"Summarized {len(nodes) - failures} nodes")
        return graph


def summarize(
    model: LLMProvider,
    filter: Optional[Callable[[GraphNode], bool]] = None,
    concurrency: int = 10,
    property_name: str = "summary",
) -> Transform:
    """
    Summarize the nodes in the graph.

    A node whose summary call fails gets an empty summary; the other nodes
    are unaffected.

    Args:
        model: Text generation model
        filter: Optional predicate selecting the nodes to summarize
        concurrency: Maximum number of in-flight model calls
        property_name: Metadata key the summary is stored under
    """
    return SummarizeTransform(model, filter, concurrency, property_name)
