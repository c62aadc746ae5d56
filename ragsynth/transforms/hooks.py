"""
Tap transform for inspecting the graph mid-pipeline.
"""

import inspect
from typing import Any, Callable

from ..graph.knowledge_graph import KnowledgeGraph
from .base import Transform


class TapTransform(Transform):
    name = "tap"
    description = "Used for inspecting intermediate results or debugging the pipeline"

    def __init__(self, callback: Callable[[KnowledgeGraph], Any]):
        self.callback = callback

    async def apply(self, graph: KnowledgeGraph) -> KnowledgeGraph:
        result = self.callback(graph)
        if inspect.isawaitable(result):
            await result
        return graph


def tap(callback: Callable[[KnowledgeGraph], Any]) -> Transform:
    """Call ``callback`` (sync or async) with the graph and pass the graph on unchanged."""
    return TapTransform(callback)
