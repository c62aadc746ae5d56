"""
Transform abstraction and the pipeline that threads a graph through transforms.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..graph.knowledge_graph import KnowledgeGraph

logger = logging.getLogger(__name__)


class Transform(ABC):
    """
    A named graph-to-graph step.

    ``apply`` may mutate the graph in place and return it, or return a new
    graph. Transforms only ever add metadata keys to nodes.
    """
    name: str = "transform"
    description: str = ""

    @abstractmethod
    async def apply(self, graph: KnowledgeGraph) -> KnowledgeGraph:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class Pipeline:
    """Fluent builder applying transforms to a graph in order."""

    def __init__(self, graph: KnowledgeGraph, transforms: Optional[Iterable[Transform]] = None):
        self.graph = graph
        self.transforms: List[Transform] = list(transforms or [])

    def pipe(self, transform: Transform) -> "Pipeline":
        """Append a transform and return the pipeline for chaining."""
        self.transforms.append(transform)
        return self

    async def apply(self) -> KnowledgeGraph:
        """Run every transform sequentially and return the resulting graph."""
        result = self.graph
        for step in self.transforms:
            start_time = time.time()
            logger.info(f"Applying transform '{step.name}' to graph with {len(result)} nodes")
            result = await step.apply(result)
            logger.info(
                f"Transform '{step.name}' finished in {time.time() - start_time:.2f}s, "
                f"graph now has {len(result)} nodes"
            )
        return result


class ComposedTransform(Transform):
    """Several transforms behaving as one."""

    def __init__(self, transforms: Iterable[Transform]):
        self.transforms = list(transforms)
        names = [t.name for t in self.transforms]
        self.name = f"composed-{'-'.join(names)}"
        self.description = f"Composed transform of {', '.join(names)}"

    async def apply(self, graph: KnowledgeGraph) -> KnowledgeGraph:
        return await Pipeline(graph, self.transforms).apply()


def transform(graph: KnowledgeGraph, transforms: Optional[Iterable[Transform]] = None) -> Pipeline:
    """
    Start a transform pipeline over a graph.

    Example:
        kg = await transform(graph(documents)) \\
            .pipe(chunk(splitter)) \\
            .pipe(embed(embedding_model)) \\
            .pipe(relationship()) \\
            .apply()
    """
    return Pipeline(graph, transforms)


def compose_transforms(transforms: Iterable[Transform]) -> Transform:
    """Combine transforms into a single transform applied in order."""
    return ComposedTransform(transforms)
