"""
Graph transforms and the pipeline builder.
"""

from .base import ComposedTransform, Pipeline, Transform, compose_transforms, transform
from .chunking import chunk
from .embedding import EMBEDDING_KEY, embed, embed_property
from .similarity import relationship
from .summarization import summarize
from .hooks import tap

__all__ = [
    "Transform",
    "Pipeline",
    "ComposedTransform",
    "transform",
    "compose_transforms",
    "chunk",
    "embed",
    "embed_property",
    "EMBEDDING_KEY",
    "relationship",
    "summarize",
    "tap",
]
