"""
ragsynth - Synthetic Test Data Generation for RAG Evaluation

Builds a knowledge graph of documents and chunks, enriches it with a
transform pipeline (chunking, embeddings, summaries, similarity edges) and
synthesizes persona-driven question/answer samples from it.
"""

from .dataset import EvaluationDataset, EvaluationSample
from .exceptions import (
    ConfigurationError,
    GenerationFailure,
    NotFoundError,
    RagSynthError,
    SerializationError,
    StructuralError,
)
from .graph import ChunkNode, DocumentNode, GraphNode, KnowledgeGraph
from .persona import Persona, generate_personas
from .scenario import Scenario, generate_scenarios
from .source import SDGSource
from .synthesizer import create_synthesizer, synthesize
from .transforms import chunk, compose_transforms, embed, embed_property, relationship, summarize, tap, transform

__version__ = "0.1.0"

__all__ = [
    "EvaluationDataset",
    "EvaluationSample",
    "RagSynthError",
    "StructuralError",
    "NotFoundError",
    "SerializationError",
    "GenerationFailure",
    "ConfigurationError",
    "KnowledgeGraph",
    "GraphNode",
    "DocumentNode",
    "ChunkNode",
    "Persona",
    "generate_personas",
    "Scenario",
    "generate_scenarios",
    "SDGSource",
    "create_synthesizer",
    "synthesize",
    "transform",
    "compose_transforms",
    "chunk",
    "embed",
    "embed_property",
    "relationship",
    "summarize",
    "tap",
]
