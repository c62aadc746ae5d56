"""
Model capabilities: text generation and embedding providers.
"""

from .llm_manager import (
    AnthropicProvider,
    LLMConfig,
    LLMManager,
    LLMProvider,
    OpenAIProvider,
    parse_structured_output,
)
from .embeddings import (
    EmbeddingProvider,
    OpenAIEmbeddings,
    SentenceTransformerEmbeddings,
    create_embedding_model,
)

__all__ = [
    "LLMManager",
    "LLMProvider",
    "LLMConfig",
    "OpenAIProvider",
    "AnthropicProvider",
    "parse_structured_output",
    "EmbeddingProvider",
    "OpenAIEmbeddings",
    "SentenceTransformerEmbeddings",
    "create_embedding_model",
]
