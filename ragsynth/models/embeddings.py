"""
Embedding providers implementing the batch embedding capability.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from functools import partial
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import ConfigurationError
from .llm_manager import resolve_env_vars

logger = logging.getLogger(__name__)

Embedding = List[float]


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers."""

    @abstractmethod
    async def embed_many(self, texts: Sequence[str]) -> List[Embedding]:
        """Embed a batch of texts, returning one vector per input in input order."""
        pass

    async def embed(self, text: str) -> Embedding:
        """Embed a single text."""
        embeddings = await self.embed_many([text])
        return embeddings[0]


class OpenAIEmbeddings(EmbeddingProvider):
    """OpenAI embeddings API."""

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        batch_size: int = 512,
    ):
        self.model = model
        self.batch_size = batch_size
        self.api_key = resolve_env_vars(api_key) if api_key else None
        if not self.api_key or "${" in self.api_key:
            self.api_key = os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ConfigurationError("OpenAI API key not found")

        try:
            from openai import AsyncOpenAI
            self.client = AsyncOpenAI(api_key=self.api_key)
        except ImportError:
            raise ImportError("openai package required: pip install openai")

    async def embed_many(self, texts: Sequence[str]) -> List[Embedding]:
        """Generate embeddings using OpenAI, batching large inputs."""
        embeddings: List[Embedding] = []
        for i in range(0, len(texts), self.batch_size):
            batch = list(texts[i:i + self.batch_size])
            try:
                response = await self.client.embeddings.create(model=self.model, input=batch)
            except Exception as e:
                logger.error(f"OpenAI embedding error: {e}")
                raise
            embeddings.extend(item.embedding for item in sorted(response.data, key=lambda d: d.index))
        return embeddings


class SentenceTransformerEmbeddings(EmbeddingProvider):
    """Local sentence-transformers model."""

    def __init__(self, model_name: str = "sentence-transformers/all-MiniLM-L6-v2"):
        self.model_name = model_name
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError:
            raise ImportError("sentence-transformers package required: pip install sentence-transformers")
        self.model = SentenceTransformer(model_name)

    async def embed_many(self, texts: Sequence[str]) -> List[Embedding]:
        """Encode texts in a worker thread so the event loop stays responsive."""
        loop = asyncio.get_running_loop()
        vectors = await loop.run_in_executor(None, partial(self.model.encode, list(texts)))
        return [vector.tolist() for vector in vectors]


def create_embedding_model(config: Dict[str, Any]) -> EmbeddingProvider:
    """
    Create the embedding provider described by the ``embeddings`` config section.

    Args:
        config: Full configuration; ``embeddings.provider`` selects
            ``openai`` or ``sentence_transformers``

    Returns:
        Configured embedding provider
    """
    embedding_config = config.get("embeddings", {})
    provider = embedding_config.get("provider", "openai")

    if provider == "openai":
        return OpenAIEmbeddings(
            model=embedding_config.get("model", "text-embedding-3-small"),
            api_key=embedding_config.get("api_key"),
            batch_size=embedding_config.get("batch_size", 512),
        )
    if provider == "sentence_transformers":
        return SentenceTransformerEmbeddings(
            embedding_config.get("model", "sentence-transformers/all-MiniLM-L6-v2")
        )

    raise ConfigurationError(f"Unsupported embedding provider: {provider}")
