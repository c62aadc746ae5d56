"""
Recursive character text splitter backed by langchain-text-splitters.
"""

import logging
from typing import Callable, Iterator, List, Optional, Union

from langchain_text_splitters import RecursiveCharacterTextSplitter

from ..exceptions import ConfigurationError
from .models import Chunk, Document

logger = logging.getLogger(__name__)


class RecursiveCharacterSplitter:
    """
    Split text on the coarsest separator that occurs in it, recursing into
    finer separators for pieces that are still too long. Chunks are at most
    ``chunk_size`` long with ``chunk_overlap`` carried between neighbors.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: Optional[List[str]] = None,
        keep_separator: Union[bool, str] = True,
        length_function: Callable[[str], int] = len,
    ):
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = list(separators) if separators is not None else None
        self.keep_separator = keep_separator
        self.length_function = length_function
        self._validate_options()
        self.text_splitter = self._build_text_splitter()

    def _validate_options(self):
        if self.chunk_size <= 0:
            raise ConfigurationError("chunk_size must be greater than 0")
        if self.chunk_overlap < 0:
            raise ConfigurationError("chunk_overlap must be greater than or equal to 0")
        if self.chunk_overlap >= self.chunk_size:
            raise ConfigurationError("chunk_overlap must be less than chunk_size")
        if self.separators is not None and not self.separators:
            raise ConfigurationError("At least one separator is required")

    def _build_text_splitter(self) -> RecursiveCharacterTextSplitter:
        return RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            separators=self.separators,
            keep_separator=self.keep_separator,
            length_function=self.length_function,
            add_start_index=True,
        )

    def split(self, document: Document) -> Iterator[Chunk]:
        """Lazily yield the chunks of a document in order."""
        for index, piece in enumerate(self.text_splitter.create_documents([document.content])):
            start = piece.metadata["start_index"]
            yield Chunk(
                id=f"{document.id}-chunk-{index}",
                content=piece.page_content,
                metadata={
                    "start": start,
                    "end": start + len(piece.page_content),
                    "index": index,
                    "document_id": document.id,
                },
            )

    def split_text(self, text: str) -> List[str]:
        """Split raw text without position tracking."""
        return self.text_splitter.split_text(text)
