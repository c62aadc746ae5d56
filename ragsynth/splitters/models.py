"""
Data models shared by text splitters and the chunk transform.
"""

from dataclasses import dataclass, field
from typing import Any, AsyncIterable, Dict, Iterable, Protocol, Union, runtime_checkable


@dataclass
class Document:
    """A document handed to a splitter."""
    id: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Chunk:
    """
    A split segment of a document.

    ``metadata`` carries ``start``, ``end`` (character offsets into the
    document), ``index`` (position of the chunk) and ``document_id``.
    """
    id: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class Splitter(Protocol):
    """Anything that turns a document into an ordered sequence of chunks."""

    def split(self, document: Document) -> Union[Iterable[Chunk], AsyncIterable[Chunk]]:
        ...
