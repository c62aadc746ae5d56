"""
Text splitters that turn documents into chunks.
"""

from .models import Chunk, Document, Splitter
from .recursive_character import RecursiveCharacterSplitter
from .markdown import MarkdownSplitter, create_splitter

__all__ = [
    "Document",
    "Chunk",
    "Splitter",
    "RecursiveCharacterSplitter",
    "MarkdownSplitter",
    "create_splitter",
]
