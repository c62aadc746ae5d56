"""
Markdown-aware splitter: prefers header, code fence and rule boundaries.
"""

from typing import Any, Dict

from langchain_text_splitters import MarkdownTextSplitter

from ..exceptions import ConfigurationError
from .recursive_character import RecursiveCharacterSplitter


class MarkdownSplitter(RecursiveCharacterSplitter):
    """Recursive splitter using Markdown structure as its separator hierarchy."""

    def _build_text_splitter(self) -> MarkdownTextSplitter:
        return MarkdownTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            length_function=self.length_function,
            add_start_index=True,
        )


SPLITTER_CLASSES = {
    "recursive": RecursiveCharacterSplitter,
    "markdown": MarkdownSplitter,
}


def create_splitter(config: Dict[str, Any]) -> RecursiveCharacterSplitter:
    """
    Create the splitter described by the ``splitter`` config section.

    Args:
        config: Full configuration; ``splitter.type`` selects ``recursive``
            (default) or ``markdown``

    Returns:
        Configured splitter
    """
    splitter_config = config.get("splitter", {})
    splitter_type = splitter_config.get("type", "recursive")

    splitter_class = SPLITTER_CLASSES.get(splitter_type)
    if splitter_class is None:
        raise ConfigurationError(f"Unsupported splitter type: {splitter_type}")

    return splitter_class(
        chunk_size=splitter_config.get("chunk_size", 1000),
        chunk_overlap=splitter_config.get("chunk_overlap", 200),
    )
