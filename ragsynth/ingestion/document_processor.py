"""
Document Processor for loading source files into document nodes.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import docx
import pypdf

from ..graph.models import DocumentNode

logger = logging.getLogger(__name__)

DEFAULT_FORMATS = ["pdf", "json", "md", "txt", "docx"]


class DocumentProcessor:
    """Processor for extracting document content from various file formats."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.supported_formats = self.config.get("supported_formats", DEFAULT_FORMATS)

    def load_documents(self, data_path: Union[str, Path]) -> List[DocumentNode]:
        """
        Load every supported file under ``data_path`` as a document node.

        Args:
            data_path: A directory (searched recursively) or a single file

        Returns:
            Document nodes in path order; node ids are paths relative to
            ``data_path``. Unreadable or empty files are logged and skipped.
        """
        root = Path(data_path)
        if not root.exists():
            raise FileNotFoundError(f"Data path not found: {root}")

        if root.is_file():
            files = [root]
            base = root.parent
        else:
            files = sorted(
                path for path in root.rglob("*")
                if path.is_file() and path.suffix.lower()[1:] in self.supported_formats
            )
            base = root

        documents = []
        for file_path in files:
            content = self.extract_content(file_path)
            if not content or not content.strip():
                logger.warning(f"No content extracted from {file_path}, skipping")
                continue

            documents.append(
                DocumentNode(
                    id=file_path.relative_to(base).as_posix(),
                    content=content,
                    metadata={
                        "source": str(file_path),
                        "file_name": file_path.name,
                        "format": file_path.suffix.lower()[1:],
                    },
                )
            )

        logger.info(f"Loaded {len(documents)} documents from {root}")
        return documents

    def extract_content(self, file_path: Path) -> Optional[str]:
        """
        Extract content from a file based on its format.

        Args:
            file_path: Path to the file to process

        Returns:
            Extracted content as string, or None if extraction failed
        """
        file_extension = file_path.suffix.lower()
        extractors = {
            ".pdf": self._extract_pdf_content,
            ".json": self._extract_json_content,
            ".md": self._extract_text_content,
            ".txt": self._extract_text_content,
            ".docx": self._extract_docx_content,
        }

        extractor = extractors.get(file_extension)
        if extractor is None:
            logger.warning(f"Unsupported file format: {file_extension}")
            return None

        try:
            return extractor(file_path)
        except Exception as e:
            logger.error(f"Failed to extract content from {file_path}: {e}")
            return None

    def _extract_pdf_content(self, file_path: Path) -> str:
        """Extract text content from PDF file."""
        with open(file_path, "rb") as file:
            reader = pypdf.PdfReader(file)
            return "\n".join(page.extract_text() or "" for page in reader.pages)

    def _extract_json_content(self, file_path: Path) -> str:
        """Extract content from JSON file as pretty-printed text."""
        with open(file_path, "r", encoding="utf-8") as file:
            data = json.load(file)
        return json.dumps(data, indent=2, ensure_ascii=False)

    def _extract_text_content(self, file_path: Path) -> str:
        with open(file_path, "r", encoding="utf-8") as file:
            return file.read()

    def _extract_docx_content(self, file_path: Path) -> str:
        document = docx.Document(file_path)
        return "\n".join(paragraph.text for paragraph in document.paragraphs)
