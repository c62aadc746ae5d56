"""
Document ingestion from the filesystem.
"""

from .document_processor import DocumentProcessor

__all__ = ["DocumentProcessor"]
