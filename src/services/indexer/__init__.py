"""Requirement document indexer."""

from src.services.indexer.schemas import IndexState, IndexStore
from src.services.indexer.service import DocumentIndexer

__all__ = ["DocumentIndexer", "IndexState", "IndexStore"]
