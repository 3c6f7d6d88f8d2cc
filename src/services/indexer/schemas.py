"""Schemas for the retrieval store indexer."""

from enum import Enum

from pydantic import BaseModel


class IndexState(str, Enum):
    CREATING = "CREATING"
    INDEXING = "INDEXING"
    READY = "READY"
    FAILED = "FAILED"


class IndexStore(BaseModel):
    """A File Search store holding one requirement document."""

    name: str
    display_name: str
    state: IndexState = IndexState.CREATING

    def advance(self, state: IndexState) -> "IndexStore":
        return self.model_copy(update={"state": state})
