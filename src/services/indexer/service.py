"""Indexes requirement documents into a Gemini File Search store."""

import asyncio
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path, PurePath
from typing import Any, AsyncIterator

from google import genai

from src.core.exceptions import IndexingError, IndexingTimeoutError
from src.core.gemini import GEMINI_ERRORS
from src.core.logging import get_logger
from src.core.retry import RetryPolicy
from src.services.indexer.schemas import IndexState, IndexStore
from src.services.reviewer.schemas import RequirementDocument

logger = get_logger("indexer")

MIME_TYPES = {
    "pdf": "application/pdf",
    "txt": "text/plain",
    "md": "text/markdown",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def get_mime_type(file_name: str) -> str:
    """Get MIME type from file name."""
    suffix = PurePath(file_name).suffix.lower().lstrip(".")
    return MIME_TYPES.get(suffix, "text/plain")


class DocumentIndexer:
    """Creates a store, uploads a document and waits until it is searchable.

    The uploaded scratch copy is always removed. A store created by a failed
    ``index`` call is discarded before the error propagates.
    """

    def __init__(
        self,
        client: genai.Client,
        scratch_dir: Path,
        policy: RetryPolicy | None = None,
    ) -> None:
        self.client = client
        self.scratch_dir = Path(scratch_dir)
        self.policy = policy or RetryPolicy()

    async def index(self, document: RequirementDocument) -> IndexStore:
        """Index a document and return a READY store.

        Raises:
            IndexingTimeoutError: If indexing is not done within the policy bound.
            IndexingError: If the store, the upload or the scratch copy fails.
        """
        display_name = f"pr-review-{int(time.time() * 1000)}"
        logger.info("Creating file search store...")
        try:
            created = await self.client.aio.file_search_stores.create(
                config={"display_name": display_name},
            )
        except GEMINI_ERRORS as e:
            raise IndexingError(f"Could not create file search store: {e}") from e

        store = IndexStore(name=created.name, display_name=display_name)
        logger.info(f"Store created: {store.name}")

        try:
            store = await self._upload_and_wait(store, document)
        except BaseException:
            await self.discard(store.advance(IndexState.FAILED))
            raise

        logger.info("File upload completed!")
        return store

    async def _upload_and_wait(self, store: IndexStore, document: RequirementDocument) -> IndexStore:
        base_name = PurePath(document.name.replace("\\", "/")).name or "document"
        scratch = self.scratch_dir / f"{uuid.uuid4().hex}-{base_name}"

        try:
            try:
                await asyncio.to_thread(self.scratch_dir.mkdir, parents=True, exist_ok=True)
                await asyncio.to_thread(scratch.write_bytes, document.content)
                logger.debug(f"Temp file saved: {scratch}")
                operation = await self.client.aio.file_search_stores.upload_to_file_search_store(
                    file=str(scratch),
                    file_search_store_name=store.name,
                    config={"display_name": base_name, "mime_type": get_mime_type(base_name)},
                )
            except GEMINI_ERRORS as e:
                raise IndexingError(f"Upload to {store.name} failed: {e}") from e
            except OSError as e:
                raise IndexingError(f"Could not stage {base_name} for upload: {e}") from e

            store = store.advance(IndexState.INDEXING)
            logger.info("Waiting for processing...")
            outcome = await self.policy.poll(
                self._refresh,
                operation,
                is_done=lambda op: bool(op.done),
                label=f"indexing of {base_name}",
            )
        finally:
            try:
                await asyncio.to_thread(scratch.unlink, missing_ok=True)
                logger.debug("Temp file cleaned up")
            except OSError as e:
                logger.error(f"Could not remove temp file {scratch}: {e}")

        if not outcome.done:
            raise IndexingTimeoutError(outcome.attempts, outcome.elapsed)
        if getattr(outcome.value, "error", None):
            raise IndexingError(f"Indexing of {base_name} failed: {outcome.value.error}")
        return store.advance(IndexState.READY)

    async def _refresh(self, operation: Any) -> Any:
        try:
            return await self.client.aio.operations.get(operation)
        except GEMINI_ERRORS as e:
            raise IndexingError(f"Could not poll indexing operation: {e}") from e

    async def discard(self, store: IndexStore) -> None:
        """Delete a store; failures are logged, never raised."""
        try:
            await self.client.aio.file_search_stores.delete(name=store.name, config={"force": True})
            logger.info(f"Discarded store {store.name} ({store.state.value})")
        except GEMINI_ERRORS as e:
            logger.error(f"Could not discard store {store.name}: {e}")

    @asynccontextmanager
    async def session(self, document: RequirementDocument) -> AsyncIterator[IndexStore | None]:
        """Yield a READY store, or None when indexing failed, and discard it on exit."""
        store = None
        try:
            store = await self.index(document)
        except IndexingError as e:
            logger.warning(f"Proceeding without requirement retrieval: {e}")

        try:
            yield store
        finally:
            if store is not None:
                await self.discard(store)
