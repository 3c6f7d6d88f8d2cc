"""Review through the Gemini API with optional File Search retrieval."""

from google import genai
from google.genai import types

from src.core.gemini import GEMINI_ERRORS
from src.core.logging import get_logger
from src.core.prompts import render_direct_review_prompt
from src.services.github.schemas import PRDetails
from src.services.indexer.schemas import IndexStore
from src.services.indexer.service import DocumentIndexer
from src.services.reviewer.output_parser import parse_findings
from src.services.reviewer.schemas import Finding, RequirementDocument
from src.services.workspace.diff import DiffDocument

logger = get_logger("reviewer.direct")


class DirectReviewer:
    """Sends the diff straight to the model instead of running the CLI."""

    def __init__(
        self,
        client: genai.Client,
        model: str,
        indexer: DocumentIndexer | None = None,
    ) -> None:
        self.client = client
        self.model = model
        self.indexer = indexer

    async def review(
        self,
        details: PRDetails,
        diff: DiffDocument,
        requirement: RequirementDocument | None = None,
    ) -> list[Finding]:
        if requirement is None or self.indexer is None:
            return await self.generate(details, diff)

        async with self.indexer.session(requirement) as store:
            return await self.generate(details, diff, store)

    async def generate(
        self,
        details: PRDetails,
        diff: DiffDocument,
        store: IndexStore | None = None,
    ) -> list[Finding]:
        prompt = render_direct_review_prompt(
            pr_title=details.title,
            pr_description=details.description,
            diff=diff.text,
            use_file_search=store is not None,
        )

        config = None
        if store is not None:
            logger.info(f"Using File Search store: {store.name}")
            config = types.GenerateContentConfig(
                tools=[types.Tool(file_search=types.FileSearch(file_search_store_names=[store.name]))],
            )

        logger.info(f"Calling {self.model}...")
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except GEMINI_ERRORS as e:
            logger.error(f"Model call failed: {e}")
            return []

        logger.info("Response received, parsing findings...")
        return parse_findings(response.text or "")
