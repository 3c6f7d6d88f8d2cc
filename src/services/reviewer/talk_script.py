"""Short spoken summary of review findings."""

import json

from langchain_core.messages import HumanMessage

from src.config import settings
from src.core.llm import get_chat_llm
from src.core.logging import get_logger
from src.core.prompts import render_talk_script_prompt
from src.services.reviewer.schemas import Finding

logger = get_logger("reviewer.talk_script")

NO_FINDINGS_SCRIPT = "No issues found in this pull request. Everything looks good!"


async def generate_talk_script(findings: list[Finding]) -> str | None:
    """Ask the chat model for a spoken summary; None when it is unavailable."""
    if not findings:
        return NO_FINDINGS_SCRIPT

    findings_json = json.dumps(
        [f.model_dump(mode="json", by_alias=True, exclude_none=True) for f in findings],
        indent=2,
    )
    prompt = render_talk_script_prompt(findings_json)

    try:
        llm = get_chat_llm(model=settings.talk_script_model)
        response = await llm.ainvoke([HumanMessage(content=prompt)])
    except Exception as e:
        logger.warning(f"Talk script generation failed: {e}")
        return None

    content = response.content if isinstance(response.content, str) else str(response.content)
    return content.strip() or None
