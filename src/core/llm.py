"""Chat LLM client using OpenRouter."""

from langchain_openai import ChatOpenAI

from src.config import settings
from src.core.logging import get_logger

logger = get_logger("llm")

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

DEFAULT_MODEL = "gemini-2.5-flash"

SUPPORTED_MODELS = {
    "gemini-2.5-flash": "google/gemini-2.5-flash",
    "gemini-2.5-pro": "google/gemini-2.5-pro",
    "claude-sonnet-4": "anthropic/claude-sonnet-4",
    "gpt-4o-mini": "openai/gpt-4o-mini",
}


def get_chat_llm(
    model: str = DEFAULT_MODEL,
    temperature: float = 0.3,
) -> ChatOpenAI:
    """Get a chat LLM instance via OpenRouter."""
    api_key = settings.openrouter_api_key
    if not api_key:
        raise ValueError("OPENROUTER_API_KEY not configured")

    model_id = SUPPORTED_MODELS.get(model, SUPPORTED_MODELS[DEFAULT_MODEL])

    logger.info(f"[LLM] Using OpenRouter: {model} -> {model_id}")

    return ChatOpenAI(
        model=model_id,
        api_key=api_key,
        base_url=OPENROUTER_BASE_URL,
        temperature=temperature,
    )
