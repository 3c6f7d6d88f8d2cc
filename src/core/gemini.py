"""Gemini API client."""

from typing import Optional

import httpx
from google import genai
from google.genai import errors

from src.config import settings
from src.core.logging import get_logger

logger = get_logger("gemini")

# google-genai surfaces transport failures as raw httpx errors
GEMINI_ERRORS = (errors.APIError, httpx.HTTPError)

_gemini_client: Optional[genai.Client] = None


def get_gemini_client() -> genai.Client:
    """Get the shared Gemini client."""
    global _gemini_client

    if _gemini_client:
        return _gemini_client

    if not settings.gemini_api_key:
        raise ValueError("GEMINI_API_KEY not configured")

    _gemini_client = genai.Client(api_key=settings.gemini_api_key)
    logger.info("Gemini client initialized")
    return _gemini_client
