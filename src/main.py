"""PR Requirement Reviewer - FastAPI entry point."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import settings
from src.core.exceptions import ApiException
from src.core.logging import get_logger
from src.core.schemas.responses import ErrorResponse, HealthResponse
from src.services.reviewer.routes import router as reviewer_router

logger = get_logger("main")

app = FastAPI(
    title="PR Requirement Reviewer",
    description="Reviews GitHub PRs against requirement documents with an AI review engine",
    version="0.1.0",
)

# The review UI is served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiException)
async def api_exception_handler(request: Request, exc: ApiException) -> JSONResponse:
    """Handle custom API exceptions and return structured error response."""
    logger.warning(f"API error: {exc.message} (status={exc.status_code})")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.message,
            details=exc.details if exc.details else None,
        ).model_dump(),
    )


# Include routes
app.include_router(reviewer_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "pr-requirement-reviewer",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        review_mode=settings.review_mode,
        review_tool=settings.review_tool_command[0],
        direct_review=bool(settings.gemini_api_key),
    )


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting PR Requirement Reviewer on {settings.host}:{settings.port}")
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
