"""Health check endpoint for monitoring and deployment verification."""

from fastapi import APIRouter

from formflow import __version__
from formflow.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    The evaluation engine has no external dependencies, so a response means
    the service is healthy.

    Example response:
        {
            "status": "healthy",
            "version": "1.0.0"
        }
    """
    logger.debug("Health check passed")
    return {"status": "healthy", "version": __version__}
