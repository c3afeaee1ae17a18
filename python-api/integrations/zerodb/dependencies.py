"""
FastAPI Dependencies for ZeroDB Client

Provides the shared document store client for route handlers.
"""

import logging
from functools import lru_cache

from config import settings
from fastapi import HTTPException, status

from .client import ZeroDBClient

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _build_client() -> ZeroDBClient:
    return ZeroDBClient(
        api_key=settings.ZERODB_API_KEY,
        project_id=settings.ZERODB_PROJECT_ID,
        base_url=settings.ZERODB_BASE_URL,
        timeout=settings.ZERODB_TIMEOUT,
    )


def get_zerodb_client() -> ZeroDBClient:
    """
    Get the ZeroDB client instance (one per process).

    Returns:
        ZeroDBClient: Configured ZeroDB client instance

    Raises:
        HTTPException: 500 if ZERODB_API_KEY or ZERODB_PROJECT_ID is not configured

    Example:
        >>> @router.get("/challenges")
        >>> async def list_all(zerodb: ZeroDBClient = Depends(get_zerodb_client)):
        ...     return await zerodb.tables.query_rows("challenges")
    """
    try:
        return _build_client()
    except ValueError as e:
        logger.error(f"ZeroDB client configuration error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database configuration error. Please contact support.",
        )
