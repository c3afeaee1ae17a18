"""
ZeroDB Integration Package

Document store client for the challenge and user tables.
"""

from .client import ZeroDBClient
from .exceptions import (
    ZeroDBAuthError,
    ZeroDBError,
    ZeroDBNotFound,
    ZeroDBRateLimitError,
    ZeroDBTimeoutError,
)

__all__ = [
    "ZeroDBClient",
    "ZeroDBError",
    "ZeroDBAuthError",
    "ZeroDBNotFound",
    "ZeroDBRateLimitError",
    "ZeroDBTimeoutError",
]
