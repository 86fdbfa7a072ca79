"""Base exceptions for neo-cache.

This module defines the base exception hierarchy for the neo-cache library.
All exceptions inherit from NeoCacheError and carry an error code and
structured details for logging and API responses.
"""

from typing import Any, Dict, Optional


class NeoCacheError(Exception):
    """Base exception for all neo-cache errors.
    
    All exceptions in the neo-cache library inherit from this base class
    and include structured error information for better debugging.
    """
    
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def create_error_response(exception: NeoCacheError) -> Dict[str, Any]:
    """Create standardized error response from exception.
    
    Args:
        exception: The neo-cache exception
        
    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
