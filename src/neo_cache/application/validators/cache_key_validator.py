"""Cache key validator.

ONLY argument validation - rejects missing or non-string cache keys and
cache names before they reach a storage tier.
"""

from typing import Any

from ...core.exceptions.cache import InvalidArgumentError


class CacheKeyValidator:
    """Validates cache keys and cache names.
    
    Keys must be strings; the empty string is a valid key. Names and
    patterns must be strings as well. None is always rejected.
    """
    
    @staticmethod
    def validate_key(key: Any) -> str:
        """Validate a cache key.
        
        Args:
            key: Candidate cache key
            
        Returns:
            The key, unchanged
            
        Raises:
            InvalidArgumentError: If key is None or not a string
        """
        if key is None:
            raise InvalidArgumentError("key")
        if not isinstance(key, str):
            raise InvalidArgumentError("key", f"must be a string, got {type(key).__name__}")
        return key
    
    @staticmethod
    def validate_name(name: Any, argument: str = "name") -> str:
        """Validate a cache name or name pattern.
        
        Args:
            name: Candidate cache name
            argument: Argument name reported in the error
            
        Returns:
            The name, unchanged
            
        Raises:
            InvalidArgumentError: If name is None or not a string
        """
        if name is None:
            raise InvalidArgumentError(argument)
        if not isinstance(name, str):
            raise InvalidArgumentError(argument, f"must be a string, got {type(name).__name__}")
        return name


validate_key = CacheKeyValidator.validate_key
validate_name = CacheKeyValidator.validate_name
