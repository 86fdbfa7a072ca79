"""Pass-through cache that stores nothing."""

from typing import Any, Callable, Tuple

from ...application.validators.cache_key_validator import validate_key, validate_name
from ...core.exceptions.cache import CacheBackendError, ProducerFailure, SerializationError


class NoCache:
    """Cache that never holds a value.

    Registering it under a pattern disables caching for every name the
    pattern covers: lookups always miss and ``get_or_create`` always runs
    the producer.
    """

    def __init__(self, name: str):
        self._name = validate_name(name)

    @property
    def name(self) -> str:
        """Cache name."""
        return self._name

    def try_get(self, key: str) -> Tuple[bool, Any]:
        validate_key(key)
        return False, None

    def set(self, key: str, value: Any) -> None:
        validate_key(key)

    def get_or_create(self, key: str, producer: Callable[[], Any]) -> Any:
        validate_key(key)
        try:
            return producer()
        except (ProducerFailure, CacheBackendError, SerializationError):
            raise
        except Exception as e:
            raise ProducerFailure(self._name, key, e) from e

    def clear(self, key: str) -> None:
        validate_key(key)

    def clear_all(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"NoCache(name={self._name!r})"
