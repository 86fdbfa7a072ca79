"""Per-key single-flight execution.

ONLY call de-duplication - concurrent callers asking for the same key
share one execution of the function and all receive its outcome.
"""

import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Dict, Hashable

logger = logging.getLogger(__name__)


class SingleFlight:
    """Collapse concurrent calls for the same key into one execution.
    
    The first caller for a key runs the function on its own thread; callers
    arriving while it runs block on the same future and get the same value
    or the same exception. Nothing is remembered once the call completes.
    """
    
    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: Dict[Hashable, Future] = {}
    
    def do(self, key: Hashable, fn: Callable[[], Any]) -> Any:
        """Run ``fn`` once for all concurrent callers of ``key``.
        
        Args:
            key: De-duplication key
            fn: Zero-argument function to run
            
        Returns:
            Result of the shared execution
        """
        with self._lock:
            future = self._in_flight.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._in_flight[key] = future
        
        if not leader:
            logger.debug(f"Joining in-flight call for key: {key}")
            return future.result()
        
        try:
            result = fn()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._in_flight.pop(key, None)
    
    def in_flight(self, key: Hashable) -> bool:
        """Check if a call for key is currently running."""
        with self._lock:
            return key in self._in_flight
