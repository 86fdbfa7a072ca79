"""Reader-writer lock.

Many readers may hold the lock at once; a writer holds it alone. Waiting
writers block new readers so a steady stream of lookups cannot starve
registrations.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Shared-read / exclusive-write lock (not reentrant)."""
    
    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0
    
    def acquire_read(self) -> None:
        """Acquire the lock for reading."""
        with self._condition:
            while self._writer or self._waiting_writers:
                self._condition.wait()
            self._readers += 1
    
    def release_read(self) -> None:
        """Release a read hold."""
        with self._condition:
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()
    
    def acquire_write(self) -> None:
        """Acquire the lock exclusively."""
        with self._condition:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
    
    def release_write(self) -> None:
        """Release the exclusive hold."""
        with self._condition:
            self._writer = False
            self._condition.notify_all()
    
    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Context manager holding the lock for reading."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()
    
    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Context manager holding the lock exclusively."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
