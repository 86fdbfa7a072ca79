"""Cache application layer.

Registry, layered cache and invalidation synchronization services.
"""

from .validators import *
from .services import *
