"""Cache core domain.

Value objects, entities, events, exceptions and protocols shared by the
application services and the infrastructure adapters.
"""

from .exceptions import *
from .value_objects import *
from .entities import *
from .events import *
from .protocols import *
