"""Node identity utilities for neo-cache."""

import os
import socket
import uuid


def generate_node_id() -> str:
    """Generate an identifier unique to this process instance.
    
    Returns:
        Identifier of the form ``<host>:<pid>:<random>``
    """
    return f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"
