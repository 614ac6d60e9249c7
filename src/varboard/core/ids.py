"""Connection ID utilities

Every client attached to the hub gets an opaque connection ID. IDs are
namespaced by transport so logs can tell channel clients from HTTP
ingress calls:
- ws:<hex>    - realtime channel connection
- http:<hex>  - one-shot HTTP ingress request
"""

import uuid

WS_PREFIX = "ws"
HTTP_PREFIX = "http"


def new_connection_id(transport: str = WS_PREFIX) -> str:
    """Create a namespaced connection ID.

    Args:
        transport: Transport prefix ("ws", "http")

    Returns:
        Namespaced ID like "ws:1f0c..."
    """
    return f"{transport}:{uuid.uuid4().hex}"


def short_id(conn_id: str, length: int = 8) -> str:
    """Get a short display version of a connection ID for logging.

    Strips the transport prefix (if present) and truncates to length.
    """
    pure_id = conn_id.split(":")[-1] if ":" in conn_id else conn_id
    return pure_id[:length]
