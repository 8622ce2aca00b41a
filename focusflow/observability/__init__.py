"""
Observability module: structured logging bound to the calling request.

Usage:
    import logging
    from focusflow.observability import bind_call

    logger = logging.getLogger(__name__)

    with bind_call(owner_id="alice"):
        logger.info("Created block")  # line carries request_id and owner_id
"""

from .context import (
    CallContext,
    bind_call,
    current_context,
    generate_request_id,
    get_caller_owner,
    get_request_id,
)
from .logging import (
    CorrelationIdMiddleware,
    HumanFormatter,
    JSONFormatter,
    configure_logging,
)

__all__ = [
    # Logging
    "configure_logging",
    "JSONFormatter",
    "HumanFormatter",
    "CorrelationIdMiddleware",
    # Context
    "CallContext",
    "bind_call",
    "current_context",
    "generate_request_id",
    "get_caller_owner",
    "get_request_id",
]
