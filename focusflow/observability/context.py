"""
Call context: who is acting, under which request.

One CallContext is bound per HTTP request (by CorrelationIdMiddleware) or
per CLI command. Log formatters read it, so the Manager's mutation and
denial logs carry the request id and the calling owner without every call
site passing them along.
"""

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass


@dataclass(frozen=True)
class CallContext:
    request_id: str
    owner_id: str | None = None


_current: contextvars.ContextVar[CallContext | None] = contextvars.ContextVar(
    "focusflow_call_context", default=None
)


def generate_request_id() -> str:
    return f"req-{uuid.uuid4().hex[:16]}"


def current_context() -> CallContext | None:
    return _current.get()


def get_request_id() -> str | None:
    ctx = _current.get()
    return ctx.request_id if ctx else None


def get_caller_owner() -> str | None:
    """Owner id of the caller bound to this context, if any."""
    ctx = _current.get()
    return ctx.owner_id if ctx else None


@contextmanager
def bind_call(request_id: str | None = None, owner_id: str | None = None) -> Iterator[CallContext]:
    """
    Bind a CallContext for the duration of the block.

    A missing request id is generated. The previous context (if any) is
    restored on exit.
    """
    ctx = CallContext(request_id=request_id or generate_request_id(), owner_id=owner_id or None)
    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)
