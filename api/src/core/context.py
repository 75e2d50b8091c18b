"""Request context management using contextvars.

Each request gets a request id plus the acting user and an upstream trace id
when known. Log processors read them from here, so vote and comment events
carry them without threading the values through every call.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context, generating one if needed.

    Returns:
        The request ID that was set.
    """
    rid = request_id or str(uuid4())
    request_id_var.set(rid)
    return rid


def get_user_id() -> str | None:
    """Get the current user ID."""
    return user_id_var.get()


def set_user_id(user_id: str | None) -> None:
    """Set the acting user for the current context."""
    user_id_var.set(user_id)


def get_trace_id() -> str | None:
    """Get the current trace ID."""
    return trace_id_var.get()


def set_trace_id(trace_id: str | None) -> None:
    """Set the trace ID taken from distributed tracing headers."""
    trace_id_var.set(trace_id)


def get_context() -> dict[str, Any]:
    """Get the non-empty context variables as a dictionary."""
    context = {
        "request_id": get_request_id(),
        "user_id": get_user_id(),
        "trace_id": get_trace_id(),
    }
    return {key: value for key, value in context.items() if value}


def clear_context() -> None:
    """Reset all context variables at the end of a request."""
    request_id_var.set("")
    user_id_var.set(None)
    trace_id_var.set(None)
