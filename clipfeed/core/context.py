"""Request context tracking using contextvars.

Each request gets a request id and, once the bearer token is verified, the
acting account id. Both are merged into every log event by the structlog
processors in ``clipfeed.core.logging``.
"""

from contextvars import ContextVar
from typing import Any
from uuid import UUID, uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
account_id_var: ContextVar[str | None] = ContextVar("account_id", default=None)
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context.

    Args:
        request_id: Optional request ID. If not provided, generates a new one.

    Returns:
        The request ID that was set.
    """
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_account_id() -> str | None:
    """Get the acting account ID."""
    return account_id_var.get()


def set_account_id(account_id: str | UUID | None) -> None:
    """Set the acting account ID for the current context."""
    account_id_var.set(str(account_id) if account_id is not None else None)


def get_trace_id() -> str | None:
    """Get the current trace ID."""
    return trace_id_var.get()


def set_trace_id(trace_id: str | None) -> None:
    """Set the trace ID taken from distributed tracing headers."""
    trace_id_var.set(trace_id)


def get_context() -> dict[str, Any]:
    """Return the non-empty context variables as a dictionary."""
    context: dict[str, Any] = {}

    request_id = get_request_id()
    if request_id:
        context["request_id"] = request_id

    account_id = get_account_id()
    if account_id:
        context["account_id"] = account_id

    trace_id = get_trace_id()
    if trace_id:
        context["trace_id"] = trace_id

    return context


def clear_context() -> None:
    """Reset all context variables at the end of a request."""
    request_id_var.set("")
    account_id_var.set(None)
    trace_id_var.set(None)


class RequestContext:
    """Context manager binding request scope outside of HTTP handling.

    Usage:
        with RequestContext(account_id=moderator_id):
            await moderation_service.ban_account(...)
    """

    def __init__(
        self,
        request_id: str | None = None,
        account_id: str | UUID | None = None,
        trace_id: str | None = None,
    ) -> None:
        self.request_id = request_id
        self.account_id = account_id
        self.trace_id = trace_id
        self._tokens: list[tuple[ContextVar[Any], Any]] = []

    def __enter__(self) -> "RequestContext":
        self._tokens.append(
            (request_id_var, request_id_var.set(self.request_id or generate_request_id()))
        )
        if self.account_id is not None:
            self._tokens.append(
                (account_id_var, account_id_var.set(str(self.account_id)))
            )
        if self.trace_id is not None:
            self._tokens.append((trace_id_var, trace_id_var.set(self.trace_id)))
        return self

    def __exit__(self, *_: object) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()
