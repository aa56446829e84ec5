# Core infrastructure
# Database access lives in clipfeed.core.database; it imports every domain's
# table definitions and is not re-exported here.
from clipfeed.core.context import (
    RequestContext,
    clear_context,
    get_account_id,
    get_context,
    get_request_id,
    get_trace_id,
    set_account_id,
    set_request_id,
    set_trace_id,
)
from clipfeed.core.logging import configure_structlog, get_logger


__all__ = [
    "RequestContext",
    "clear_context",
    "configure_structlog",
    "get_account_id",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_trace_id",
    "set_account_id",
    "set_request_id",
    "set_trace_id",
]
