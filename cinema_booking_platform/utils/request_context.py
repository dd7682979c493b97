"""Request-scoped context shared by middleware and log filters."""

import contextvars

# Context variable for request ID
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar('request_id', default='no-request-id')
