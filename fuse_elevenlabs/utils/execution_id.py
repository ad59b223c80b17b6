"""
Execution ID context for log correlation.

A node execution sets the id once; every log line emitted while the
node processes its items is prefixed with it (see CompactFilter).
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

execution_id_var: ContextVar[Optional[str]] = ContextVar("execution_id", default=None)


def get_execution_id() -> Optional[str]:
    """Get the current execution ID from context."""
    return execution_id_var.get()


def generate_execution_id() -> str:
    """Generate a new unique execution ID."""
    return str(uuid.uuid4())


@contextmanager
def execution_scope(execution_id: Optional[str] = None) -> Iterator[str]:
    """Bind an execution id to the current context for the duration of the block."""
    execution_id = execution_id or generate_execution_id()
    token = execution_id_var.set(execution_id)
    try:
        yield execution_id
    finally:
        execution_id_var.reset(token)
