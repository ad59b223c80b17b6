from typing import Any, Optional


class EngineError(Exception):
    """Base class for all engine errors."""
    pass


class UnknownNodeTypeError(EngineError):
    """Raised when a node type is not registered."""
    pass


class UnknownOperationError(EngineError):
    """Raised when a resource/operation pair has no entry in the operation table."""
    pass


class CredentialError(EngineError):
    """
    Raised when the API credential is missing or empty.

    This is a configuration error: it is never converted into a per-item
    error, even when the node is set to continue on failure.
    """
    pass


class NodeOperationError(EngineError):
    """Raised when a node cannot build its request from the given parameters."""

    def __init__(self, message: str, item_index: Optional[int] = None):
        super().__init__(message)
        self.item_index = item_index


class NodeApiError(EngineError):
    """Raised when the external API call fails (non-2xx, timeout, connection)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
