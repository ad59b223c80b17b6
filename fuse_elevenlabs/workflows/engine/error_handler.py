"""
Per-item Error Handling for Node Execution

Implements:
- Error classification (for logs and CLI output)
- Error policy enforcement (stop/continue)
- Error item construction for the continue policy

No retries: every item attempts its API call exactly once.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass

from fuse_elevenlabs.workflows.engine.definitions import PairedItem, WorkflowItem
from fuse_elevenlabs.workflows.engine.errors import (
    CredentialError,
    NodeApiError,
    NodeOperationError,
)

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Classification of errors for reporting."""
    CREDENTIAL_MISSING = "credential_missing"
    CREDENTIAL_INVALID = "credential_invalid"
    RATE_LIMITED = "rate_limited"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    VALIDATION_ERROR = "validation_error"
    RESOURCE_NOT_FOUND = "resource_not_found"
    QUOTA_EXCEEDED = "quota_exceeded"
    EXTERNAL_SERVICE_ERROR = "external_service_error"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Structured error information for logging."""
    category: ErrorCategory
    message: str
    original_error: str
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "message": self.message,
            "original_error": self.original_error,
            "suggestion": self.suggestion
        }


class ErrorClassifier:
    """Classifies errors into categories with a friendly message."""

    # HTTP status codes reported by NodeApiError
    STATUS_CATEGORIES = {
        401: ErrorCategory.CREDENTIAL_INVALID,
        403: ErrorCategory.CREDENTIAL_INVALID,
        404: ErrorCategory.RESOURCE_NOT_FOUND,
        422: ErrorCategory.VALIDATION_ERROR,
        429: ErrorCategory.RATE_LIMITED,
    }

    # Patterns for errors without a status code
    PATTERNS = {
        ErrorCategory.QUOTA_EXCEEDED: [
            "quota_exceeded", "quota exceeded", "character limit"
        ],
        ErrorCategory.TIMEOUT: [
            "timeout", "timed out"
        ],
        ErrorCategory.NETWORK_ERROR: [
            "connection refused", "connection reset", "network unreachable",
            "connect error", "dns", "ssl", "certificate"
        ],
        ErrorCategory.VALIDATION_ERROR: [
            "is required", "no binary data", "at least one", "invalid"
        ],
    }

    SUGGESTIONS = {
        ErrorCategory.CREDENTIAL_MISSING: "Configure the ElevenLabs API credential in the node settings.",
        ErrorCategory.CREDENTIAL_INVALID: "Check that the ElevenLabs API key is valid and has access to this endpoint.",
        ErrorCategory.RATE_LIMITED: "Wait a moment and try again, or reduce request frequency.",
        ErrorCategory.NETWORK_ERROR: "Check your network connection and try again.",
        ErrorCategory.TIMEOUT: "The API took too long. Try shorter audio or raise HTTP_TIMEOUT_SECONDS.",
        ErrorCategory.VALIDATION_ERROR: "Check the node parameters and the input item's fields.",
        ErrorCategory.RESOURCE_NOT_FOUND: "Verify the voice, agent, session or knowledge base ID.",
        ErrorCategory.QUOTA_EXCEEDED: "Your ElevenLabs plan quota is exhausted.",
        ErrorCategory.EXTERNAL_SERVICE_ERROR: "ElevenLabs is having issues. Try again later.",
        ErrorCategory.UNKNOWN: "An unexpected error occurred. Check the logs for details."
    }

    @classmethod
    def classify(cls, error: Exception) -> ErrorContext:
        """Classify an error and return structured context."""
        original_error = str(error)
        category = cls._category_for(error)

        return ErrorContext(
            category=category,
            message=cls._get_friendly_message(category, original_error),
            original_error=original_error,
            suggestion=cls.SUGGESTIONS.get(category)
        )

    @classmethod
    def _category_for(cls, error: Exception) -> ErrorCategory:
        if isinstance(error, CredentialError):
            return ErrorCategory.CREDENTIAL_MISSING

        error_str = str(error).lower()

        if isinstance(error, NodeApiError) and error.status_code is not None:
            if "quota_exceeded" in error_str:
                return ErrorCategory.QUOTA_EXCEEDED
            if error.status_code in cls.STATUS_CATEGORIES:
                return cls.STATUS_CATEGORIES[error.status_code]
            if error.status_code >= 500:
                return ErrorCategory.EXTERNAL_SERVICE_ERROR

        for category, patterns in cls.PATTERNS.items():
            if any(pattern in error_str for pattern in patterns):
                return category

        if isinstance(error, NodeOperationError):
            return ErrorCategory.VALIDATION_ERROR

        return ErrorCategory.UNKNOWN

    @classmethod
    def _get_friendly_message(cls, category: ErrorCategory, original: str) -> str:
        """Generate a user-friendly error message."""
        messages = {
            ErrorCategory.CREDENTIAL_MISSING: "Credential not configured",
            ErrorCategory.CREDENTIAL_INVALID: "Credential is invalid or lacks permission",
            ErrorCategory.RATE_LIMITED: "Rate limit exceeded",
            ErrorCategory.NETWORK_ERROR: "Network connection failed",
            ErrorCategory.TIMEOUT: "Request timed out",
            ErrorCategory.VALIDATION_ERROR: "Invalid parameters",
            ErrorCategory.RESOURCE_NOT_FOUND: "Resource not found",
            ErrorCategory.QUOTA_EXCEEDED: "Quota exceeded",
            ErrorCategory.EXTERNAL_SERVICE_ERROR: "External service error",
            ErrorCategory.UNKNOWN: "Unexpected error"
        }
        return messages.get(category, "Error occurred")


class ErrorPolicyHandler:
    """Decides what happens to an item whose handler raised."""

    @staticmethod
    def should_continue(error: Exception, continue_on_fail: bool) -> bool:
        """
        True when the failure is recorded as an error item and processing
        moves on to the next item.

        Credential errors are configuration errors and always stop.
        """
        if isinstance(error, CredentialError):
            return False
        return continue_on_fail

    @staticmethod
    def get_error_item(error: Exception, index: int) -> WorkflowItem:
        """Build the soft-error output item for the continue policy."""
        message = str(error) or error.__class__.__name__
        return WorkflowItem(
            json={"error": message},
            pairedItem=PairedItem(item=index),
        )
