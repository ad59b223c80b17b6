"""
ElevenLabs integration

Operation table, request/response plumbing and node definitions for the
ElevenLabs REST API (https://api.elevenlabs.io/v1).
"""

from .client import build_request, create_http_client, send_request
from .operations import OPERATIONS, RESOURCES, get_operation

__all__ = [
    "OPERATIONS",
    "RESOURCES",
    "build_request",
    "create_http_client",
    "get_operation",
    "send_request",
]
