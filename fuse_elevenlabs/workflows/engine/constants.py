"""
Constants for Workflow Engine

Centralizes all magic strings and numbers used by the node adapter.
"""

from enum import Enum


class PayloadKind(str, Enum):
    """How an operation sends its parameters to the API."""
    NONE = "none"
    JSON = "json"
    MULTIPART = "multipart"


class AudioSource(str, Enum):
    """Where an audio-consuming operation reads its input from."""
    BINARY = "binary"
    URL = "url"


class ExecutionConfig:
    """Execution-related configuration constants."""
    # Default binary field used for audio in and audio out
    DEFAULT_BINARY_PROPERTY = "data"

    # Fallbacks when an uploaded binary has no metadata
    DEFAULT_UPLOAD_FILENAME = "audio.mp3"
    DEFAULT_UPLOAD_MIME_TYPE = "audio/mpeg"

    # Length of the text prefix used to name synthesized audio files
    TTS_FILENAME_MAX_CHARS = 50


class Headers:
    API_KEY = "xi-api-key"
    ACCEPT = "Accept"
    ACCEPT_JSON = "application/json"
    ACCEPT_ANY = "*/*"
