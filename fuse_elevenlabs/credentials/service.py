"""
Credential service functions for resolving the ElevenLabs API key.

Storage and encryption belong to the host; nodes receive the decrypted
credential data and only need to pick the key out of it.
"""
import logging
from typing import Any, Dict, Optional

from fuse_elevenlabs.config import settings
from fuse_elevenlabs.workflows.engine.errors import CredentialError
from fuse_elevenlabs.workflows.engine.nodes.schema import (
    CredentialDefinition,
    InputType,
    NodeInput,
    TypeOptions,
)

logger = logging.getLogger(__name__)

CREDENTIAL_TYPE = "elevenlabs_api"

ELEVENLABS_CREDENTIAL = CredentialDefinition(
    name=CREDENTIAL_TYPE,
    displayName="ElevenLabs API",
    documentationUrl="https://elevenlabs.io/docs/api-reference/authentication",
    properties=[
        NodeInput(
            name="api_key",
            type=InputType.STRING,
            label="API Key",
            required=True,
            default="",
            typeOptions=TypeOptions(password=True),
            description="Your ElevenLabs API key, available at https://elevenlabs.io/account",
        )
    ],
)

# Keys hosts have been seen to use for the same secret
API_KEY_FIELDS = ("api_key", "apiKey", "xi_api_key", "token", "value")


def resolve_api_key(credentials: Optional[Dict[str, Any]], use_env_fallback: bool = True) -> str:
    """
    Pick the API key out of a credential data dictionary.

    Falls back to the ELEVENLABS_API_KEY setting when no credential was
    attached to the node. Raises CredentialError when no non-empty key
    can be found.
    """
    data = credentials or {}
    # Hosts sometimes hand over the full credential record
    if isinstance(data.get("data"), dict):
        data = data["data"]

    for field in API_KEY_FIELDS:
        value = data.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()

    if use_env_fallback and settings.ELEVENLABS_API_KEY:
        logger.debug("No node credential given, using ELEVENLABS_API_KEY from settings")
        return settings.ELEVENLABS_API_KEY

    raise CredentialError(
        "ElevenLabs credentials were not provided: configure an API key for the node"
    )
