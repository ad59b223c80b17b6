"""
Credentials Module

Resolves the ElevenLabs API key handed to a node by the host.
"""

from .service import CREDENTIAL_TYPE, ELEVENLABS_CREDENTIAL, resolve_api_key

__all__ = ['CREDENTIAL_TYPE', 'ELEVENLABS_CREDENTIAL', 'resolve_api_key']
