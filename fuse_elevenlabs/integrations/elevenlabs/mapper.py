"""
Maps ElevenLabs responses onto output items, preserving item pairing.
"""
from typing import Any, Dict, Optional

from fuse_elevenlabs.workflows.engine.definitions import BinaryData, PairedItem, WorkflowItem


def _is_empty(response: Any) -> bool:
    if response is None:
        return True
    if isinstance(response, (str, bytes)):
        return not response.strip()
    if isinstance(response, (dict, list)):
        return len(response) == 0
    return False


def map_json(response: Any, index: int, empty_message: Optional[str] = None) -> WorkflowItem:
    """
    Pass the parsed response body through as the item's JSON.

    An empty body on an operation that declares `empty_message` (deletions)
    becomes `{"success": True, "message": empty_message}`. Bodies that are
    not objects are wrapped under "data".
    """
    if empty_message and _is_empty(response):
        payload: Dict[str, Any] = {"success": True, "message": empty_message}
    elif isinstance(response, dict):
        payload = response
    else:
        payload = {"data": response}

    return WorkflowItem(json=payload, pairedItem=PairedItem(item=index))


def map_binary(
    raw: bytes,
    file_name: str,
    mime_type: str,
    output_field: str,
    metadata: Dict[str, Any],
    index: int,
) -> WorkflowItem:
    """Attach raw audio under `output_field` with a JSON summary of the parameters used."""
    extension = file_name.rsplit(".", 1)[-1] if "." in file_name else None
    binary = BinaryData(
        data=raw,
        file_name=file_name,
        mime_type=mime_type,
        file_extension=extension,
    )
    return WorkflowItem(
        json=metadata,
        binary={output_field: binary},
        pairedItem=PairedItem(item=index),
    )
