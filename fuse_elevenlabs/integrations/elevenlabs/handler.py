"""
Generic ElevenLabs operation handler.

Runs one OperationSpec for one item: parameters → request → API → output item.
"""
import logging
import re
import time
from typing import Any, Dict

import httpx

from fuse_elevenlabs.integrations.elevenlabs.client import build_request, send_request
from fuse_elevenlabs.integrations.elevenlabs.formats import resolve_audio_format
from fuse_elevenlabs.integrations.elevenlabs.mapper import map_binary, map_json
from fuse_elevenlabs.integrations.elevenlabs.operations import OperationSpec, get_path
from fuse_elevenlabs.workflows.engine.constants import AudioSource, ExecutionConfig, PayloadKind
from fuse_elevenlabs.workflows.engine.context import NodeContext
from fuse_elevenlabs.workflows.engine.definitions import BinaryData, WorkflowItem
from fuse_elevenlabs.workflows.engine.errors import NodeOperationError

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def _attach_audio(
    spec: OperationSpec,
    context: NodeContext,
    params: Dict[str, Any],
    index: int,
    form: Dict[str, Any],
) -> None:
    """Add the input audio to the form, from the item's binary or from a URL."""
    binary_input = spec.binary_input
    source = params.get("audio_source") or AudioSource.BINARY.value

    if source == AudioSource.URL.value:
        url = params.get("audio_url")
        if not url:
            raise NodeOperationError("Parameter 'audio_url' is required", item_index=index)
        form[binary_input.url_field] = url
        return

    property_name = params.get("binary_property") or ExecutionConfig.DEFAULT_BINARY_PROPERTY
    binary = context.get_binary_data(index, property_name)
    form[binary_input.file_field] = BinaryData(
        data=binary.data,
        file_name=binary.file_name or ExecutionConfig.DEFAULT_UPLOAD_FILENAME,
        mime_type=binary.mime_type or ExecutionConfig.DEFAULT_UPLOAD_MIME_TYPE,
    )


def output_file_stem(spec: OperationSpec, params: Dict[str, Any]) -> str:
    output = spec.binary_output
    if output.filename_from:
        text = str(params.get(output.filename_from) or "")
        stem = _UNSAFE_FILENAME_CHARS.sub("_", text[:ExecutionConfig.TTS_FILENAME_MAX_CHARS])
        return stem or output.filename_prefix
    return f"{output.filename_prefix}_{int(time.time() * 1000)}"


def _output_metadata(spec: OperationSpec, params: Dict[str, Any]) -> Dict[str, Any]:
    output = spec.binary_output
    metadata: Dict[str, Any] = {"success": True}
    for key, path in output.metadata:
        metadata[key] = get_path(params, path)
    if output.include_options:
        metadata.update(params.get(output.include_options) or {})
    return metadata


async def run_operation(
    spec: OperationSpec,
    context: NodeContext,
    params: Dict[str, Any],
    index: int,
    client: httpx.AsyncClient,
    api_key: str,
) -> WorkflowItem:
    """
    Execute `spec` for the item at `index` with its already-derived parameters.

    Raises:
        NodeOperationError: Missing parameter or input binary
        NodeApiError: The API call failed
    """
    endpoint = spec.format_endpoint(params)
    payload = spec.build_payload(params)

    body = None
    form = None
    if spec.payload == PayloadKind.JSON:
        body = payload
    elif spec.payload == PayloadKind.MULTIPART:
        form = payload
        if spec.binary_input is not None:
            _attach_audio(spec, context, params, index, form)

    descriptor = build_request(
        endpoint,
        spec.method,
        api_key,
        body=body,
        form_fields=form,
        binary_response=spec.binary_output is not None,
    )

    logger.info(f"Item {index}: {spec.label}")
    response = await send_request(client, descriptor)

    if spec.binary_output is None:
        return map_json(response.data, index, spec.empty_message)

    audio_format = resolve_audio_format(get_path(params, spec.binary_output.format_param))
    file_name = f"{output_file_stem(spec, params)}.{audio_format.extension}"
    output_field = params.get("output_binary_property") or ExecutionConfig.DEFAULT_BINARY_PROPERTY

    return map_binary(
        response.content or b"",
        file_name,
        audio_format.mime_type,
        output_field,
        _output_metadata(spec, params),
        index,
    )
