"""
ElevenLabs request construction and transport.

build_request() is pure: it turns an (endpoint, method, key, payload)
tuple into a RequestDescriptor. send_request() performs the single HTTP
round trip for that descriptor.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import httpx

from fuse_elevenlabs.config import settings
from fuse_elevenlabs.workflows.engine.constants import Headers
from fuse_elevenlabs.workflows.engine.definitions import BinaryData
from fuse_elevenlabs.workflows.engine.errors import CredentialError, NodeApiError

logger = logging.getLogger(__name__)

FilePart = Tuple[str, bytes, str]


@dataclass(frozen=True)
class RequestDescriptor:
    endpoint: str
    method: str
    headers: Dict[str, str]
    json_body: Optional[Dict[str, Any]] = None
    form_fields: Optional[Dict[str, str]] = None
    files: Optional[Dict[str, FilePart]] = None
    binary_response: bool = False

    @property
    def is_multipart(self) -> bool:
        return self.form_fields is not None or self.files is not None


@dataclass
class ApiResponse:
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    data: Any = None
    content: Optional[bytes] = None


def encode_form_value(value: Any) -> str:
    """Multipart fields are strings: objects go as JSON, booleans lowercase."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def build_request(
    endpoint: str,
    method: str,
    api_key: Optional[str],
    body: Optional[Dict[str, Any]] = None,
    form_fields: Optional[Mapping[str, Union[BinaryData, Any]]] = None,
    binary_response: bool = False,
) -> RequestDescriptor:
    """
    Build the request descriptor for one API call.

    Args:
        endpoint: Path relative to the API base, e.g. "text-to-speech/{voice_id}" already formatted
        method: HTTP method
        api_key: ElevenLabs API key, required
        body: JSON body (mutually exclusive with form_fields)
        form_fields: Multipart fields; BinaryData values become file parts
        binary_response: Receive the raw body instead of decoding JSON

    Raises:
        CredentialError: If the API key is missing or empty
        ValueError: If both body and form_fields are given
    """
    if not api_key or not str(api_key).strip():
        raise CredentialError("ElevenLabs credentials were not provided")

    if body is not None and form_fields is not None:
        raise ValueError("A request carries either a JSON body or form data, not both")

    headers = {
        Headers.API_KEY: str(api_key).strip(),
        Headers.ACCEPT: Headers.ACCEPT_ANY if binary_response else Headers.ACCEPT_JSON,
    }

    fields: Optional[Dict[str, str]] = None
    files: Optional[Dict[str, FilePart]] = None
    if form_fields is not None:
        fields = {}
        for name, value in form_fields.items():
            if value is None:
                continue
            if isinstance(value, BinaryData):
                files = files or {}
                files[name] = (value.file_name, value.data, value.mime_type)
            else:
                fields[name] = encode_form_value(value)

    return RequestDescriptor(
        endpoint=endpoint.lstrip("/"),
        method=method.upper(),
        headers=headers,
        json_body=body,
        form_fields=fields,
        files=files,
        binary_response=binary_response,
    )


def create_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """AsyncClient bound to the configured API base URL and timeout."""
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )


def _error_detail(response: httpx.Response) -> str:
    """Extract the API's error message: {"detail": {"status", "message"}} or {"detail": "..."}."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase

    detail = payload.get("detail", payload) if isinstance(payload, dict) else payload
    if isinstance(detail, dict):
        status = detail.get("status")
        message = detail.get("message") or json.dumps(detail)
        return f"{status}: {message}" if status else message
    if isinstance(detail, list):
        # FastAPI-style validation errors
        return "; ".join(
            str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in detail
        )
    return str(detail)


async def send_request(client: httpx.AsyncClient, descriptor: RequestDescriptor) -> ApiResponse:
    """
    Perform the HTTP call for a descriptor. Exactly one attempt is made.

    Raises:
        NodeApiError: On non-2xx status, timeout or transport failure
    """
    kwargs: Dict[str, Any] = {"headers": descriptor.headers}
    if descriptor.json_body is not None:
        kwargs["json"] = descriptor.json_body
    if descriptor.is_multipart:
        # (None, value) parts keep the body multipart even without a file
        parts: Dict[str, Any] = {
            name: (None, value) for name, value in (descriptor.form_fields or {}).items()
        }
        parts.update(descriptor.files or {})
        kwargs["files"] = parts

    logger.debug(f"ElevenLabs {descriptor.method} {descriptor.endpoint}")

    try:
        response = await client.request(descriptor.method, descriptor.endpoint, **kwargs)
    except httpx.TimeoutException:
        raise NodeApiError(
            f"ElevenLabs request {descriptor.method} {descriptor.endpoint} timed out"
        )
    except httpx.HTTPError as e:
        raise NodeApiError(
            f"ElevenLabs request {descriptor.method} {descriptor.endpoint} failed: {e}"
        )

    if response.is_error:
        detail = _error_detail(response)
        raise NodeApiError(
            f"ElevenLabs API error {response.status_code}: {detail}",
            status_code=response.status_code,
            response_body=response.text,
        )

    result = ApiResponse(status_code=response.status_code, headers=dict(response.headers))
    if descriptor.binary_response:
        result.content = response.content
        return result

    if not response.content or not response.content.strip():
        result.data = None
        return result

    try:
        result.data = response.json()
    except ValueError:
        result.data = response.text
    return result
