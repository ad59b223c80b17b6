"""
Shared fixtures: a recording httpx MockTransport stands in for the
ElevenLabs API so no test touches the network.
"""

import json
import re
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from fuse_elevenlabs.config import settings
from fuse_elevenlabs.workflows.engine.context import NodeContext
from fuse_elevenlabs.workflows.engine.definitions import BinaryData, WorkflowItem
from fuse_elevenlabs.workflows.engine.nodes.registry import NodeRegistry

API_KEY = "sk_test_0123456789abcdef"
AUDIO_BYTES = b"ID3\x03\x00fake-mp3-bytes"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it receives."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []
        self.responder = responder
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def json_body(self, index: int = -1):
        return json.loads(self.requests[index].content)


def json_response(payload=None, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status_code, json=payload if payload is not None else {})


def audio_response(content: bytes = AUDIO_BYTES) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(200, content=content, headers={"content-type": "audio/mpeg"})


def parse_multipart(request: httpx.Request) -> Dict[str, Tuple[Optional[str], bytes]]:
    """Form parts of a multipart request as {name: (filename, content)}."""
    boundary = request.headers["content-type"].split("boundary=")[1].encode()
    parts = {}
    for chunk in request.content.split(b"--" + boundary):
        if b"\r\n\r\n" not in chunk:
            continue
        head, _, body = chunk.partition(b"\r\n\r\n")
        name = re.search(rb'name="([^"]+)"', head)
        if not name:
            continue
        filename = re.search(rb'filename="([^"]*)"', head)
        if body.endswith(b"\r\n"):
            body = body[:-2]
        parts[name.group(1).decode()] = (filename.group(1).decode() if filename else None, body)
    return parts


def audio_item(**json_data) -> WorkflowItem:
    return WorkflowItem(
        json=json_data,
        binary={"data": BinaryData(data=AUDIO_BYTES, file_name="voice.mp3", mime_type="audio/mpeg")},
    )


def make_context(
    node_id: str,
    config: Dict,
    items: List[WorkflowItem],
    credentials: Optional[Dict] = None,
    continue_on_fail: bool = False,
) -> NodeContext:
    return NodeContext(
        execution_id="0f1e2d3c-4b5a-6978-8796-a5b4c3d2e1f0",
        workflow_id="wf-test",
        node_id=node_id,
        config=config,
        input_data=items,
        credentials={"api_key": API_KEY} if credentials is None else credentials,
        continue_on_fail=continue_on_fail,
        manifest=NodeRegistry.get_node(node_id).manifest,
    )


@pytest.fixture(autouse=True)
def no_env_api_key(monkeypatch):
    """Tests never pick up a real key from the environment or .env."""
    monkeypatch.setattr(settings, "ELEVENLABS_API_KEY", None)


@pytest.fixture
def credentials():
    return {"api_key": API_KEY}
