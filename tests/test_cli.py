"""
Tests for the fuse-elevenlabs command line.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from conftest import API_KEY, AUDIO_BYTES, RecordingTransport, audio_response
from fuse_elevenlabs.cli import main
from fuse_elevenlabs.integrations.elevenlabs import execute as execute_module
from fuse_elevenlabs.integrations.elevenlabs.client import create_http_client


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_api(monkeypatch):
    """Route the node's HTTP client through a recording transport."""
    def install(responder):
        transport = RecordingTransport(responder)
        monkeypatch.setattr(execute_module, "create_http_client", lambda transport_=None: create_http_client(transport))
        return transport

    return install


def test_nodes_lists_every_node(runner):
    result = runner.invoke(main, ["--log-level", "ERROR", "nodes"])

    assert result.exit_code == 0
    assert "elevenlabs.text_to_speech" in result.stdout
    assert "elevenlabs.agents" in result.stdout


def test_schema_prints_manifest_json(runner):
    result = runner.invoke(main, ["--log-level", "ERROR", "schema", "elevenlabs.speech_to_text"])

    assert result.exit_code == 0
    manifest = json.loads(result.stdout)
    assert manifest["id"] == "elevenlabs.speech_to_text"
    assert manifest["credentials"] == ["elevenlabs_api"]


def test_schema_unknown_node(runner):
    result = runner.invoke(main, ["--log-level", "ERROR", "schema", "elevenlabs.nope"])

    assert result.exit_code == 1
    assert "not found" in result.stdout


def test_run_writes_audio_and_prints_items(runner, mock_api, tmp_path):
    transport = mock_api(audio_response())
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"voice_id": "v1", "text": "{{ json.text }}"}))
    items = tmp_path / "items.json"
    items.write_text(json.dumps([{"json": {"text": "Good morning"}}]))
    out_dir = tmp_path / "out"

    result = runner.invoke(
        main,
        [
            "--log-level", "ERROR",
            "run", "elevenlabs.text_to_speech",
            "--config", str(config),
            "--items", str(items),
            "--api-key", API_KEY,
            "--output-dir", str(out_dir),
        ],
    )

    assert result.exit_code == 0, result.output
    [entry] = json.loads(result.stdout)
    assert entry["json"]["success"] is True
    assert entry["pairedItem"] == {"item": 0}
    written = out_dir / "0_Good_morning.mp3"
    assert entry["binary"]["data"]["path"] == str(written)
    assert written.read_bytes() == AUDIO_BYTES
    assert transport.last.headers["xi-api-key"] == API_KEY


def test_run_reads_binary_inputs_from_disk(runner, mock_api, tmp_path):
    transport = mock_api(lambda request: httpx.Response(200, json={"text": "transcribed"}))
    (tmp_path / "clip.mp3").write_bytes(b"clip-bytes")
    config = tmp_path / "config.json"
    config.write_text("{}")
    items = tmp_path / "items.json"
    items.write_text(json.dumps([{"json": {}, "binary": {"data": {"path": "clip.mp3"}}}]))

    result = runner.invoke(
        main,
        ["--log-level", "ERROR", "run", "elevenlabs.speech_to_text",
         "--config", str(config), "--items", str(items), "--api-key", API_KEY],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)[0]["json"] == {"text": "transcribed"}
    assert b'filename="clip.mp3"' in transport.last.content
    assert b"clip-bytes" in transport.last.content


def test_run_without_credentials_fails(runner, mock_api, tmp_path, monkeypatch):
    monkeypatch.delenv("ELEVENLABS_API_KEY", raising=False)
    transport = mock_api(audio_response())
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"voice_id": "v1", "text": "hi"}))

    result = runner.invoke(
        main, ["--log-level", "ERROR", "run", "elevenlabs.text_to_speech", "--config", str(config)]
    )

    assert result.exit_code == 1
    assert "credential_missing" in result.stdout
    assert transport.requests == []


def test_version(runner):
    result = runner.invoke(main, ["version"])

    assert result.exit_code == 0
    assert "fuse-elevenlabs" in result.stdout
