"""
Tests for the operation table: endpoints, payload mapping and transforms.
"""

import pytest

from fuse_elevenlabs.integrations.elevenlabs.operations import (
    OPERATIONS,
    RESOURCES,
    build_effects,
    get_operation,
    operations_for,
    split_csv,
)
from fuse_elevenlabs.workflows.engine.constants import PayloadKind
from fuse_elevenlabs.workflows.engine.errors import NodeOperationError, UnknownOperationError


def test_every_resource_has_operations():
    for resource in RESOURCES:
        assert operations_for(resource), resource


def test_operation_keys_are_unique():
    keys = [spec.key for spec in OPERATIONS]
    assert len(keys) == len(set(keys))


def test_unknown_operation():
    with pytest.raises(UnknownOperationError, match="available: list, get"):
        get_operation("agents", "fly")


def test_endpoint_placeholders_are_quoted():
    spec = get_operation("knowledge_base", "remove_document")

    endpoint = spec.format_endpoint({"knowledge_base_id": "kb 1", "document_id": "doc/2"})

    assert endpoint == "conversational/knowledge-bases/kb%201/documents/doc%2F2"


def test_missing_path_parameter():
    spec = get_operation("agents", "get")

    with pytest.raises(NodeOperationError, match="agent_id"):
        spec.format_endpoint({"agent_id": "  "})


def test_tts_payload_nests_voice_settings():
    spec = get_operation("text_to_speech", "convert")

    payload = spec.build_payload({
        "voice_id": "v1",
        "text": "Hello",
        "model_id": "eleven_multilingual_v2",
        "advanced_options": {"stability": 0.3, "style": 0.1, "output_format": "flac"},
    })

    assert payload == {
        "text": "Hello",
        "model_id": "eleven_multilingual_v2",
        "voice_settings": {"stability": 0.3, "style": 0.1},
        "output_format": "flac",
    }
    assert spec.payload == PayloadKind.JSON
    assert spec.binary_output is not None


def test_stt_omits_empty_language_code():
    spec = get_operation("speech_to_text", "transcribe")

    payload = spec.build_payload({
        "model_id": "scribe_v1",
        "advanced_options": {"language_code": "", "diarize": False},
    })

    assert payload == {"model_id": "scribe_v1", "diarize": False}


@pytest.mark.parametrize(
    "options,expected",
    [
        ({"source_language": "auto", "target_language": "same"}, {}),
        ({"source_language": "en", "target_language": "de"}, {"source_language": "en", "target_language": "de"}),
    ],
)
def test_sts_language_sentinels(options, expected):
    spec = get_operation("speech_to_speech", "convert")

    payload = spec.build_payload({"voice_id": "v1", "advanced_options": options})

    assert payload == {"voice_id": "v1", **expected}


def test_voice_changer_groups_voice_settings():
    spec = get_operation("voice_changer", "change_voice")

    payload = spec.build_payload({
        "voice_id": "v1",
        "advanced_options": {"similarity_boost": 0.9, "stability": 0.4, "audio_type": "singing"},
    })

    assert payload == {
        "voice_id": "v1",
        "voice_settings": {"similarity_boost": 0.9, "stability": 0.4},
        "audio_type": "singing",
    }


def test_add_document_keys_url_by_document_type():
    spec = get_operation("knowledge_base", "add_document")

    payload = spec.build_payload({
        "knowledge_base_id": "kb1",
        "document_url": "https://example.com/faq.pdf",
        "document_type": "file_url",
        "advanced_options": {"document_name": "FAQ", "namespace": ""},
    })

    assert payload == {"file_url": "https://example.com/faq.pdf", "name": "FAQ"}


def test_agent_knowledge_base_ids_are_split():
    spec = get_operation("agents", "create")

    payload = spec.build_payload({
        "agent_name": "Support",
        "voice_id": "v1",
        "system_instruction": "Be nice",
        "advanced_options": {"knowledge_base_ids": " kb1, kb2 ,,kb3 "},
    })

    assert payload["knowledge_base_ids"] == ["kb1", "kb2", "kb3"]
    assert payload["name"] == "Support"


def test_kb_create_skips_empty_description():
    spec = get_operation("knowledge_base", "create")

    assert spec.build_payload({"knowledge_base_name": "Docs", "description": ""}) == {"name": "Docs"}


def test_split_csv():
    assert split_csv("a,b") == ["a", "b"]
    assert split_csv(["a ", ""]) == ["a"]


def test_build_effects():
    effects = build_effects([
        {"effect_type": "echo", "intensity": 0.5, "start_time": 0, "end_time": 0},
        {"effect_type": "custom", "custom_effect_name": "robot", "intensity": 0.8, "start_time": 1.5, "end_time": 3},
    ])

    assert effects == [
        {"effect": "echo", "intensity": 0.5},
        {"effect": "robot", "intensity": 0.8, "start_time": 1.5, "end_time": 3},
    ]


def test_build_effects_requires_one_effect():
    with pytest.raises(NodeOperationError, match="At least one effect"):
        build_effects([])


def test_custom_effect_needs_a_name():
    with pytest.raises(NodeOperationError, match="name"):
        build_effects([{"effect_type": "custom", "custom_effect_name": ""}])


def test_deletions_declare_confirmation_messages():
    for key in ("knowledge_base.delete", "knowledge_base.remove_document", "agents.delete"):
        resource, operation = key.split(".")
        assert get_operation(resource, operation).empty_message
