"""
Tests for per-item parameter derivation: expressions, defaults, visibility
and type coercion.
"""

import pytest

from conftest import make_context
from fuse_elevenlabs.credentials import resolve_api_key
from fuse_elevenlabs.workflows.engine.context import coerce_value
from fuse_elevenlabs.workflows.engine.definitions import BinaryData, WorkflowItem
from fuse_elevenlabs.workflows.engine.errors import CredentialError, NodeOperationError
from fuse_elevenlabs.workflows.engine.expressions import ExpressionResolver
from fuse_elevenlabs.workflows.engine.nodes.schema import InputType, NodeInput


def test_defaults_are_filled_for_visible_inputs():
    context = make_context("elevenlabs.speech_to_text", {}, [WorkflowItem()])

    params = context.get_node_parameters(0)

    assert params["operation"] == "transcribe"
    assert params["audio_source"] == "binary"
    assert params["binary_property"] == "data"
    assert params["model_id"] == "scribe_v1"
    assert params["advanced_options"] == {}
    assert "audio_url" not in params


def test_hidden_inputs_are_dropped():
    config = {"audio_source": "url", "audio_url": "https://x/a.mp3", "binary_property": "ignored"}
    context = make_context("elevenlabs.speech_to_text", config, [WorkflowItem()])

    params = context.get_node_parameters(0)

    assert params["audio_url"] == "https://x/a.mp3"
    assert "binary_property" not in params


def test_required_input_error_names_the_field():
    context = make_context("elevenlabs.text_to_speech", {"text": "hi"}, [WorkflowItem()])

    with pytest.raises(NodeOperationError, match=r"Parameter 'Voice ID' \(voice_id\) is required") as exc_info:
        context.get_node_parameters(0)

    assert exc_info.value.item_index == 0


def test_expressions_resolve_against_each_item():
    items = [
        WorkflowItem(json={"voice": "v1", "n": 1}),
        WorkflowItem(json={"voice": "v2", "n": 2}),
    ]
    config = {"voice_id": "{{ json.voice }}", "text": "Line {{ index }} of {{ json.n }}"}
    context = make_context("elevenlabs.text_to_speech", config, items)

    assert context.get_node_parameters(0)["voice_id"] == "v1"
    assert context.get_node_parameters(1)["text"] == "Line 1 of 2"


def test_expressions_see_binary_metadata():
    item = WorkflowItem(binary={"data": BinaryData(data=b"x", file_name="talk.ogg", mime_type="audio/ogg")})
    context = make_context(
        "elevenlabs.text_to_speech",
        {"voice_id": "v", "text": "{{ binary.data.fileName }} ({{ binary.data.mimeType }})"},
        [item],
    )

    assert context.get_node_parameters(0)["text"] == "talk.ogg (audio/ogg)"


def test_combined_node_uses_the_visible_duplicate():
    config = {"resource": "agents", "operation": "send_message", "session_id": "s1", "message": "hi",
              "advanced_options": {"search_limit": "5"}}
    context = make_context("elevenlabs", config, [WorkflowItem()])

    params = context.get_node_parameters(0)

    # Only the message options of the agents resource apply
    assert params["advanced_options"] == {"search_limit": 5}
    assert params["operation"] == "send_message"
    assert "voice_id" not in params


def test_get_binary_data_missing():
    context = make_context("elevenlabs.speech_to_text", {}, [WorkflowItem(), WorkflowItem()])

    with pytest.raises(NodeOperationError, match="field 'audio' of item 1"):
        context.get_binary_data(1, "audio")


def test_undeclared_keys_pass_through():
    context = make_context("elevenlabs.agents", {"custom": "{{ index }}", "label": "#{{ index }}"}, [WorkflowItem()])

    params = context.get_node_parameters(0)

    assert params["custom"] == 0
    assert params["label"] == "#0"


def test_single_expression_keeps_native_value():
    item = WorkflowItem(json={"effects": [{"effect_type": "echo", "intensity": "0.4"}]})
    context = make_context("elevenlabs.sound_effects", {"effects": "{{ json.effects }}"}, [item])

    [effect] = context.get_node_parameters(0)["effects"]

    assert effect == {"effect_type": "echo", "intensity": 0.4, "start_time": 0, "end_time": 0}


@pytest.mark.parametrize(
    "input_type,raw,expected",
    [
        (InputType.NUMBER, "3", 3),
        (InputType.NUMBER, "0.25", 0.25),
        (InputType.NUMBER, "", None),
        (InputType.BOOLEAN, "true", True),
        (InputType.BOOLEAN, "False", False),
        (InputType.JSON, '{"a": 1}', {"a": 1}),
        (InputType.STRING, 42, "42"),
    ],
)
def test_coerce_value(input_type, raw, expected):
    node_input = NodeInput(name="field", type=input_type, label="Field")

    assert coerce_value(node_input, raw) == expected


@pytest.mark.parametrize(
    "input_type,raw",
    [(InputType.NUMBER, "many"), (InputType.BOOLEAN, "maybe"), (InputType.JSON, "{oops")],
)
def test_coerce_value_rejects_bad_input(input_type, raw):
    node_input = NodeInput(name="field", type=input_type, label="Field")

    with pytest.raises(NodeOperationError, match="field"):
        coerce_value(node_input, raw)


def test_resolver_keeps_raw_value_on_template_error():
    resolver = ExpressionResolver({"json": {}})

    assert resolver.resolve({"a": ["{{ json.x }}", 5], "b": "{{ broken( }}"}) == {"a": ["", 5], "b": "{{ broken( }}"}


def test_resolve_api_key_shapes():
    assert resolve_api_key({"api_key": " sk_abc "}) == "sk_abc"
    assert resolve_api_key({"data": {"apiKey": "sk_nested"}}) == "sk_nested"

    with pytest.raises(CredentialError):
        resolve_api_key({"api_key": ""})

    with pytest.raises(CredentialError):
        resolve_api_key(None)
