"""
Form schemas of the ElevenLabs nodes.

One manifest per resource, plus the combined "elevenlabs" node whose
resource select reveals that resource's operation and fields.
"""
from typing import Any, List, Optional, Sequence, Tuple

from fuse_elevenlabs.credentials import CREDENTIAL_TYPE
from fuse_elevenlabs.integrations.elevenlabs.formats import (
    OUTPUT_FORMAT_OPTIONS,
    TTS_OUTPUT_FORMAT_OPTIONS,
)
from fuse_elevenlabs.integrations.elevenlabs.operations import RESOURCES, operations_for
from fuse_elevenlabs.workflows.engine.constants import AudioSource, ExecutionConfig
from fuse_elevenlabs.workflows.engine.nodes.schema import (
    DisplayConfiguration,
    InputType,
    NodeCategory,
    NodeInput,
    NodeManifest,
    NodeOutput,
    SelectOption,
    TypeOptions,
)

NODE_ID_PREFIX = "elevenlabs"
AGGREGATE_NODE_ID = "elevenlabs"


def _options(pairs: Sequence[Tuple[str, Any]]) -> List[SelectOption]:
    return [SelectOption(label=label, value=value) for label, value in pairs]


def _show(**conditions: List[Any]) -> DisplayConfiguration:
    return DisplayConfiguration(show=conditions)


def _ratio(name: str, label: str, default: float, description: str) -> NodeInput:
    return NodeInput(
        name=name,
        type=InputType.NUMBER,
        label=label,
        default=default,
        description=description,
        typeOptions=TypeOptions(minValue=0, maxValue=1, numberPrecision=2),
    )


STABILITY = _ratio("stability", "Stability", 0.5, "Voice stability (0-1)")
SIMILARITY_BOOST = _ratio("similarity_boost", "Similarity Boost", 0.75, "Voice similarity boost (0-1)")


def _operation_select(resource: str) -> NodeInput:
    specs = operations_for(resource)
    return NodeInput(
        name="operation",
        type=InputType.SELECT,
        label="Operation",
        default=specs[0].operation,
        required=True,
        options=[
            SelectOption(label=s.label, value=s.operation, description=s.description)
            for s in specs
        ],
    )


def _voice_id(description: str = "ID of the voice to use") -> NodeInput:
    return NodeInput(
        name="voice_id",
        type=InputType.STRING,
        label="Voice ID",
        required=True,
        default="",
        placeholder="21m00Tcm4TlvDq8ikWAM",
        description=description,
    )


def _audio_input_fields() -> List[NodeInput]:
    """Where the input audio comes from: a binary field of the item or a URL."""
    return [
        NodeInput(
            name="audio_source",
            type=InputType.SELECT,
            label="Audio Source",
            default=AudioSource.BINARY.value,
            options=_options([
                ("Binary Data", AudioSource.BINARY.value),
                ("URL", AudioSource.URL.value),
            ]),
        ),
        NodeInput(
            name="binary_property",
            type=InputType.STRING,
            label="Input Binary Field",
            default=ExecutionConfig.DEFAULT_BINARY_PROPERTY,
            required=True,
            description="Name of the binary field holding the audio file",
            displayOptions=_show(audio_source=[AudioSource.BINARY.value]),
        ),
        NodeInput(
            name="audio_url",
            type=InputType.STRING,
            label="Audio URL",
            default="",
            required=True,
            placeholder="https://example.com/audio.mp3",
            description="URL of the audio file",
            displayOptions=_show(audio_source=[AudioSource.URL.value]),
        ),
    ]


def _output_binary_field() -> NodeInput:
    return NodeInput(
        name="output_binary_property",
        type=InputType.STRING,
        label="Output Binary Field",
        default=ExecutionConfig.DEFAULT_BINARY_PROPERTY,
        required=True,
        description="Name of the binary field to store the generated audio in",
    )


def _output_format(options=OUTPUT_FORMAT_OPTIONS) -> NodeInput:
    return NodeInput(
        name="output_format",
        type=InputType.SELECT,
        label="Output Format",
        default="mp3_44100_128",
        options=_options(options),
    )


def _advanced(options: List[NodeInput]) -> NodeInput:
    return NodeInput(
        name="advanced_options",
        type=InputType.COLLECTION,
        label="Advanced Options",
        default={},
        placeholder="Add Option",
        options=options,
    )


# --- Per-resource inputs ---

def text_to_speech_inputs() -> List[NodeInput]:
    return [
        _operation_select("text_to_speech"),
        _voice_id("ID of the voice to synthesize with"),
        NodeInput(
            name="text",
            type=InputType.STRING,
            label="Text",
            required=True,
            default="",
            description="The text to convert to speech",
            typeOptions=TypeOptions(rows=4),
        ),
        NodeInput(
            name="model_id",
            type=InputType.SELECT,
            label="Model",
            default="eleven_multilingual_v2",
            options=_options([
                ("Eleven Multilingual v2", "eleven_multilingual_v2"),
                ("Eleven Flash v2.5", "eleven_flash_v2_5"),
                ("Eleven Turbo v2.5", "eleven_turbo_v2_5"),
                ("Eleven English v1", "eleven_monolingual_v1"),
            ]),
        ),
        _output_binary_field(),
        _advanced([
            STABILITY,
            SIMILARITY_BOOST,
            _ratio("style", "Style", 0.0, "Style exaggeration (0-1)"),
            _output_format(TTS_OUTPUT_FORMAT_OPTIONS),
        ]),
    ]


def speech_to_text_inputs() -> List[NodeInput]:
    return [
        _operation_select("speech_to_text"),
        *_audio_input_fields(),
        NodeInput(
            name="model_id",
            type=InputType.SELECT,
            label="Model",
            default="scribe_v1",
            options=_options([
                ("Scribe v1", "scribe_v1"),
                ("Scribe v1 Experimental", "scribe_v1_experimental"),
            ]),
        ),
        _advanced([
            NodeInput(
                name="language_code",
                type=InputType.STRING,
                label="Language Code",
                default="",
                placeholder="en",
                description="ISO-639 code of the spoken language; detected automatically when empty",
            ),
            NodeInput(
                name="diarize",
                type=InputType.BOOLEAN,
                label="Identify Speakers",
                default=False,
                description="Annotate which speaker is talking",
            ),
            NodeInput(
                name="timestamps_granularity",
                type=InputType.SELECT,
                label="Timestamps Granularity",
                default="word",
                options=_options([
                    ("None", "none"),
                    ("Word", "word"),
                    ("Character", "character"),
                ]),
            ),
            NodeInput(
                name="tag_audio_events",
                type=InputType.BOOLEAN,
                label="Tag Audio Events",
                default=True,
                description="Tag events like (laughter) in the transcript",
            ),
            NodeInput(
                name="num_speakers",
                type=InputType.NUMBER,
                label="Number of Speakers",
                default=1,
                typeOptions=TypeOptions(minValue=1, maxValue=32),
            ),
            NodeInput(
                name="file_format",
                type=InputType.SELECT,
                label="File Format",
                default="other",
                options=_options([
                    ("Other", "other"),
                    ("PCM 16-bit 16kHz mono", "pcm_s16le_16"),
                ]),
            ),
        ]),
    ]


def speech_to_speech_inputs() -> List[NodeInput]:
    return [
        _operation_select("speech_to_speech"),
        *_audio_input_fields(),
        _voice_id("ID of the target voice"),
        _output_binary_field(),
        _advanced([
            SIMILARITY_BOOST,
            STABILITY,
            _output_format(),
            NodeInput(
                name="source_language",
                type=InputType.STRING,
                label="Source Language",
                default="auto",
                description="Language of the input audio, or 'auto'",
            ),
            NodeInput(
                name="target_language",
                type=InputType.STRING,
                label="Target Language",
                default="same",
                description="Language of the output audio, or 'same'",
            ),
        ]),
    ]


def voice_changer_inputs() -> List[NodeInput]:
    return [
        _operation_select("voice_changer"),
        *_audio_input_fields(),
        _voice_id("ID of the target voice"),
        _output_binary_field(),
        _advanced([
            SIMILARITY_BOOST,
            STABILITY,
            _output_format(),
            NodeInput(
                name="audio_type",
                type=InputType.SELECT,
                label="Audio Type",
                default="speech",
                options=_options([("Speech", "speech"), ("Singing", "singing")]),
            ),
        ]),
    ]


EFFECT_TYPES = [
    ("Echo", "echo"),
    ("Reverb", "reverb"),
    ("Distortion", "distortion"),
    ("Chorus", "chorus"),
    ("Phaser", "phaser"),
    ("Flanger", "flanger"),
    ("Tremolo", "tremolo"),
    ("Pitch Shift", "pitch_shift"),
    ("Custom", "custom"),
]


def sound_effects_inputs() -> List[NodeInput]:
    return [
        _operation_select("sound_effects"),
        *_audio_input_fields(),
        NodeInput(
            name="effects",
            type=InputType.FIXED_COLLECTION,
            label="Effects",
            default=[],
            required=True,
            description="Effects to apply, in order",
            typeOptions=TypeOptions(multipleValues=True),
            options=[
                NodeInput(
                    name="effect_type",
                    type=InputType.SELECT,
                    label="Effect Type",
                    default="echo",
                    options=_options(EFFECT_TYPES),
                ),
                NodeInput(
                    name="custom_effect_name",
                    type=InputType.STRING,
                    label="Custom Effect Name",
                    default="",
                    displayOptions=_show(effect_type=["custom"]),
                ),
                _ratio("intensity", "Intensity", 0.5, "Effect intensity (0-1)"),
                NodeInput(
                    name="start_time",
                    type=InputType.NUMBER,
                    label="Start Time (Seconds)",
                    default=0,
                    typeOptions=TypeOptions(minValue=0),
                ),
                NodeInput(
                    name="end_time",
                    type=InputType.NUMBER,
                    label="End Time (Seconds)",
                    default=0,
                    description="0 applies the effect until the end",
                    typeOptions=TypeOptions(minValue=0),
                ),
            ],
        ),
        _output_binary_field(),
        _advanced([_output_format()]),
    ]


def knowledge_base_inputs() -> List[NodeInput]:
    with_id = ["get", "update", "delete", "add_document", "list_documents", "remove_document"]
    return [
        _operation_select("knowledge_base"),
        NodeInput(
            name="knowledge_base_id",
            type=InputType.STRING,
            label="Knowledge Base ID",
            required=True,
            default="",
            displayOptions=_show(operation=with_id),
        ),
        NodeInput(
            name="knowledge_base_name",
            type=InputType.STRING,
            label="Name",
            required=True,
            default="",
            displayOptions=_show(operation=["create", "update"]),
        ),
        NodeInput(
            name="description",
            type=InputType.STRING,
            label="Description",
            default="",
            typeOptions=TypeOptions(rows=3),
            displayOptions=_show(operation=["create", "update"]),
        ),
        NodeInput(
            name="document_url",
            type=InputType.STRING,
            label="Document URL",
            required=True,
            default="",
            placeholder="https://example.com/handbook",
            displayOptions=_show(operation=["add_document"]),
        ),
        NodeInput(
            name="document_type",
            type=InputType.SELECT,
            label="Document Type",
            default="web_url",
            options=_options([("Web Page", "web_url"), ("File URL", "file_url")]),
            displayOptions=_show(operation=["add_document"]),
        ),
        NodeInput(
            name="document_id",
            type=InputType.STRING,
            label="Document ID",
            required=True,
            default="",
            displayOptions=_show(operation=["remove_document"]),
        ),
        NodeInput(
            name="advanced_options",
            type=InputType.COLLECTION,
            label="Document Options",
            default={},
            placeholder="Add Option",
            displayOptions=_show(operation=["add_document"]),
            options=[
                NodeInput(name="document_name", type=InputType.STRING, label="Document Name", default=""),
                NodeInput(name="namespace", type=InputType.STRING, label="Namespace", default=""),
            ],
        ),
    ]


def agents_inputs() -> List[NodeInput]:
    with_agent_id = ["get", "update", "delete", "start_session"]
    return [
        _operation_select("agents"),
        NodeInput(
            name="agent_id",
            type=InputType.STRING,
            label="Agent ID",
            required=True,
            default="",
            displayOptions=_show(operation=with_agent_id),
        ),
        NodeInput(
            name="agent_name",
            type=InputType.STRING,
            label="Agent Name",
            required=True,
            default="",
            displayOptions=_show(operation=["create", "update"]),
        ),
        NodeInput(
            name="voice_id",
            type=InputType.STRING,
            label="Voice ID",
            required=True,
            default="",
            displayOptions=_show(operation=["create", "update"]),
        ),
        NodeInput(
            name="system_instruction",
            type=InputType.STRING,
            label="System Instruction",
            default="",
            description="Instructions that shape how the agent behaves",
            typeOptions=TypeOptions(rows=4),
            displayOptions=_show(operation=["create", "update"]),
        ),
        NodeInput(
            name="session_id",
            type=InputType.STRING,
            label="Session ID",
            required=True,
            default="",
            displayOptions=_show(operation=["send_message"]),
        ),
        NodeInput(
            name="message",
            type=InputType.STRING,
            label="Message",
            required=True,
            default="",
            typeOptions=TypeOptions(rows=3),
            displayOptions=_show(operation=["send_message"]),
        ),
        NodeInput(
            name="advanced_options",
            type=InputType.COLLECTION,
            label="Agent Options",
            default={},
            placeholder="Add Option",
            displayOptions=_show(operation=["create", "update"]),
            options=[
                NodeInput(
                    name="knowledge_base_ids",
                    type=InputType.STRING,
                    label="Knowledge Base IDs",
                    default="",
                    description="Comma-separated knowledge base IDs",
                ),
            ],
        ),
        NodeInput(
            name="advanced_options",
            type=InputType.COLLECTION,
            label="Session Options",
            default={},
            placeholder="Add Option",
            displayOptions=_show(operation=["start_session"]),
            options=[
                NodeInput(name="language", type=InputType.STRING, label="Language", default="", placeholder="en"),
            ],
        ),
        NodeInput(
            name="advanced_options",
            type=InputType.COLLECTION,
            label="Message Options",
            default={},
            placeholder="Add Option",
            displayOptions=_show(operation=["send_message"]),
            options=[
                NodeInput(
                    name="force_audio_response",
                    type=InputType.BOOLEAN,
                    label="Force Audio Response",
                    default=False,
                ),
                NodeInput(
                    name="search_limit",
                    type=InputType.NUMBER,
                    label="Knowledge Search Limit",
                    default=3,
                    typeOptions=TypeOptions(minValue=1),
                ),
            ],
        ),
    ]


RESOURCE_INPUTS = {
    "text_to_speech": text_to_speech_inputs,
    "speech_to_text": speech_to_text_inputs,
    "speech_to_speech": speech_to_speech_inputs,
    "voice_changer": voice_changer_inputs,
    "sound_effects": sound_effects_inputs,
    "knowledge_base": knowledge_base_inputs,
    "agents": agents_inputs,
}

RESOURCE_DESCRIPTIONS = {
    "text_to_speech": "Convert text to natural sounding speech",
    "speech_to_text": "Transcribe audio files to text",
    "speech_to_speech": "Convert speech from one voice to another",
    "voice_changer": "Change the voice of an audio recording",
    "sound_effects": "Apply sound effects to audio",
    "knowledge_base": "Manage conversational AI knowledge bases",
    "agents": "Manage and talk to conversational AI agents",
}

_AUDIO_OUT = {"text_to_speech", "speech_to_speech", "voice_changer", "sound_effects"}


def _outputs(resource: Optional[str]) -> List[NodeOutput]:
    outputs = [NodeOutput(name="json", type="object", label="Response")]
    if resource is None or resource in _AUDIO_OUT:
        outputs.append(
            NodeOutput(name="binary", type="binary", label="Audio", description="Generated audio file")
        )
    return outputs


def resource_node_id(resource: str) -> str:
    return f"{NODE_ID_PREFIX}.{resource}"


def build_resource_manifest(resource: str) -> NodeManifest:
    return NodeManifest(
        id=resource_node_id(resource),
        displayName=f"ElevenLabs {RESOURCES[resource]}",
        description=RESOURCE_DESCRIPTIONS[resource],
        category=NodeCategory.AI,
        icon="elevenlabs.svg",
        inputs=RESOURCE_INPUTS[resource](),
        outputs=_outputs(resource),
        credentials=[CREDENTIAL_TYPE],
        tags=["elevenlabs", "audio", resource.replace("_", "-")],
    )


def _scoped(node_input: NodeInput, resource: str) -> NodeInput:
    """Copy of an input that is only shown when `resource` is selected."""
    display = node_input.displayOptions or DisplayConfiguration()
    show = dict(display.show or {})
    show["resource"] = [resource]
    return node_input.model_copy(
        update={"displayOptions": DisplayConfiguration(show=show, hide=display.hide)}
    )


def build_aggregate_manifest() -> NodeManifest:
    """
    The combined node. Same-named fields of different resources coexist;
    only the one visible for the selected resource is used.
    """
    inputs = [
        NodeInput(
            name="resource",
            type=InputType.SELECT,
            label="Resource",
            default="text_to_speech",
            required=True,
            options=_options([(label, value) for value, label in RESOURCES.items()]),
        )
    ]
    for resource, builder in RESOURCE_INPUTS.items():
        inputs.extend(_scoped(i, resource) for i in builder())

    return NodeManifest(
        id=AGGREGATE_NODE_ID,
        displayName="ElevenLabs",
        description="Use ElevenLabs voice AI: speech synthesis, transcription, voice conversion and agents",
        category=NodeCategory.AI,
        icon="elevenlabs.svg",
        inputs=inputs,
        outputs=_outputs(None),
        credentials=[CREDENTIAL_TYPE],
        tags=["elevenlabs", "audio", "voice"],
    )
