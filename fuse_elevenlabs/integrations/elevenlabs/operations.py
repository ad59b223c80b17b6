"""
ElevenLabs operation table.

Every action the nodes expose is one OperationSpec: where it goes, how its
parameters map onto the API's fields, and whether audio flows in or out.
A single generic handler (handler.py) executes any entry.
"""
import string
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

from fuse_elevenlabs.workflows.engine.constants import PayloadKind
from fuse_elevenlabs.workflows.engine.errors import NodeOperationError, UnknownOperationError

OMIT_NONE: Tuple[Any, ...] = (None,)
OMIT_EMPTY: Tuple[Any, ...] = (None, "")


@dataclass(frozen=True)
class FieldMapping:
    """
    Copies one parameter into the API payload.

    `source` and `target` are dotted paths; `target` may reference other
    parameters with {name} placeholders. The field is skipped when the value
    is one of `omit_values`.
    """
    source: str
    target: str
    omit_values: Tuple[Any, ...] = OMIT_NONE
    transform: Optional[Callable[[Any], Any]] = None


@dataclass(frozen=True)
class BinaryInput:
    """Audio upload: either a binary field of the item or a URL, picked by `audio_source`."""
    file_field: str
    url_field: str


@dataclass(frozen=True)
class BinaryOutput:
    """Audio download stored on the output item."""
    filename_prefix: str = "audio"
    # Parameter whose text names the file instead of a prefix + timestamp
    filename_from: Optional[str] = None
    format_param: str = "advanced_options.output_format"
    # (json key, parameter path) pairs echoed into the output JSON
    metadata: Tuple[Tuple[str, str], ...] = ()
    # Collection parameter merged into the output JSON
    include_options: Optional[str] = "advanced_options"


@dataclass(frozen=True)
class OperationSpec:
    resource: str
    operation: str
    label: str
    description: str
    method: str
    endpoint: str
    payload: PayloadKind = PayloadKind.NONE
    fields: Tuple[FieldMapping, ...] = ()
    binary_input: Optional[BinaryInput] = None
    binary_output: Optional[BinaryOutput] = None
    # Confirmation returned when a deletion answers with an empty body
    empty_message: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.resource}.{self.operation}"

    def format_endpoint(self, params: Dict[str, Any]) -> str:
        """Fill {placeholders} in the endpoint with URL-quoted parameter values."""
        path_params = {}
        for name in _placeholders(self.endpoint):
            value = get_path(params, name)
            if value is None or str(value).strip() == "":
                raise NodeOperationError(f"Parameter '{name}' is required for {self.key}")
            path_params[name] = quote(str(value).strip(), safe="")
        return self.endpoint.format(**path_params)

    def build_payload(self, params: Dict[str, Any]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for mapping in self.fields:
            value = get_path(params, mapping.source)
            if value in mapping.omit_values:
                continue
            if mapping.transform is not None:
                value = mapping.transform(value)
            target = mapping.target.format(**params) if "{" in mapping.target else mapping.target
            set_path(payload, target, value)
        return payload


def _placeholders(template: str) -> List[str]:
    return [name for _, name, _, _ in string.Formatter().parse(template) if name]


def get_path(data: Dict[str, Any], path: str) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def set_path(data: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    current = data
    for part in parts[:-1]:
        current = current.setdefault(part, {})
    current[parts[-1]] = value


# --- Transforms ---

def split_csv(value: Any) -> List[str]:
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def build_effects(effects: Any) -> List[Dict[str, Any]]:
    """Sound effect entries from the form into the API's effect objects."""
    if not effects:
        raise NodeOperationError("At least one effect must be added")

    result = []
    for effect in effects:
        effect_type = effect.get("effect_type")
        name = effect.get("custom_effect_name") if effect_type == "custom" else effect_type
        if not name:
            raise NodeOperationError("Custom effects need a name")

        config: Dict[str, Any] = {"effect": name, "intensity": effect.get("intensity")}
        # Times are only sent when set; 0 end time means "until the end"
        if (effect.get("start_time") or 0) > 0:
            config["start_time"] = effect["start_time"]
        if (effect.get("end_time") or 0) > 0:
            config["end_time"] = effect["end_time"]
        result.append(config)
    return result


# --- Table ---

_AUDIO_UPLOAD = BinaryInput(file_field="audio", url_field="audio_url")

_KB = "conversational/knowledge-bases"
_AGENTS = "conversational/agents"

OPERATIONS: Tuple[OperationSpec, ...] = (
    # Text to speech
    OperationSpec(
        resource="text_to_speech",
        operation="convert",
        label="Convert Text to Speech",
        description="Synthesize speech from text with a voice",
        method="POST",
        endpoint="text-to-speech/{voice_id}",
        payload=PayloadKind.JSON,
        fields=(
            FieldMapping("text", "text"),
            FieldMapping("model_id", "model_id"),
            FieldMapping("advanced_options.stability", "voice_settings.stability"),
            FieldMapping("advanced_options.similarity_boost", "voice_settings.similarity_boost"),
            FieldMapping("advanced_options.style", "voice_settings.style"),
            FieldMapping("advanced_options.output_format", "output_format"),
        ),
        binary_output=BinaryOutput(
            filename_from="text",
            metadata=(("voice_id", "voice_id"), ("model_id", "model_id")),
            include_options=None,
        ),
    ),
    # Speech to text
    OperationSpec(
        resource="speech_to_text",
        operation="transcribe",
        label="Transcribe Audio",
        description="Convert speech in an audio file to text",
        method="POST",
        endpoint="speech-to-text",
        payload=PayloadKind.MULTIPART,
        fields=(
            FieldMapping("model_id", "model_id"),
            FieldMapping("advanced_options.language_code", "language_code", OMIT_EMPTY),
            FieldMapping("advanced_options.diarize", "diarize"),
            FieldMapping("advanced_options.timestamps_granularity", "timestamps_granularity"),
            FieldMapping("advanced_options.tag_audio_events", "tag_audio_events"),
            FieldMapping("advanced_options.num_speakers", "num_speakers"),
            FieldMapping("advanced_options.file_format", "file_format"),
        ),
        binary_input=BinaryInput(file_field="file", url_field="cloud_storage_url"),
    ),
    # Speech to speech
    OperationSpec(
        resource="speech_to_speech",
        operation="convert",
        label="Convert Speech",
        description="Re-voice an audio file with another voice",
        method="POST",
        endpoint="speech-to-speech",
        payload=PayloadKind.MULTIPART,
        fields=(
            FieldMapping("voice_id", "voice_id"),
            FieldMapping("advanced_options.similarity_boost", "similarity_boost"),
            FieldMapping("advanced_options.stability", "stability"),
            FieldMapping("advanced_options.output_format", "output_format"),
            FieldMapping("advanced_options.source_language", "source_language", (None, "", "auto")),
            FieldMapping("advanced_options.target_language", "target_language", (None, "", "same")),
        ),
        binary_input=_AUDIO_UPLOAD,
        binary_output=BinaryOutput(
            filename_prefix="speech_to_speech",
            metadata=(("voice_id", "voice_id"),),
        ),
    ),
    # Voice changer
    OperationSpec(
        resource="voice_changer",
        operation="change_voice",
        label="Change Voice",
        description="Convert audio from one voice to another",
        method="POST",
        endpoint="voice-changer",
        payload=PayloadKind.MULTIPART,
        fields=(
            FieldMapping("voice_id", "voice_id"),
            FieldMapping("advanced_options.similarity_boost", "voice_settings.similarity_boost"),
            FieldMapping("advanced_options.stability", "voice_settings.stability"),
            FieldMapping("advanced_options.output_format", "output_format"),
            FieldMapping("advanced_options.audio_type", "audio_type"),
        ),
        binary_input=_AUDIO_UPLOAD,
        binary_output=BinaryOutput(
            filename_prefix="voice_changed",
            metadata=(("voice_id", "voice_id"),),
        ),
    ),
    # Sound effects
    OperationSpec(
        resource="sound_effects",
        operation="add_effects",
        label="Add Sound Effects",
        description="Apply sound effects to an audio file",
        method="POST",
        endpoint="sound-effects",
        payload=PayloadKind.MULTIPART,
        fields=(
            FieldMapping("effects", "effects", transform=build_effects),
            FieldMapping("advanced_options.output_format", "output_format"),
        ),
        binary_input=_AUDIO_UPLOAD,
        binary_output=BinaryOutput(
            filename_prefix="audio_effects",
            metadata=(("effects", "effects"),),
        ),
    ),
    # Knowledge base
    OperationSpec(
        resource="knowledge_base",
        operation="list",
        label="List Knowledge Bases",
        description="List all knowledge bases",
        method="GET",
        endpoint=_KB,
    ),
    OperationSpec(
        resource="knowledge_base",
        operation="get",
        label="Get Knowledge Base",
        description="Get details of a knowledge base",
        method="GET",
        endpoint=_KB + "/{knowledge_base_id}",
    ),
    OperationSpec(
        resource="knowledge_base",
        operation="create",
        label="Create Knowledge Base",
        description="Create a new knowledge base",
        method="POST",
        endpoint=_KB,
        payload=PayloadKind.JSON,
        fields=(
            FieldMapping("knowledge_base_name", "name"),
            FieldMapping("description", "description", OMIT_EMPTY),
        ),
    ),
    OperationSpec(
        resource="knowledge_base",
        operation="update",
        label="Update Knowledge Base",
        description="Rename or re-describe a knowledge base",
        method="PUT",
        endpoint=_KB + "/{knowledge_base_id}",
        payload=PayloadKind.JSON,
        fields=(
            FieldMapping("knowledge_base_name", "name"),
            FieldMapping("description", "description", OMIT_EMPTY),
        ),
    ),
    OperationSpec(
        resource="knowledge_base",
        operation="delete",
        label="Delete Knowledge Base",
        description="Delete a knowledge base",
        method="DELETE",
        endpoint=_KB + "/{knowledge_base_id}",
        empty_message="Knowledge base deleted successfully",
    ),
    OperationSpec(
        resource="knowledge_base",
        operation="add_document",
        label="Add Document",
        description="Add a document to a knowledge base by URL",
        method="POST",
        endpoint=_KB + "/{knowledge_base_id}/documents",
        payload=PayloadKind.JSON,
        fields=(
            FieldMapping("document_url", "{document_type}"),
            FieldMapping("advanced_options.document_name", "name", OMIT_EMPTY),
            FieldMapping("advanced_options.namespace", "namespace", OMIT_EMPTY),
        ),
    ),
    OperationSpec(
        resource="knowledge_base",
        operation="list_documents",
        label="List Documents",
        description="List the documents in a knowledge base",
        method="GET",
        endpoint=_KB + "/{knowledge_base_id}/documents",
    ),
    OperationSpec(
        resource="knowledge_base",
        operation="remove_document",
        label="Remove Document",
        description="Remove a document from a knowledge base",
        method="DELETE",
        endpoint=_KB + "/{knowledge_base_id}/documents/{document_id}",
        empty_message="Document removed successfully",
    ),
    # Agents
    OperationSpec(
        resource="agents",
        operation="list",
        label="List Agents",
        description="List all conversational agents",
        method="GET",
        endpoint=_AGENTS,
    ),
    OperationSpec(
        resource="agents",
        operation="get",
        label="Get Agent",
        description="Get details of an agent",
        method="GET",
        endpoint=_AGENTS + "/{agent_id}",
    ),
    OperationSpec(
        resource="agents",
        operation="create",
        label="Create Agent",
        description="Create a new conversational agent",
        method="POST",
        endpoint=_AGENTS,
        payload=PayloadKind.JSON,
        fields=(
            FieldMapping("agent_name", "name"),
            FieldMapping("voice_id", "voice_id"),
            FieldMapping("system_instruction", "system_instruction"),
            FieldMapping("advanced_options.knowledge_base_ids", "knowledge_base_ids", OMIT_EMPTY, split_csv),
        ),
    ),
    OperationSpec(
        resource="agents",
        operation="update",
        label="Update Agent",
        description="Update an existing agent",
        method="PUT",
        endpoint=_AGENTS + "/{agent_id}",
        payload=PayloadKind.JSON,
        fields=(
            FieldMapping("agent_name", "name"),
            FieldMapping("voice_id", "voice_id"),
            FieldMapping("system_instruction", "system_instruction"),
            FieldMapping("advanced_options.knowledge_base_ids", "knowledge_base_ids", OMIT_EMPTY, split_csv),
        ),
    ),
    OperationSpec(
        resource="agents",
        operation="delete",
        label="Delete Agent",
        description="Delete an agent",
        method="DELETE",
        endpoint=_AGENTS + "/{agent_id}",
        empty_message="Agent deleted successfully",
    ),
    OperationSpec(
        resource="agents",
        operation="start_session",
        label="Start Session",
        description="Start a new conversation session with an agent",
        method="POST",
        endpoint=_AGENTS + "/{agent_id}/sessions",
        payload=PayloadKind.JSON,
        fields=(
            FieldMapping("advanced_options.language", "language", OMIT_EMPTY),
        ),
    ),
    OperationSpec(
        resource="agents",
        operation="send_message",
        label="Send Message",
        description="Send a message to an agent in a session",
        method="POST",
        endpoint="conversational/sessions/{session_id}/interaction",
        payload=PayloadKind.JSON,
        fields=(
            FieldMapping("message", "message"),
            FieldMapping("advanced_options.force_audio_response", "force_audio_response"),
            FieldMapping("advanced_options.search_limit", "search_limit"),
        ),
    ),
)

OPERATION_TABLE: Dict[str, OperationSpec] = {spec.key: spec for spec in OPERATIONS}

RESOURCES: Dict[str, str] = {
    "text_to_speech": "Text to Speech",
    "speech_to_text": "Speech to Text",
    "speech_to_speech": "Speech to Speech",
    "voice_changer": "Voice Changer",
    "sound_effects": "Sound Effects",
    "knowledge_base": "Knowledge Base",
    "agents": "Agents",
}


def operations_for(resource: str) -> List[OperationSpec]:
    return [spec for spec in OPERATIONS if spec.resource == resource]


def get_operation(resource: Optional[str], operation: Optional[str]) -> OperationSpec:
    spec = OPERATION_TABLE.get(f"{resource}.{operation}")
    if spec is None:
        available = ", ".join(s.operation for s in operations_for(resource or "")) or "none"
        raise UnknownOperationError(
            f"Unknown operation '{operation}' for resource '{resource}' (available: {available})"
        )
    return spec
