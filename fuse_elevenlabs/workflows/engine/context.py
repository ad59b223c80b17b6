import copy
import json
from typing import Any, Dict, List, Optional

from fuse_elevenlabs.workflows.engine.definitions import BinaryData, WorkflowItem
from fuse_elevenlabs.workflows.engine.errors import NodeOperationError
from fuse_elevenlabs.workflows.engine.expressions.resolver import ExpressionResolver
from fuse_elevenlabs.workflows.engine.nodes.schema import InputType, NodeInput, NodeManifest

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


class NodeContext:
    """
    Execution context for a node.

    Carries what the host hands a node for one invocation: the raw node
    configuration, the input items, the resolved credential and the
    continue-on-fail flag. Parameters are derived fresh for every item by
    resolving expressions against that item and applying the manifest's
    defaults and input types.
    """

    def __init__(
        self,
        execution_id: str,
        workflow_id: str,
        node_id: str,
        config: Dict[str, Any],
        input_data: Optional[List[WorkflowItem]] = None,
        credentials: Optional[Dict[str, Any]] = None,
        continue_on_fail: bool = False,
        manifest: Optional[NodeManifest] = None,
        env: Dict[str, str] = None
    ):
        self.execution_id = execution_id
        self.workflow_id = workflow_id
        self.node_id = node_id
        self.raw_config = config or {}
        self.input_data = input_data or []
        self.credentials = credentials
        self.continue_on_fail = continue_on_fail
        self.manifest = manifest
        self.env = env or {}

    def _build_item_context(self, item: WorkflowItem, index: int) -> Dict[str, Any]:
        """
        Variables available to expressions for one item:
        {{ json.field }}, {{ binary.data.fileName }}, {{ index }}, {{ env.NAME }}.
        """
        return {
            "json": item.json_data,
            "binary": {
                name: {"fileName": b.file_name, "mimeType": b.mime_type}
                for name, b in item.binary_data.items()
            },
            "index": index,
            "env": self.env,
            "execution": {
                "id": self.execution_id,
                "workflow_id": self.workflow_id
            }
        }

    def resolve_config(self, index: int) -> Dict[str, Any]:
        """
        Returns the configuration dictionary with all expressions resolved
        against the item at `index`.
        """
        item = self.input_data[index]
        resolver = ExpressionResolver(self._build_item_context(item, index))
        return resolver.resolve(self.raw_config)

    def get_node_parameters(self, index: int) -> Dict[str, Any]:
        """
        Returns the typed parameters for the item at `index`.

        Only inputs visible under the current values are kept; missing ones
        fall back to the manifest default. Keys the manifest does not declare
        pass through untouched.
        """
        resolved = self.resolve_config(index)
        if self.manifest is None:
            return resolved

        declared = {i.name for i in self.manifest.inputs}
        params: Dict[str, Any] = {k: v for k, v in resolved.items() if k not in declared}

        for node_input in self.manifest.inputs:
            if node_input.name in params:
                # A same-named input earlier in the form already won
                continue
            if not node_input.is_visible({**resolved, **params}):
                continue

            value = resolved.get(node_input.name)
            if value is None:
                value = copy.deepcopy(node_input.default)

            value = coerce_value(node_input, value)

            if node_input.required and (value is None or value == ""):
                raise NodeOperationError(
                    f"Parameter '{node_input.label}' ({node_input.name}) is required",
                    item_index=index,
                )
            params[node_input.name] = value

        return params

    def get_binary_data(self, index: int, property_name: str) -> BinaryData:
        """Returns the binary payload of an input item or raises if it has none."""
        binary = self.input_data[index].binary_data.get(property_name)
        if binary is None:
            raise NodeOperationError(
                f"No binary data found in field '{property_name}' of item {index}",
                item_index=index,
            )
        return binary


def coerce_value(node_input: NodeInput, value: Any) -> Any:
    """
    Convert a (possibly expression-rendered) value to the input's declared type.
    """
    if value is None:
        return None

    input_type = node_input.type

    if input_type == InputType.NUMBER:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (int, float)):
            return value
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            raise NodeOperationError(
                f"Parameter '{node_input.name}' must be a number, got '{value}'"
            )
        if number.is_integer() and "." not in text:
            return int(number)
        return number

    if input_type == InputType.BOOLEAN:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise NodeOperationError(
            f"Parameter '{node_input.name}' must be true or false, got '{value}'"
        )

    if input_type == InputType.JSON:
        if isinstance(value, str):
            try:
                return json.loads(value) if value.strip() else None
            except json.JSONDecodeError as e:
                raise NodeOperationError(
                    f"Parameter '{node_input.name}' is not valid JSON: {e}"
                )
        return value

    if input_type == InputType.COLLECTION:
        # Only the options the user added are present; no defaults are filled
        if not isinstance(value, dict):
            raise NodeOperationError(f"Parameter '{node_input.name}' must be an object")
        nested = {i.name: i for i in node_input.nested_inputs}
        return {
            key: coerce_value(nested[key], v) if key in nested else v
            for key, v in value.items()
        }

    if input_type == InputType.FIXED_COLLECTION:
        if isinstance(value, dict):
            value = [value]
        if not isinstance(value, list):
            raise NodeOperationError(f"Parameter '{node_input.name}' must be a list")
        entries = []
        for entry in value:
            if not isinstance(entry, dict):
                raise NodeOperationError(
                    f"Entries of '{node_input.name}' must be objects"
                )
            filled = {}
            for nested in node_input.nested_inputs:
                if not nested.is_visible(entry):
                    continue
                raw = entry.get(nested.name)
                if raw is None:
                    raw = copy.deepcopy(nested.default)
                filled[nested.name] = coerce_value(nested, raw)
            entries.append(filled)
        return entries

    if input_type == InputType.STRING and not isinstance(value, str):
        return str(value)

    return value
