from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, model_validator

# --- Enums ---
class NodeCategory(str, Enum):
    ACTION = "ACTION"
    AI = "AI"


class InputType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    JSON = "json"
    COLLECTION = "collection"
    FIXED_COLLECTION = "fixedCollection"

# --- Models ---
class DisplayConfiguration(BaseModel):
    """
    Configuration for hiding/showing fields.

    `show` / `hide` map a sibling field name to the values that trigger the rule.
    """
    show: Optional[Dict[str, List[Any]]] = None
    hide: Optional[Dict[str, List[Any]]] = None

    def is_visible(self, values: Dict[str, Any]) -> bool:
        if self.show:
            for field, allowed in self.show.items():
                if values.get(field) not in allowed:
                    return False
        if self.hide:
            for field, hidden in self.hide.items():
                if values.get(field) in hidden:
                    return False
        return True


class TypeOptions(BaseModel):
    """
    Advanced options for specific input types.
    """
    rows: Optional[int] = None
    minValue: Optional[float] = None
    maxValue: Optional[float] = None
    numberPrecision: Optional[int] = None
    multipleValues: Optional[bool] = None
    password: Optional[bool] = None


class SelectOption(BaseModel):
    label: str
    value: Any
    description: Optional[str] = None


class NodeInput(BaseModel):
    """
    Definition of a single input field in the node.
    """
    name: str
    type: InputType
    label: str
    default: Optional[Any] = None
    description: Optional[str] = None
    required: bool = False
    placeholder: Optional[str] = None

    # Polymorphic options: Select OR Nested inputs
    options: Optional[Union[List[SelectOption], List['NodeInput']]] = None

    displayOptions: Optional[DisplayConfiguration] = None
    typeOptions: Optional[TypeOptions] = None

    def is_visible(self, values: Dict[str, Any]) -> bool:
        if self.displayOptions is None:
            return True
        return self.displayOptions.is_visible(values)

    @property
    def nested_inputs(self) -> List['NodeInput']:
        if self.type in (InputType.COLLECTION, InputType.FIXED_COLLECTION):
            return [o for o in (self.options or []) if isinstance(o, NodeInput)]
        return []

    @property
    def option_values(self) -> List[Any]:
        if self.type != InputType.SELECT:
            return []
        return [o.value for o in (self.options or []) if isinstance(o, SelectOption)]


NodeInput.model_rebuild()


class NodeOutput(BaseModel):
    name: str
    type: str
    label: Optional[str] = None
    description: Optional[str] = None


class CredentialDefinition(BaseModel):
    """Credential type a node requires, with the fields the user fills in."""
    name: str
    displayName: str
    documentationUrl: Optional[str] = None
    properties: List[NodeInput] = []


class NodeManifest(BaseModel):
    """
    Node Manifest Definition: the static form schema of a node.
    """
    id: str
    version: int = 1
    nodeVersion: str = "1.0.0"

    name: Optional[str] = None
    displayName: Optional[str] = None

    description: str
    category: NodeCategory = NodeCategory.ACTION
    service: Optional[str] = "elevenlabs"

    icon: Optional[str] = None

    inputs: List[NodeInput] = []
    outputs: List[NodeOutput] = []

    credentials: Optional[List[str]] = None
    tags: List[str] = []
    author: str = "Fuse"

    @model_validator(mode="after")
    def _set_name_fallbacks(self) -> "NodeManifest":
        if self.name is None:
            self.name = self.id
        if not self.displayName:
            self.displayName = self.name
        return self

    def get_input(self, name: str) -> Optional[NodeInput]:
        return next((i for i in self.inputs if i.name == name), None)

    def visible_inputs(self, values: Dict[str, Any]) -> List[NodeInput]:
        """Inputs shown for the given config values (duplicated names resolve by visibility)."""
        return [i for i in self.inputs if i.is_visible(values)]
