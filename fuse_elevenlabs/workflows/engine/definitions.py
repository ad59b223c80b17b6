from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class BinaryData(BaseModel):
    """
    A named binary payload attached to an item (audio in, audio out).

    Serialized to JSON as base64 so items can cross process boundaries.
    """
    model_config = ConfigDict(
        ser_json_bytes="base64",
        val_json_bytes="base64",
        populate_by_name=True,
    )

    data: bytes
    file_name: Optional[str] = Field(None, alias="fileName")
    mime_type: str = Field("application/octet-stream", alias="mimeType")
    file_extension: Optional[str] = Field(None, alias="fileExtension")

    @property
    def size(self) -> int:
        return len(self.data)


class PairedItem(BaseModel):
    """Back-reference to the input item an output item was produced from."""
    item: int


class WorkflowItem(BaseModel):
    """
    Standard unit of data passed between nodes.

    Equivalent to n8n's item structure.
    Ensures that binary data (files) are always separated from JSON data.
    """
    model_config = ConfigDict(populate_by_name=True)

    json_data: Dict[str, Any] = Field(default_factory=dict, alias="json")
    binary_data: Dict[str, BinaryData] = Field(default_factory=dict, alias="binary")
    paired_item: Optional[PairedItem] = Field(None, alias="pairedItem")

    @property
    def has_error(self) -> bool:
        return "error" in self.json_data
