from fuse_elevenlabs.workflows.engine.context import NodeContext
from fuse_elevenlabs.workflows.engine.definitions import BinaryData, PairedItem, WorkflowItem
from fuse_elevenlabs.workflows.engine.executor import process_items

__all__ = ["NodeContext", "BinaryData", "PairedItem", "WorkflowItem", "process_items"]
