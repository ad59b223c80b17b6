"""
Node Registry

Holds the node definitions available in this process and runs them by id.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from fuse_elevenlabs.workflows.engine.context import NodeContext
from fuse_elevenlabs.workflows.engine.definitions import WorkflowItem
from fuse_elevenlabs.workflows.engine.errors import NodeOperationError, UnknownNodeTypeError
from fuse_elevenlabs.workflows.engine.nodes.schema import NodeManifest

logger = logging.getLogger(__name__)

ExecuteFn = Callable[..., Awaitable[List[WorkflowItem]]]
ValidateFn = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]


@dataclass
class NodeDefinition:
    """A registered node: its form schema and its entry points."""
    id: str
    manifest: NodeManifest
    execute_fn: ExecuteFn
    validate_fn: Optional[ValidateFn] = None

    @property
    def name(self) -> str:
        return self.manifest.displayName or self.id

    @property
    def version(self) -> str:
        return self.manifest.nodeVersion


class NodeRegistry:
    """
    Central registry for all workflow nodes.

    Built-in nodes are registered on first use; further definitions can be
    added with register().
    """

    _nodes: Dict[str, NodeDefinition] = {}
    _initialized: bool = False

    @classmethod
    def initialize(cls):
        """Register the built-in ElevenLabs nodes."""
        if cls._initialized:
            logger.warning("NodeRegistry already initialized")
            return

        from fuse_elevenlabs.integrations.elevenlabs.nodes import get_node_definitions

        for definition in get_node_definitions():
            cls.register(definition)
        cls._initialized = True
        logger.info(f"NodeRegistry initialized with {len(cls._nodes)} nodes")

    @classmethod
    def register(cls, definition: NodeDefinition) -> NodeDefinition:
        if definition.id in cls._nodes:
            logger.warning(f"Replacing registered node '{definition.id}'")
        cls._nodes[definition.id] = definition
        return definition

    @classmethod
    def reset(cls):
        """Forget every registered node; the next lookup re-registers the built-ins."""
        cls._nodes = {}
        cls._initialized = False

    @classmethod
    def get_node(cls, node_type: str) -> NodeDefinition:
        """
        Get a node definition by its ID.

        Raises:
            UnknownNodeTypeError: If no node is registered under `node_type`
        """
        cls._ensure_initialized()
        definition = cls._nodes.get(node_type)
        if definition is None:
            raise UnknownNodeTypeError(
                f"Node '{node_type}' not found. Available: {sorted(cls._nodes)}"
            )
        return definition

    @classmethod
    def list_nodes(cls) -> Dict[str, Dict[str, Any]]:
        """
        List all available nodes with their metadata.

        Returns:
            Dict mapping node ID to node metadata
        """
        cls._ensure_initialized()
        return {
            node.id: {
                "id": node.id,
                "name": node.name,
                "version": node.version,
                "category": node.manifest.category.value,
                "description": node.manifest.description,
                "credentials": node.manifest.credentials or [],
                "author": node.manifest.author,
                "tags": node.manifest.tags,
            }
            for node in cls._nodes.values()
        }

    @classmethod
    def get_all_schemas(cls) -> List[Dict[str, Any]]:
        """Full manifests of all registered nodes, JSON-ready."""
        cls._ensure_initialized()
        return [node.manifest.model_dump(mode="json", exclude_none=True) for node in cls._nodes.values()]

    @classmethod
    async def execute_node(
        cls,
        node_id: str,
        config: Dict[str, Any],
        items: List[WorkflowItem],
        credentials: Optional[Dict[str, Any]] = None,
        continue_on_fail: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        execution_id: Optional[str] = None,
    ) -> List[WorkflowItem]:
        """
        Execute a node over a list of items.

        Args:
            node_id: Node ID to execute
            config: Node configuration (may contain {{ }} expressions)
            items: Input items
            credentials: Credential data holding the API key
            continue_on_fail: Turn per-item failures into error items
            transport: Optional httpx transport for the API client

        Returns:
            Output items, one per input item

        Raises:
            UnknownNodeTypeError: Unknown node id
            NodeOperationError: Configuration validation failed
        """
        definition = cls.get_node(node_id)

        if definition.validate_fn:
            result = await definition.validate_fn(config)
            if not result.get("valid", True):
                errors = result.get("errors") or ["Validation failed"]
                raise NodeOperationError(f"Configuration validation failed: {', '.join(errors)}")

        context = NodeContext(
            execution_id=execution_id or str(uuid.uuid4()),
            workflow_id="adhoc",
            node_id=node_id,
            config=config,
            input_data=items,
            credentials=credentials,
            continue_on_fail=continue_on_fail,
            manifest=definition.manifest,
        )
        return await definition.execute_fn(context, transport=transport)

    @classmethod
    def _ensure_initialized(cls):
        if not cls._initialized:
            cls.initialize()
