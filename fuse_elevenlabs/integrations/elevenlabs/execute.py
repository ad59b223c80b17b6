"""
ElevenLabs Node Plugin

Execute and validate entry points shared by every ElevenLabs node. A node
either pins a resource (elevenlabs.text_to_speech, ...) or reads it from
its `resource` parameter (the combined elevenlabs node).
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from fuse_elevenlabs.credentials import resolve_api_key
from fuse_elevenlabs.integrations.elevenlabs.client import create_http_client
from fuse_elevenlabs.integrations.elevenlabs.handler import run_operation
from fuse_elevenlabs.integrations.elevenlabs.operations import OPERATION_TABLE, get_operation
from fuse_elevenlabs.utils.execution_id import execution_scope
from fuse_elevenlabs.workflows.engine.context import NodeContext
from fuse_elevenlabs.workflows.engine.definitions import WorkflowItem
from fuse_elevenlabs.workflows.engine.executor import process_items
from fuse_elevenlabs.workflows.engine.nodes.schema import NodeManifest

logger = logging.getLogger(__name__)


async def execute(
    context: NodeContext,
    resource: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[WorkflowItem]:
    """
    Run the configured ElevenLabs operation once per input item.

    Args:
        context: Node context with config, items and credentials
        resource: Resource pinned by the node; read from the `resource` parameter when None
        transport: Optional httpx transport (tests inject a MockTransport)

    Returns:
        One output item per input item, in input order

    Raises:
        CredentialError: No API key available; raised before any request
    """
    with execution_scope(context.execution_id):
        api_key = resolve_api_key(context.credentials)
        items = context.input_data

        logger.info(f"Executing {context.node_id} over {len(items)} item(s)")

        async with create_http_client(transport) as client:

            async def handle(item: WorkflowItem, index: int) -> WorkflowItem:
                params = context.get_node_parameters(index)
                spec = get_operation(resource or params.get("resource"), params.get("operation"))
                return await run_operation(spec, context, params, index, client, api_key)

            return await process_items(items, handle, context.continue_on_fail)


async def validate(
    config: Dict[str, Any],
    manifest: NodeManifest,
    resource: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Check a node configuration before execution.

    Verifies the resource/operation pair and that required visible fields
    are set. Fields holding expressions are only checked for presence,
    their values are known per item.
    """
    values = dict(config)
    if resource:
        values["resource"] = resource

    errors = []
    seen = set()
    for node_input in manifest.inputs:
        if node_input.name in seen or not node_input.is_visible(values):
            continue
        seen.add(node_input.name)

        value = values.get(node_input.name)
        if value is None:
            value = node_input.default
            values[node_input.name] = value
        if node_input.required and value in (None, "", []):
            errors.append(f"{node_input.label} ({node_input.name}) is required")

    key = f"{values.get('resource')}.{values.get('operation')}"
    if key not in OPERATION_TABLE:
        errors.insert(
            0,
            f"Unknown operation '{values.get('operation')}' for resource '{values.get('resource')}'",
        )

    return {"valid": not errors, "errors": errors}
