"""
Node definitions for the ElevenLabs nodes.
"""
from functools import partial
from typing import List, Optional

from fuse_elevenlabs.integrations.elevenlabs.execute import execute, validate
from fuse_elevenlabs.integrations.elevenlabs.manifests import (
    AGGREGATE_NODE_ID,
    build_aggregate_manifest,
    build_resource_manifest,
    resource_node_id,
)
from fuse_elevenlabs.integrations.elevenlabs.operations import RESOURCES
from fuse_elevenlabs.workflows.engine.nodes.registry import NodeDefinition
from fuse_elevenlabs.workflows.engine.nodes.schema import NodeManifest


def _definition(node_id: str, manifest: NodeManifest, resource: Optional[str]) -> NodeDefinition:
    return NodeDefinition(
        id=node_id,
        manifest=manifest,
        execute_fn=partial(execute, resource=resource),
        validate_fn=partial(validate, manifest=manifest, resource=resource),
    )


def get_node_definitions() -> List[NodeDefinition]:
    definitions = [
        _definition(resource_node_id(resource), build_resource_manifest(resource), resource)
        for resource in RESOURCES
    ]
    definitions.append(_definition(AGGREGATE_NODE_ID, build_aggregate_manifest(), None))
    return definitions
