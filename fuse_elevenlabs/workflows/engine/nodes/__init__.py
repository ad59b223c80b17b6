"""
Workflow Nodes Package

Form schema models shared by every node. The registry lives in
`nodes.registry` and is imported from there.
"""

from .schema import (
    CredentialDefinition,
    DisplayConfiguration,
    InputType,
    NodeCategory,
    NodeInput,
    NodeManifest,
    NodeOutput,
    SelectOption,
    TypeOptions,
)

__all__ = [
    "CredentialDefinition",
    "DisplayConfiguration",
    "InputType",
    "NodeCategory",
    "NodeInput",
    "NodeManifest",
    "NodeOutput",
    "SelectOption",
    "TypeOptions",
]
