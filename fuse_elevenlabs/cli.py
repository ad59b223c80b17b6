"""Command-line interface for fuse-elevenlabs - run ElevenLabs nodes locally."""

import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from fuse_elevenlabs import __version__
from fuse_elevenlabs.config import settings
from fuse_elevenlabs.logger import setup_global_logger
from fuse_elevenlabs.workflows.engine.definitions import BinaryData, WorkflowItem
from fuse_elevenlabs.workflows.engine.error_handler import ErrorClassifier
from fuse_elevenlabs.workflows.engine.errors import EngineError
from fuse_elevenlabs.workflows.engine.nodes.registry import NodeRegistry

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, ...)")
def main(log_level: Optional[str]):
    """
    fuse-elevenlabs - ElevenLabs voice AI nodes.

    Inspect the node schemas and run a node against items from a JSON file.
    """
    setup_global_logger(log_level or settings.LOG_LEVEL)


@main.command()
def nodes():
    """List the available nodes."""
    table = Table(title="ElevenLabs Nodes")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Version", style="dim")
    table.add_column("Description")

    for node_id, info in sorted(NodeRegistry.list_nodes().items()):
        table.add_row(node_id, info["name"], info["version"], info["description"])

    console.print(table)


@main.command()
@click.argument("node_id")
def schema(node_id: str):
    """Print the form schema of a node as JSON."""
    try:
        definition = NodeRegistry.get_node(node_id)
    except EngineError as e:
        _fail(e)
    console.print_json(definition.manifest.model_dump_json(exclude_none=True))


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}")


def load_items(path: Optional[Path]) -> List[WorkflowItem]:
    """
    Read input items. Each entry is {"json": {...}, "binary": {field: {"path": ...}}};
    binary files are read from disk relative to the items file.
    """
    if path is None:
        return [WorkflowItem(json={})]

    raw = _load_json(path)
    if isinstance(raw, dict):
        raw = [raw]

    items = []
    for entry in raw:
        binary = {}
        for field, ref in (entry.get("binary") or {}).items():
            file_path = (path.parent / ref["path"]).resolve()
            mime_type = ref.get("mimeType") or mimetypes.guess_type(file_path.name)[0]
            binary[field] = BinaryData(
                data=file_path.read_bytes(),
                file_name=ref.get("fileName") or file_path.name,
                mime_type=mime_type or "application/octet-stream",
                file_extension=file_path.suffix.lstrip(".") or None,
            )
        items.append(WorkflowItem(json=entry.get("json", {}), binary=binary))
    return items


def dump_items(items: List[WorkflowItem], output_dir: Optional[Path]) -> List[Dict[str, Any]]:
    """JSON view of output items; binary payloads are written to output_dir when given."""
    result = []
    for index, item in enumerate(items):
        entry: Dict[str, Any] = {"json": item.json_data}
        if item.paired_item is not None:
            entry["pairedItem"] = {"item": item.paired_item.item}
        if item.binary_data:
            entry["binary"] = {}
            for field, binary in item.binary_data.items():
                info = {"fileName": binary.file_name, "mimeType": binary.mime_type, "size": binary.size}
                if output_dir is not None:
                    output_dir.mkdir(parents=True, exist_ok=True)
                    target = output_dir / f"{index}_{binary.file_name or field}"
                    target.write_bytes(binary.data)
                    info["path"] = str(target)
                entry["binary"][field] = info
        result.append(entry)
    return result


def _fail(error: Exception):
    context = ErrorClassifier.classify(error)
    body = f"[bold red]{escape(context.message)}[/bold red]"
    if context.suggestion:
        body += f"\n\n[yellow]{context.suggestion}[/yellow]"
    body += f"\n\n[dim]{escape(context.original_error)}[/dim]"
    console.print(Panel(body, title=f"Error: {context.category.value}", border_style="red"))
    sys.exit(1)


@main.command()
@click.argument("node_id")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=True, help="Node configuration JSON file")
@click.option("--items", "items_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="Input items JSON file")
@click.option("--api-key", envvar="ELEVENLABS_API_KEY", default=None, help="ElevenLabs API key")
@click.option("--continue-on-fail", is_flag=True, help="Turn failing items into error items")
@click.option("--output-dir", type=click.Path(file_okay=False, path_type=Path), default=None, help="Directory for generated audio")
def run(
    node_id: str,
    config_path: Path,
    items_path: Optional[Path],
    api_key: Optional[str],
    continue_on_fail: bool,
    output_dir: Optional[Path],
):
    """Execute a node against items and print the output items."""
    config = _load_json(config_path)
    items = load_items(items_path)
    credentials = {"api_key": api_key} if api_key else None

    try:
        outputs = asyncio.run(
            NodeRegistry.execute_node(
                node_id,
                config,
                items,
                credentials=credentials,
                continue_on_fail=continue_on_fail,
            )
        )
    except EngineError as e:
        _fail(e)

    console.print_json(json.dumps(dump_items(outputs, output_dir)))


@main.command()
def version():
    """Show version information."""
    table = Table(title=settings.PROJECT_NAME, show_header=False)
    table.add_row("Package", "fuse-elevenlabs")
    table.add_row("Version", __version__)
    table.add_row("API", settings.api_base_url)
    table.add_row(
        "Python",
        f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    )

    console.print(table)


if __name__ == "__main__":
    main()
