"""
CLI interface for Orchestration Core
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict

import click
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from ..core.bootstrap import get_container
from ..core.config import Config
from ..core.execution.errors import GraphValidationError
from ..core.execution.triggers import InvalidIntervalError
from ..core.workspace import Workspace
from ..storage.base import TemplateNotFoundError

console = Console()


def _build_workspace(mode: str = None) -> Workspace:
    if mode:
        Config.MODE = mode
    if not Config.validate():
        console.print("[bold red]❌ Configuration validation failed. Please check your environment variables.[/bold red]")
        sys.exit(1)
    return Workspace(container=get_container(mode=Config.MODE))


def _load_into(workspace: Workspace, graph_file: str = None, template: str = None) -> None:
    try:
        if graph_file:
            with open(graph_file, 'r') as f:
                workspace.load_graph(json.load(f))
        elif template:
            workspace.load_template(template)
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Could not read graph file: {e}")
    except TemplateNotFoundError as e:
        raise click.ClickException(str(e))
    except GraphValidationError as e:
        raise click.ClickException(f"Invalid graph: {e}")


def _format_value(value: Any, limit: int = 200) -> str:
    if value is None:
        return ""
    text = value if isinstance(value, str) else json.dumps(value)
    return text if len(text) <= limit else text[:limit] + "…"


def _print_result(result: Dict[str, Any]) -> None:
    status = result['status']
    style = "green" if result['success'] else ("yellow" if status == 'completed' else "red")

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("Node", style="bold", no_wrap=True)
    table.add_column("Status")
    table.add_column("Output / Error", overflow="fold")
    outcomes = {r['node_id']: r for r in result['node_results']}
    for node_id in result['execution_order']:
        outcome = outcomes.get(node_id)
        state = result['states'].get(node_id, {})
        if outcome is not None and not outcome['success']:
            table.add_row(node_id, "[red]failed[/red]", outcome.get('error') or "")
        else:
            output = state.get('result', state.get('text', state.get('image')))
            table.add_row(node_id, "[green]ok[/green]", _format_value(output))

    console.print(table)
    summary = f"[bold {style}]{status}[/bold {style}] in {result.get('total_execution_time', 0.0):.2f}s"
    if result.get('error'):
        summary += f"\n[dim]{result['error']}[/dim]"
    console.print(Panel(summary, box=box.ROUNDED, border_style=style))


@click.group()
def cli():
    """Orchestration Core - node-graph AI workflow engine"""
    pass


@cli.command()
@click.option('--port', default=None, type=int, help='Port to run the API server on')
@click.option('--mode', type=click.Choice(['solo', 'prod']), default=None, help='Mode: solo or prod')
@click.option('--host', default=None, help='Host to bind to')
def serve(port, mode, host):
    """Run the API server"""
    if mode:
        Config.MODE = mode
    if not Config.validate():
        console.print("[bold red]❌ Configuration validation failed. Please check your environment variables.[/bold red]")
        sys.exit(1)

    host = host or Config.API_HOST
    port = port or Config.API_PORT
    console.print(f"🚀 Starting Orchestration Core API server in {Config.MODE} mode...")
    console.print(f"   Host: {host}")
    console.print(f"   Port: {port}")

    from ..api.server import app
    uvicorn.run(app, host=host, port=port)


@cli.command()
@click.argument('graph_file', required=False, type=click.Path(exists=True, dir_okay=False))
@click.option('--template', '-t', default=None, help='Run a built-in or saved template by name')
@click.option('--mode', type=click.Choice(['solo', 'prod']), default=None, help='Mode: solo or prod')
@click.option('--json', 'as_json', is_flag=True, help='Print the raw run result as JSON')
def run(graph_file, template, mode, as_json):
    """Run a graph once (from a JSON file or a template)"""
    if not graph_file and not template:
        raise click.UsageError("Pass a graph file or --template NAME")
    workspace = _build_workspace(mode)
    _load_into(workspace, graph_file, template)

    with console.status("[bold cyan]Running graph...", spinner="dots"):
        result = asyncio.run(workspace.run())

    if as_json:
        click.echo(json.dumps(result, indent=2, default=str))
    else:
        _print_result(result)
    if result['status'] != 'completed':
        sys.exit(1)


@cli.command()
@click.argument('graph_file', required=False, type=click.Path(exists=True, dir_okay=False))
@click.option('--template', '-t', default=None, help='Template to load')
@click.option('--node', 'node_ids', multiple=True, help='Scheduler node to start (default: all)')
@click.option('--mode', type=click.Choice(['solo', 'prod']), default=None, help='Mode: solo or prod')
def schedule(graph_file, template, node_ids, mode):
    """Start scheduler nodes and keep running until interrupted"""
    if not graph_file and not template:
        raise click.UsageError("Pass a graph file or --template NAME")
    workspace = _build_workspace(mode)
    _load_into(workspace, graph_file, template)

    schedulers = workspace.scheduler_node_ids()
    targets = list(node_ids) or schedulers
    unknown = [node_id for node_id in targets if node_id not in schedulers]
    if not targets:
        raise click.ClickException("Graph has no scheduler nodes")
    if unknown:
        raise click.ClickException(f"Not scheduler nodes: {', '.join(unknown)}")

    async def main():
        for node_id in targets:
            try:
                workspace.toggle_scheduler(node_id)
            except InvalidIntervalError as e:
                raise click.ClickException(f"{node_id}: {e}")
            console.print(
                f"[bold green]✓[/bold green] Scheduler {node_id} every "
                f"{workspace.triggers.interval_of(node_id)}s"
            )
        console.print("[dim]Press Ctrl+C to stop[/dim]")
        last_seen = None
        try:
            while True:
                await asyncio.sleep(0.5)
                if workspace.last_result is not None and workspace.last_result is not last_seen:
                    last_seen = workspace.last_result
                    _print_result(last_seen)
        finally:
            await workspace.shutdown()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        console.print("\n[bold yellow]Schedulers stopped[/bold yellow]")


@cli.command()
@click.option('--mode', type=click.Choice(['solo', 'prod']), default=None, help='Mode: solo or prod')
@click.option('--save', 'save_file', default=None, type=click.Path(exists=True, dir_okay=False),
              help='Save a graph JSON file as a template')
@click.option('--name', default=None, help='Template name (with --save)')
@click.option('--description', default='', help='Template description (with --save)')
@click.option('--delete', 'delete_name', default=None, help='Delete a saved template')
def templates(mode, save_file, name, description, delete_name):
    """List, save or delete templates"""
    workspace = _build_workspace(mode)

    if save_file:
        if not name:
            raise click.UsageError("--save requires --name")
        _load_into(workspace, graph_file=save_file)
        workspace.save_as_template(name, description)
        console.print(f"[bold green]✓[/bold green] Saved template {name!r}")
        return

    if delete_name:
        try:
            workspace.delete_template(delete_name)
        except TemplateNotFoundError as e:
            raise click.ClickException(str(e))
        except ValueError as e:
            raise click.ClickException(str(e))
        console.print(f"[bold green]✓[/bold green] Deleted template {delete_name!r}")
        return

    table = Table(title="Templates", box=box.SIMPLE_HEAVY)
    table.add_column("Name", style="bold cyan", no_wrap=True)
    table.add_column("Nodes", justify="right")
    table.add_column("Description")
    for template in workspace.list_templates():
        table.add_row(template['name'], str(len(template['nodes'])), template['description'])
    console.print(table)


@cli.command(name='node-types')
def node_types():
    """List registered node types"""
    from ..core.execution.node_registry import NODE_REGISTRY

    table = Table(title="Node types", box=box.SIMPLE_HEAVY)
    table.add_column("Type", style="bold cyan", no_wrap=True)
    table.add_column("Category")
    table.add_column("Inputs")
    table.add_column("Outputs")
    table.add_column("Description")
    for definition in NODE_REGISTRY.describe_all():
        table.add_row(
            definition['type'],
            definition['category'],
            ", ".join(definition['inputs']) or "-",
            ", ".join(definition['outputs']) or "-",
            definition['description'],
        )
    console.print(table)


@cli.command()
def config():
    """Show current configuration"""
    console.print(Panel(
        "\n".join([
            f"Mode: {Config.MODE}",
            f"Storage path: {Path(Config.STORAGE_PATH)}",
            f"Gemini model: {Config.GEMINI_MODEL}",
            f"Imagen model: {Config.IMAGEN_MODEL}",
            f"Gemini API key: {'set' if Config.GEMINI_API_KEY else 'not set'}",
            f"Min scheduler interval: {Config.MIN_SCHEDULER_INTERVAL}s",
            f"API: {Config.API_HOST}:{Config.API_PORT}",
        ]),
        title="Orchestration Core configuration",
        box=box.ROUNDED,
        border_style="cyan",
    ))


if __name__ == '__main__':
    cli()
