import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from orbitmap.config import get_settings, load_orbitmap_config
from orbitmap.core.analysis import analyze_session
from orbitmap.core.graph import build_config_graph, build_project_graph
from orbitmap.core.intent import classify, intent_label
from orbitmap.core.layout import layout, layout_project
from orbitmap.core.loader import SnapshotError, load_config_snapshot, load_project_files
from orbitmap.core.recommender import recommend
from orbitmap.core.registry import connection_style, style_nodes
from orbitmap.core.schemas import ConfigSnapshot, GraphData, NodeType, Session
from orbitmap.core.search import filter_nodes
from orbitmap.core.visibility import Focus, connection_kind, focus_state, visible_connections
from orbitmap.core.workspace import flatten_config_to_modules

logger = logging.getLogger(__name__)

APP_HELP = """
orbitmap: 3D orbit maps of an assistant's configuration and of a project's files.

Every command reads a JSON snapshot written by the host and prints either a
table or, with --json, machine-readable output.

CONFIGURATION GRAPH:
  center -> (adapter) -> categories -> skills, mcps, plugins, hooks, rules,
  agents and memory files, placed on concentric layers.

COMMANDS:
- layout:          Positions and styling of every node in a snapshot.
- project-layout:  Orbit layout of a project's source files.
- visible:         Connections drawn for a hover/selection state.
- search:          Find nodes by title, description or tag.
- recommend:       Score modules against a session requirement.
- classify:        Detect the intents of a requirement text.
- analyze:         Full session analysis: intents, modules, next actions.

Tunables live in orbitmap.toml ([layout], [project_layout], [recommender]);
ORBITMAP_LOG_LEVEL controls logging.
"""

app = typer.Typer(name="orbitmap", help=APP_HELP, no_args_is_help=True)

state = {"config_file": None}


def configure_logging(level: str) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _echo_json(payload) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str, ensure_ascii=False))


def _load_snapshot(path: Path) -> ConfigSnapshot:
    try:
        return load_config_snapshot(path)
    except SnapshotError as e:
        print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def _node_types(graph: GraphData) -> Dict[str, NodeType]:
    return {node.id: node.type for node in graph.nodes}


def _filtered_graph(graph: GraphData, query: str, node_types: Optional[List[NodeType]]) -> GraphData:
    """Drop nodes hidden by the query or type filter, and connections left dangling."""
    nodes = filter_nodes(graph.nodes, query, node_types)
    kept = {node.id for node in nodes}
    connections = [c for c in graph.connections if c.source in kept and c.target in kept]
    return GraphData(nodes=nodes, connections=connections)


def _session(name: str, description: str, attach: Optional[List[str]]) -> Session:
    return Session(name=name, description=description, module_ids=attach or [])


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to an orbitmap.toml (default: search upward)."
    ),
):
    """
    orbitmap: layered orbit layouts and module recommendations.
    """
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    state["config_file"] = config_file or settings.config_file


@app.command("layout")
def layout_command(
    snapshot_path: Path = typer.Argument(..., help="Configuration snapshot (JSON)"),
    adapter: bool = typer.Option(False, "--adapter", help="Route categories through the adapter node"),
    query: str = typer.Option("", "--query", "-q", help="Only lay out nodes matching this text"),
    node_types: Optional[List[NodeType]] = typer.Option(
        None, "--type", "-t", help="Node type to show (repeatable; default: all)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Lay out a configuration snapshot and print every node's position and style.
    """
    snapshot = _load_snapshot(snapshot_path)
    config = load_orbitmap_config(config_file=state["config_file"])

    graph = _filtered_graph(build_config_graph(snapshot, include_adapter=adapter), query, node_types)
    positions = layout(graph.nodes, config.layout)
    placed = style_nodes(graph.nodes, positions)

    if json_output:
        _echo_json({
            "nodes": [node.model_dump(mode="json") for node in placed],
            "connections": [conn.model_dump(mode="json") for conn in graph.connections],
        })
        return

    table = Table(title=f"Layout ({len(placed)} nodes, {len(graph.connections)} connections)")
    table.add_column("ID", style="cyan")
    table.add_column("Layer", style="magenta")
    table.add_column("Position")
    table.add_column("Shape")
    table.add_column("Color")

    for node in placed:
        x, y, z = node.position
        table.add_row(
            node.id,
            node.layer.value,
            f"({x:.2f}, {y:.2f}, {z:.2f})",
            node.visual.shape.value,
            node.visual.color,
        )
    print(table)


@app.command("project-layout")
def project_layout_command(
    files_path: Path = typer.Argument(..., help="Project files (JSON list, or path -> source mapping)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Lay out a project's source files around their directories.
    """
    try:
        files = load_project_files(files_path)
    except SnapshotError as e:
        print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    config = load_orbitmap_config(config_file=state["config_file"])
    positions = layout_project(files, config.project_layout)
    graph = build_project_graph(files)

    if json_output:
        _echo_json({
            "positions": {node_id: list(pos) for node_id, pos in positions.items()},
            "nodes": [node.model_dump(mode="json") for node in graph.nodes],
            "connections": [conn.model_dump(mode="json") for conn in graph.connections],
        })
        return

    table = Table(title=f"Project layout ({len(files)} files)")
    table.add_column("File", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Importance", justify="right")
    table.add_column("Position")

    for file in sorted(files, key=lambda f: f.importance, reverse=True):
        x, y, z = positions[file.id]
        table.add_row(file.id, file.type.value, f"{file.importance:.2f}", f"({x:.2f}, {y:.2f}, {z:.2f})")
    print(table)


@app.command("visible")
def visible_command(
    snapshot_path: Path = typer.Argument(..., help="Configuration snapshot (JSON)"),
    hover: Optional[str] = typer.Option(None, "--hover", help="Id of the hovered node"),
    select: Optional[str] = typer.Option(None, "--select", help="Id of the selected node"),
    adapter: bool = typer.Option(False, "--adapter", help="Route categories through the adapter node"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the connections drawn for a hover/selection state.
    """
    snapshot = _load_snapshot(snapshot_path)
    graph = build_config_graph(snapshot, include_adapter=adapter)
    node_types = _node_types(graph)
    focus = Focus(hovered=hover, selected=select)

    rows = []
    for conn in visible_connections(graph.connections, focus, node_types):
        kind = connection_kind(conn, node_types)
        highlighted, dimmed = focus_state(conn, focus)
        style = connection_style(kind, highlighted, dimmed)
        rows.append({
            "id": conn.id,
            "source": conn.source,
            "target": conn.target,
            "kind": kind.value,
            "highlighted": highlighted,
            "dimmed": dimmed,
            "color": style.color,
            "width": style.width,
            "opacity": style.opacity,
            "dashed": style.dashed,
        })

    if json_output:
        _echo_json(rows)
        return

    table = Table(title=f"Visible connections ({len(rows)})")
    table.add_column("Source", style="cyan")
    table.add_column("Target", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("State")

    for row in rows:
        status = "highlighted" if row["highlighted"] else "dimmed" if row["dimmed"] else "normal"
        table.add_row(row["source"], row["target"], row["kind"], status)
    print(table)


@app.command("search")
def search_command(
    snapshot_path: Path = typer.Argument(..., help="Configuration snapshot (JSON)"),
    query: str = typer.Argument("", help="Substring to look for"),
    node_types: Optional[List[NodeType]] = typer.Option(
        None, "--type", "-t", help="Node type to keep (repeatable; default: all)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Find nodes by title, description or tag.
    """
    snapshot = _load_snapshot(snapshot_path)
    graph = build_config_graph(snapshot)
    results = filter_nodes(graph.nodes, query, node_types)

    if json_output:
        _echo_json([node.model_dump(mode="json") for node in results])
        return

    table = Table(title=f"Search: '{query}' ({len(results)} hits)")
    table.add_column("ID", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Description")
    for node in results:
        table.add_row(node.id, node.type.value, node.description)
    print(table)


@app.command("recommend")
def recommend_command(
    snapshot_path: Path = typer.Argument(..., help="Configuration snapshot (JSON)"),
    name: str = typer.Option(..., "--name", "-n", help="Session name"),
    description: str = typer.Option("", "--description", "-d", help="Session requirement"),
    attach: Optional[List[str]] = typer.Option(None, "--attach", "-a", help="Already attached module id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Score every module against a session name and requirement.
    """
    snapshot = _load_snapshot(snapshot_path)
    config = load_orbitmap_config(config_file=state["config_file"])
    modules = flatten_config_to_modules(snapshot)

    recommendations = recommend(name, description, modules, attach or [], config.recommender)

    if json_output:
        _echo_json([rec.model_dump(mode="json") for rec in recommendations])
        return

    if not recommendations:
        print("[yellow]No matching modules.[/yellow]")
        return

    table = Table(title="Recommended modules")
    table.add_column("Module", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Reason")
    for rec in recommendations:
        table.add_row(rec.module_id, f"{rec.score:.2f}", rec.reason)
    print(table)


@app.command("classify")
def classify_command(
    text: str = typer.Argument(..., help="Requirement text"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Detect the intents of a requirement text.
    """
    intents = classify(text)

    if json_output:
        _echo_json(intents)
        return

    for intent in intents:
        print(f"[cyan]{intent}[/cyan]  {intent_label(intent)}")


@app.command("analyze")
def analyze_command(
    snapshot_path: Path = typer.Argument(..., help="Configuration snapshot (JSON)"),
    name: str = typer.Option(..., "--name", "-n", help="Session name"),
    description: str = typer.Option("", "--description", "-d", help="Session requirement"),
    attach: Optional[List[str]] = typer.Option(None, "--attach", "-a", help="Already attached module id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Analyze a session: intents, recommended modules and suggested actions.
    """
    snapshot = _load_snapshot(snapshot_path)
    config = load_orbitmap_config(config_file=state["config_file"])
    modules = flatten_config_to_modules(snapshot)

    session = _session(name, description, attach)
    analysis = analyze_session(session, modules, config.recommender)

    if json_output:
        _echo_json(analysis.model_dump(mode="json"))
        return

    print(analysis.summary)
    print()
    for action in analysis.suggested_actions:
        print(f"[bold]{action.label}[/bold] ({action.type.value}): {action.description}")


if __name__ == "__main__":
    app()
