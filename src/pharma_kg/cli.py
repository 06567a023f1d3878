"""
Command-line interface for pharma_kg.

Commands operate on a freshly built seed graph:
- resolve: Resolve names/aliases to canonical entities
- related: Entities related to a drug or indication
- path: Shortest relationship path between two entities
- competitors: Competitors of a drug, optionally within an indication
- clusters: Therapeutic/mechanism/structure/indication clusters
- stats: Graph analytics
- enhance: Enhance a search request (optionally fanned out into strategies)
- score: Score and rank study records from a JSON file
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from pharma_kg.errors import PharmaKGError
from pharma_kg.graph import ClusterType, KnowledgeGraph, build_seed_graph
from pharma_kg.log import configure_logging
from pharma_kg.query import Intent, QueryEnhancer
from pharma_kg.scoring import RelevanceScorer

app = typer.Typer(
    name="pharma-kg",
    help="Pharmaceutical knowledge graph, query enhancement and relevance scoring",
    no_args_is_help=True,
)
console = Console()


def _fail(exc: Exception) -> typer.Exit:
    console.print(f"[bold red]Error:[/] {exc}")
    return typer.Exit(code=1)


def _graph() -> KnowledgeGraph:
    return build_seed_graph()


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
):
    """Pharmaceutical search intelligence tools."""
    configure_logging(log_level.upper())


@app.command()
def resolve(
    names: Annotated[list[str], typer.Argument(help="Names, aliases or ids to resolve")],
):
    """Resolve names and aliases to canonical entities."""
    graph = _graph()
    table = Table(title="Resolution")
    table.add_column("Input", style="cyan")
    table.add_column("Id", style="green")
    table.add_column("Name")
    table.add_column("Kind", style="yellow")

    for name in names:
        node_id = graph.resolve(name)
        if node_id is None:
            table.add_row(name, "[red]unresolved[/]", "", "")
            continue
        entity = graph.entity(node_id)
        table.add_row(name, entity.id, entity.name, entity.kind.value)
    console.print(table)


@app.command()
def related(
    name: str = typer.Argument(..., help="Drug or indication"),
    depth: int = typer.Option(2, "--depth", "-d", help="Maximum hops"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum results"),
    min_strength: float = typer.Option(0.1, "--min-strength", "-s", help="Minimum edge strength"),
    rel_types: Annotated[
        list[str] | None, typer.Option("--type", "-t", help="Only follow these relationship types")
    ] = None,
):
    """List entities related to a drug or indication."""
    graph = _graph()
    try:
        results = graph.related_to(
            name, max_results=limit, relationship_types=rel_types,
            min_strength=min_strength, max_depth=depth,
        )
    except (PharmaKGError, ValueError) as exc:
        raise _fail(exc) from exc

    table = Table(title=f"Related to {graph.entity(name).name}")
    table.add_column("Entity", style="cyan")
    table.add_column("Relationship", style="green")
    table.add_column("Strength", justify="right")
    table.add_column("Distance", justify="right")
    for item in results:
        table.add_row(item.entity.name, item.edge.type.value, f"{item.strength:.2f}", str(item.distance))
    console.print(table)


@app.command()
def path(
    source: str = typer.Argument(..., help="Start entity"),
    target: str = typer.Argument(..., help="End entity"),
    max_depth: int = typer.Option(5, "--max-depth", "-d", help="Maximum hops"),
):
    """Find the shortest relationship path between two entities."""
    graph = _graph()
    try:
        found = graph.shortest_path(source, target, max_depth=max_depth)
    except PharmaKGError as exc:
        raise _fail(exc) from exc

    if found is None:
        console.print(f"[yellow]No path within {max_depth} hops[/]")
        raise typer.Exit(code=1)
    console.print(f"[bold]{found}[/]")
    console.print(f"hops={found.distance} strength={found.strength:.4f} type={found.path_type}")


@app.command()
def competitors(
    drug: str = typer.Argument(..., help="Drug name or alias"),
    indication: str | None = typer.Option(None, "--indication", "-i", help="Indication context"),
):
    """List competitors of a drug."""
    graph = _graph()
    try:
        ids = graph.competitors_of(drug, indication)
    except PharmaKGError as exc:
        raise _fail(exc) from exc

    if not ids:
        console.print("[yellow]No competitors known[/]")
        return
    for competitor_id in ids:
        entity = graph.entity(competitor_id)
        console.print(f"- {entity.name} ({entity.company or 'unknown company'})")


@app.command()
def clusters(
    cluster_type: ClusterType = typer.Option(ClusterType.THERAPEUTIC, "--type", "-t", help="Cluster type"),
    min_size: int = typer.Option(3, "--min-size", help="Minimum members"),
    min_coherence: float = typer.Option(0.0, "--min-coherence", help="Minimum coherence"),
):
    """Show entity clusters."""
    graph = _graph()
    found = graph.cluster(min_size=min_size, cluster_type=cluster_type, min_coherence=min_coherence)

    table = Table(title=f"{cluster_type.value.title()} clusters")
    table.add_column("Cluster", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Coherence", justify="right")
    table.add_column("Members")
    for item in found:
        table.add_row(item.name, str(item.size), f"{item.coherence:.2f}", ", ".join(item.members))
    console.print(table)


@app.command()
def stats():
    """Show graph analytics."""
    result = _graph().analytics()
    table = Table(title="Graph Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Nodes", str(result.total_nodes))
    table.add_row("Edges", str(result.total_edges))
    table.add_row("Average degree", str(result.average_degree))
    table.add_row("Density", str(result.density))
    table.add_row("Components", str(result.connected_components))
    table.add_row("Hubs", ", ".join(result.hubs))
    table.add_row("Bridges", ", ".join(result.bridges))
    table.add_row("Clusters", str(len(result.clusters)))
    console.print(table)


@app.command()
def enhance(
    intervention: str | None = typer.Option(None, "--intervention", "-d", help="Drug/intervention"),
    condition: str | None = typer.Option(None, "--condition", "-c", help="Condition"),
    intent: Intent = typer.Option(Intent.GENERAL, "--intent", help="Search intent"),
    params_json: str | None = typer.Option(None, "--params", help="Full SearchParams as JSON"),
    strategies: bool = typer.Option(False, "--strategies", help="Fan out into all search strategies"),
):
    """Enhance a search request with knowledge graph expansions."""
    if params_json:
        try:
            params = json.loads(params_json)
        except json.JSONDecodeError as exc:
            console.print(f"[bold red]Invalid --params JSON:[/] {exc}")
            raise typer.Exit(code=1) from exc
    else:
        params = {"query": {"intervention": intervention, "condition": condition}}

    enhancer = QueryEnhancer(_graph())
    context = {"intent": intent}
    try:
        if strategies:
            results = enhancer.generate_strategies(params, context)
        else:
            results = [enhancer.enhance(params, context)]
    except PharmaKGError as exc:
        raise _fail(exc) from exc

    console.print_json(data=[r.to_dict() for r in results])


@app.command()
def score(
    records_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of study records"),
    drug: str | None = typer.Option(None, "--drug", "-d", help="Primary drug"),
    indication: str | None = typer.Option(None, "--indication", "-i", help="Primary indication"),
    intent: Intent = typer.Option(Intent.GENERAL, "--intent", help="Search intent"),
    company: str | None = typer.Option(None, "--company", help="Your company"),
):
    """Score and rank study records."""
    data = json.loads(records_file.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("studies", [])

    context = {
        "primaryDrug": drug,
        "primaryIndication": indication,
        "intent": intent,
        "userCompany": company,
    }
    try:
        ranked = RelevanceScorer(_graph()).score_all(data, context)
    except PharmaKGError as exc:
        raise _fail(exc) from exc

    table = Table(title="Ranked Records")
    table.add_column("#", justify="right")
    table.add_column("Record", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Category", style="yellow")
    for rank, item in enumerate(ranked, 1):
        label = item.record.nct_id or item.record.title or ", ".join(item.record.interventions)
        table.add_row(str(rank), label, str(item.score), item.relevance_score.category.value)
    console.print(table)


if __name__ == "__main__":
    app()
