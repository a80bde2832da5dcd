"""
Edge Cluster Commands.

Listing of the Edge Clusters at the configured site and enforcement point,
and attach/move/detach of a Tier-1 gateway's Edge Cluster.
"""

from typing import Optional

import typer
from rich.markup import escape

from nsx_edge.cli.commands.gateways import SEPARATOR, field_line
from nsx_edge.cli.state import CLIState, console, prog_name, run
from nsx_edge.policy.edge_clusters import list_edge_clusters
from nsx_edge.policy.models import EdgeCluster, ReassignmentResult
from nsx_edge.policy.reassign import reassign_edge_cluster


def render_edge_cluster(edge_cluster: EdgeCluster) -> list[str]:
    """Text lines shown for one Edge Cluster, separator included."""
    return [
        field_line("ID", edge_cluster.id, width=13),
        field_line("DISPLAY_NAME", edge_cluster.display_name, width=13),
        field_line("PATH", edge_cluster.path, width=13),
        field_line("MEMBERS", edge_cluster.member_count, width=13),
        SEPARATOR,
    ]


def list_edge_clusters_command(ctx: typer.Context) -> None:
    """
    List Edge Clusters for the configured SITE_ID and ENFORCEMENT_POINT_ID.

    Examples:
        nsx-t1-edge list-edge-clusters
    """
    run(ctx, _list_edge_clusters)


async def _list_edge_clusters(state: CLIState) -> None:
    """Async implementation of list-edge-clusters."""
    settings = state.resolve_settings()
    async with state.client() as client:
        edge_clusters = await list_edge_clusters(
            client, settings.site_id, settings.enforcement_point_id,
        )

    console.print(
        f"Listing Edge Clusters (site={escape(settings.site_id)}, "
        f"enforcement-point={escape(settings.enforcement_point_id)})"
    )
    console.print("=" * 79)
    for edge_cluster in edge_clusters:
        for line in render_edge_cluster(edge_cluster):
            console.print(line)


def _print_reassignment(result: ReassignmentResult, prog: str) -> None:
    if result.discovered:
        console.print(f"Using Locale Service: {escape(str(result.locale_service_id))}")
    console.print(f"Tier-1 _protection       : {result.tier1_protection.value}")
    console.print(f"LocaleService _protection: {result.locale_service_protection.value}")
    if result.overwrite:
        console.print("[yellow]Protected object: request sent with X-Allow-Overwrite: true[/yellow]")

    verb = "Detached Edge Cluster from" if result.detach else "Attached Edge Cluster on"
    console.print(f"{verb} Locale Service '{escape(str(result.locale_service_id))}'.")
    console.print("Done. Verify with:")
    console.print(f"  {escape(prog)} list")


def change_edge_cluster(
    ctx: typer.Context,
    tier1_id: str = typer.Argument(..., help="Tier-1 gateway ID"),
    edge_cluster_path: str = typer.Argument(..., help="Policy path of the Edge Cluster"),
    locale_service_id: Optional[str] = typer.Argument(None, help="Locale Service ID (default: first listed)"),
) -> None:
    """
    Change the Edge Cluster for a Tier-1 gateway (attach or move).

    Examples:
        nsx-t1-edge change-edge-cluster t1-gw-01 /infra/sites/default/enforcement-points/default/edge-clusters/edge-cluster-01
    """
    console.print("Changing Edge Cluster:")
    console.print(f"  Tier-1 ID        : {escape(tier1_id)}")
    console.print(f"  Edge Cluster Path: {escape(edge_cluster_path)}")
    prog = prog_name(ctx)

    async def _change(state: CLIState) -> None:
        async with state.client() as client:
            result = await reassign_edge_cluster(
                client, tier1_id, edge_cluster_path, locale_service_id,
            )
        _print_reassignment(result, prog)

    run(ctx, _change)


def attach_edge_cluster(
    ctx: typer.Context,
    tier1_id: str = typer.Argument(..., help="Tier-1 gateway ID"),
    edge_cluster_path: str = typer.Argument(..., help="Policy path of the Edge Cluster"),
    locale_service_id: Optional[str] = typer.Argument(None, help="Locale Service ID (default: first listed)"),
) -> None:
    """
    Explicit alias for change-edge-cluster.
    """
    change_edge_cluster(ctx, tier1_id, edge_cluster_path, locale_service_id)


def detach_edge_cluster(
    ctx: typer.Context,
    tier1_id: str = typer.Argument(..., help="Tier-1 gateway ID"),
    locale_service_id: Optional[str] = typer.Argument(None, help="Locale Service ID (default: first listed)"),
) -> None:
    """
    Detach the Tier-1 gateway from its Edge Cluster by clearing edge_cluster_path.

    Detaching a gateway that has no Locale Service succeeds without changes.

    Examples:
        nsx-t1-edge detach-edge-cluster t1-gw-01
    """
    console.print("Detaching Edge Cluster:")
    console.print(f"  Tier-1 ID : {escape(tier1_id)}")
    prog = prog_name(ctx)

    async def _detach(state: CLIState) -> None:
        async with state.client() as client:
            result = await reassign_edge_cluster(client, tier1_id, None, locale_service_id)
        if result.skipped:
            console.print(
                f"No Locale Services found for Tier-1 '{escape(tier1_id)}'. Nothing to detach."
            )
            return
        _print_reassignment(result, prog)

    run(ctx, _detach)
