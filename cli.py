#!/usr/bin/env python3
"""
NSX Tier-1 Edge Cluster CLI.

Lists Tier-1 gateways and Edge Clusters of an NSX Manager and moves a
Tier-1 gateway between Edge Clusters through its Locale Service.
Built with Typer for commands and Rich for formatted output.

Usage:
    python cli.py [--debug] <command> [args]

    python cli.py list
        List Tier-1 gateways with protection, Edge Cluster association, and NAT status.

    python cli.py list-edge-clusters
        List Edge Clusters for the configured SITE_ID and ENFORCEMENT_POINT_ID.

    python cli.py change-edge-cluster <tier1-id> <edge-cluster-path> [<locale-service-id>]
        Change the Edge Cluster for a Tier-1 gateway (attach or move).

    python cli.py attach-edge-cluster <tier1-id> <edge-cluster-path> [<locale-service-id>]
        Explicit alias for change-edge-cluster.

    python cli.py detach-edge-cluster <tier1-id> [<locale-service-id>]
        Clear edge_cluster_path on the Tier-1 gateway's Locale Service.

Environment:
    NSX_MANAGER            NSX Manager hostname or IP (default: nsx-mgr.lab.local)
    NSX_USER               NSX username              (default: admin)
    NSX_PASS               NSX password              (required)
    SITE_ID                Site ID for edge clusters (default: default)
    ENFORCEMENT_POINT_ID   Enforcement point ID      (default: default)
    NSX_DEBUG              Set to 1 to log API traffic to NSX_DEBUG_LOG
    NSX_DEBUG_LOG          Diagnostic log path       (default: ./nsx_api_debug.log)
    NSX_VERIFY_TLS         Verify the manager certificate (default: 0)
    NSX_TIMEOUT            Request timeout in seconds (default: 30)
    NSX_GET_RETRIES        Retries for failed GET requests (default: 0)

Options:
    --debug, -d       Log every API request and response, truncating the log first
    --verbose, -v     Enable verbose output (INFO level logging)
    --env-file        Read settings from a .env file
    --help            Show help message
"""

from pathlib import Path
from typing import Optional

import typer

from nsx_edge.cli.commands import (
    attach_edge_cluster,
    change_edge_cluster,
    detach_edge_cluster,
    list_edge_clusters_command,
    list_gateways,
)
from nsx_edge.cli.state import CLIState

app = typer.Typer(
    name="nsx-t1-edge",
    help="NSX Tier-1 gateway Edge Cluster tool - list gateways and Edge Clusters, attach or detach Edge Clusters.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("list")(list_gateways)
app.command("list-edge-clusters")(list_edge_clusters_command)
app.command("change-edge-cluster")(change_edge_cluster)
app.command("attach-edge-cluster")(attach_edge_cluster)
app.command("detach-edge-cluster")(detach_edge_cluster)


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Log every API request and response to the diagnostic log (truncated first)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="Read settings from this .env file before the environment",
    ),
) -> None:
    """
    NSX Tier-1 gateway Edge Cluster tool.

    Settings come from NSX_MANAGER, NSX_USER, NSX_PASS, SITE_ID,
    ENFORCEMENT_POINT_ID and NSX_DEBUG.
    """
    state = ctx.ensure_object(CLIState)
    state.debug = state.debug or debug
    state.verbose = state.verbose or verbose
    if env_file is not None:
        state.env_file = env_file


if __name__ == "__main__":
    app()
