"""
Tier-1 Gateway Commands.

Lists every Tier-1 gateway with its protection flag, the Edge Cluster of
each Locale Service, and the NAT status.
"""

import typer
from rich.markup import escape

from nsx_edge.cli.state import CLIState, console, run
from nsx_edge.policy.gateways import iter_gateway_reports, list_tier1_gateways
from nsx_edge.policy.models import GatewayReport

SEPARATOR = "-" * 60


def field_line(label: str, value: object, width: int = 14) -> str:
    return f"{label:<{width}}: {escape(str(value))}"


def render_gateway_report(report: GatewayReport) -> list[str]:
    """Text lines shown for one gateway, separator included."""
    gateway = report.gateway
    lines = [
        field_line("TIER1_ID", gateway.id),
        field_line("DISPLAY_NAME", gateway.display_name),
        field_line("PROTECTION", gateway.protection.value),
    ]

    if not report.locale_services:
        lines.append(field_line("EDGE_CLUSTER", "NONE (no locale services)"))
    for locale_service in report.locale_services:
        edge_cluster = locale_service.edge_cluster_path or "NONE"
        lines.append(field_line("EDGE_CLUSTER", f"{edge_cluster} (ls-id={locale_service.id})"))

    lines.append(field_line("NAT_RULES", report.nat_status.value))
    lines.append(SEPARATOR)
    return lines


def list_gateways(ctx: typer.Context) -> None:
    """
    List Tier-1 gateways with protection, Edge Cluster association, and NAT status.

    Examples:
        nsx-t1-edge list
    """
    run(ctx, _list_gateways)


async def _list_gateways(state: CLIState) -> None:
    """Async implementation of list."""
    async with state.client() as client:
        gateways = await list_tier1_gateways(client)
        console.print("Listing Tier-1 gateways, Edge Cluster associations, and NAT status")
        console.print("=" * 66)
        async for report in iter_gateway_reports(client, gateways):
            for line in render_gateway_report(report):
                console.print(line)
