"""
CLI Commands.

Organized by the NSX objects they act on.
"""

from nsx_edge.cli.commands.edge_clusters import (
    attach_edge_cluster,
    change_edge_cluster,
    detach_edge_cluster,
    list_edge_clusters_command,
)
from nsx_edge.cli.commands.gateways import list_gateways

__all__ = [
    "attach_edge_cluster",
    "change_edge_cluster",
    "detach_edge_cluster",
    "list_edge_clusters_command",
    "list_gateways",
]
