"""Edge Cluster listing for a site and enforcement point."""

from nsx_edge.policy.client import NSXClient
from nsx_edge.policy.models import EdgeCluster, parse_resources


def edge_clusters_path(site_id: str, enforcement_point_id: str) -> str:
    return f"/sites/{site_id}/enforcement-points/{enforcement_point_id}/edge-clusters"


async def list_edge_clusters(
    client: NSXClient,
    site_id: str,
    enforcement_point_id: str,
) -> list[EdgeCluster]:
    """All Edge Clusters realized at the given enforcement point, in API order."""
    path = edge_clusters_path(site_id, enforcement_point_id)
    results = await client.list_results(path)
    return parse_resources(EdgeCluster, results, path)
