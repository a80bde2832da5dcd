"""Unit tests for Edge Cluster listing."""

import pytest

from nsx_edge.core.exceptions import NSXHTTPError, ResponseFormatError
from nsx_edge.policy.edge_clusters import edge_clusters_path, list_edge_clusters


class TestEdgeClustersPath:
    def test_path(self):
        assert edge_clusters_path("default", "default") == (
            "/sites/default/enforcement-points/default/edge-clusters"
        )


class TestListEdgeClusters:
    @pytest.mark.asyncio
    async def test_member_count_matches_members(self, make_client, fake_nsx):
        fake_nsx.add_edge_cluster("edge-cluster-01", member_count=2)
        fake_nsx.add_edge_cluster("edge-cluster-02", member_count=0)

        async with make_client(fake_nsx) as client:
            edge_clusters = await list_edge_clusters(client, "default", "default")

        assert [ec.id for ec in edge_clusters] == ["edge-cluster-01", "edge-cluster-02"]
        first = edge_clusters[0]
        assert first.member_count == len(fake_nsx.edge_clusters[("default", "default")][0]["members"])
        assert first.member_count == 2
        assert first.path == "/infra/sites/default/enforcement-points/default/edge-clusters/edge-cluster-01"
        assert edge_clusters[1].member_count == 0

    @pytest.mark.asyncio
    async def test_uses_given_site_and_enforcement_point(self, make_client, fake_nsx):
        fake_nsx.add_edge_cluster("ec-default", member_count=1)
        fake_nsx.add_edge_cluster("ec-remote", member_count=3, site="site-b", enforcement_point="ep-2")

        async with make_client(fake_nsx) as client:
            edge_clusters = await list_edge_clusters(client, "site-b", "ep-2")

        assert [ec.id for ec in edge_clusters] == ["ec-remote"]
        assert fake_nsx.requests[0].url.path.endswith(
            "/sites/site-b/enforcement-points/ep-2/edge-clusters"
        )

    @pytest.mark.asyncio
    async def test_empty(self, make_client, fake_nsx):
        async with make_client(fake_nsx) as client:
            assert await list_edge_clusters(client, "default", "default") == []

    @pytest.mark.asyncio
    async def test_error_propagates(self, make_client, fake_nsx):
        fake_nsx.fail("GET", "/sites/default/enforcement-points/default/edge-clusters", 403)

        async with make_client(fake_nsx) as client:
            with pytest.raises(NSXHTTPError) as exc_info:
                await list_edge_clusters(client, "default", "default")

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_malformed_item(self, make_client, fake_nsx):
        fake_nsx.edge_clusters[("default", "default")] = [{"display_name": "no id", "members": []}]

        async with make_client(fake_nsx) as client:
            with pytest.raises(ResponseFormatError, match="malformed EdgeCluster"):
                await list_edge_clusters(client, "default", "default")
