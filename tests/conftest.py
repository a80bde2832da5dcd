"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

NSX Manager:
    Tests never reach a real manager. FakeNSX keeps Tier-1 gateways, Locale
    Services, NAT services and Edge Clusters in memory and answers the
    Policy API paths this tool uses through httpx.MockTransport. Every
    request is recorded so tests can assert on what was sent.
"""

import copy
import json
import logging
import re
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from nsx_edge.core.config import POLICY_API_ROOT, Settings
from nsx_edge.policy.client import NSXClient

MANAGER = "nsx-test.lab.local"


# =============================================================================
# Fake NSX Policy API
# =============================================================================


class FakeNSX:
    """In-memory stand-in for the parts of the NSX Policy API used here."""

    def __init__(self, page_size: int | None = None) -> None:
        self.tier1s: dict[str, dict[str, Any]] = {}
        self.locale_services: dict[str, dict[str, dict[str, Any]]] = {}
        self.nat_rules: dict[str, dict[str, list[dict[str, Any]]]] = {}
        self.edge_clusters: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, str], int] = {}
        self.requests: list[httpx.Request] = []
        self.page_size = page_size

    # -- seeding --------------------------------------------------------------

    def add_tier1(
        self,
        tier1_id: str,
        display_name: str | None = None,
        protection: str | None = "NOT_PROTECTED",
    ) -> dict[str, Any]:
        document = {
            "resource_type": "Tier1",
            "id": tier1_id,
            "display_name": display_name or tier1_id,
            "path": f"/infra/tier-1s/{tier1_id}",
            "_revision": 0,
        }
        if protection is not None:
            document["_protection"] = protection
        self.tier1s[tier1_id] = document
        self.locale_services.setdefault(tier1_id, {})
        self.nat_rules.setdefault(tier1_id, {})
        return document

    def add_locale_service(
        self,
        tier1_id: str,
        ls_id: str,
        edge_cluster_path: str | None = None,
        protection: str | None = "NOT_PROTECTED",
    ) -> dict[str, Any]:
        document = {
            "resource_type": "LocaleServices",
            "id": ls_id,
            "display_name": ls_id,
            "path": f"/infra/tier-1s/{tier1_id}/locale-services/{ls_id}",
            "parent_path": f"/infra/tier-1s/{tier1_id}",
            "route_redistribution_types": ["TIER1_CONNECTED"],
            "_links": [{"rel": "self", "href": f"/policy/api/v1/infra/tier-1s/{tier1_id}/locale-services/{ls_id}"}],
            "_self": {"rel": "self", "href": f"/policy/api/v1/infra/tier-1s/{tier1_id}/locale-services/{ls_id}"},
            "_revision": 3,
        }
        if edge_cluster_path is not None:
            document["edge_cluster_path"] = edge_cluster_path
        if protection is not None:
            document["_protection"] = protection
        self.locale_services[tier1_id][ls_id] = document
        return document

    def add_nat_service(self, tier1_id: str, nat_id: str, rule_count: int = 0) -> None:
        self.nat_rules[tier1_id][nat_id] = [
            {"id": f"rule-{i}", "action": "SNAT"} for i in range(rule_count)
        ]

    def add_edge_cluster(
        self,
        ec_id: str,
        member_count: int,
        site: str = "default",
        enforcement_point: str = "default",
    ) -> dict[str, Any]:
        document = {
            "resource_type": "PolicyEdgeCluster",
            "id": ec_id,
            "display_name": ec_id.upper(),
            "path": f"/infra/sites/{site}/enforcement-points/{enforcement_point}/edge-clusters/{ec_id}",
            "members": [{"member_index": i} for i in range(member_count)],
        }
        self.edge_clusters.setdefault((site, enforcement_point), []).append(document)
        return document

    def fail(self, method: str, path: str, status_code: int) -> None:
        """Answer method+path (relative to the infra root) with an error status."""
        self.failures[(method, path)] = status_code

    # -- inspection -----------------------------------------------------------

    @property
    def mutations(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method in {"POST", "PUT", "PATCH", "DELETE"}]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    # -- request handling -----------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if not path.startswith(POLICY_API_ROOT):
            return _error(404, f"Unknown path {path}")
        path = path[len(POLICY_API_ROOT):]

        status_code = self.failures.get((request.method, path))
        if status_code is not None:
            return _error(status_code, f"Injected failure for {path}")

        if request.method == "GET":
            return self._get(request, path)
        if request.method == "PUT":
            return self._put(request, path)
        return _error(405, f"{request.method} not supported")

    def _get(self, request: httpx.Request, path: str) -> httpx.Response:
        if path == "/tier-1s":
            return self._collection(request, list(self.tier1s.values()))

        match = re.fullmatch(r"/tier-1s/([^/]+)(/.*)?", path)
        if match:
            tier1_id, rest = match.group(1), match.group(2) or ""
            if tier1_id not in self.tier1s:
                return _error(404, f"Tier1 {tier1_id} not found")
            if rest == "":
                return httpx.Response(200, json=self.tier1s[tier1_id])
            if rest == "/locale-services":
                return self._collection(request, list(self.locale_services[tier1_id].values()))
            ls_match = re.fullmatch(r"/locale-services/([^/]+)", rest)
            if ls_match:
                document = self.locale_services[tier1_id].get(ls_match.group(1))
                if document is None:
                    return _error(404, "Locale Service not found")
                return httpx.Response(200, json=document)
            if rest == "/nat":
                services = [{"id": nat_id} for nat_id in self.nat_rules[tier1_id]]
                return self._collection(request, services)
            rules_match = re.fullmatch(r"/nat/([^/]+)/nat-rules", rest)
            if rules_match:
                rules = self.nat_rules[tier1_id].get(rules_match.group(1))
                if rules is None:
                    return _error(404, "NAT service not found")
                return self._collection(request, rules)

        ec_match = re.fullmatch(r"/sites/([^/]+)/enforcement-points/([^/]+)/edge-clusters", path)
        if ec_match:
            return self._collection(request, self.edge_clusters.get(ec_match.groups(), []))

        return _error(404, f"Unknown path {path}")

    def _put(self, request: httpx.Request, path: str) -> httpx.Response:
        match = re.fullmatch(r"/tier-1s/([^/]+)/locale-services/([^/]+)", path)
        if not match:
            return _error(405, "PUT not supported here")
        tier1_id, ls_id = match.groups()
        current = self.locale_services.get(tier1_id, {}).get(ls_id)
        if current is None:
            return _error(404, "Locale Service not found")

        body = json.loads(request.content)
        if "_links" in body or "_self" in body:
            return _error(400, "Field _links is read only")
        if body.get("_revision") != current.get("_revision"):
            return _error(412, "The object was modified by somebody else")

        protection = current.get("_protection")
        tier1_protection = self.tier1s[tier1_id].get("_protection")
        overwrite = request.headers.get("X-Allow-Overwrite") == "true"
        if (protection in {"PROTECTED", "REQUIRE_OVERRIDE"}
                or tier1_protection in {"PROTECTED", "REQUIRE_OVERRIDE"}) and not overwrite:
            return _error(403, "Principal cannot modify a protected object")

        stored = copy.deepcopy(current)
        stored.update(body)
        if body.get("edge_cluster_path") is None:
            stored.pop("edge_cluster_path", None)
        stored["_revision"] = current["_revision"] + 1
        self.locale_services[tier1_id][ls_id] = stored
        return httpx.Response(200, json=stored)

    def _collection(self, request: httpx.Request, items: list[dict[str, Any]]) -> httpx.Response:
        items = copy.deepcopy(items)
        if self.page_size is None:
            return httpx.Response(200, json={"results": items, "result_count": len(items)})

        start = int(request.url.params.get("cursor", "0"))
        page = items[start:start + self.page_size]
        body: dict[str, Any] = {"results": page, "result_count": len(items)}
        if start + self.page_size < len(items):
            body["cursor"] = str(start + self.page_size)
        return httpx.Response(200, json=body)


def _error(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"httpStatus": "ERROR", "error_code": status_code, "error_message": message},
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_nsx_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's NSX_* variables out of every test."""
    for name in (
        "NSX_MANAGER",
        "NSX_USER",
        "NSX_PASS",
        "SITE_ID",
        "ENFORCEMENT_POINT_ID",
        "NSX_DEBUG",
        "NSX_DEBUG_LOG",
        "NSX_VERIFY_TLS",
        "NSX_TIMEOUT",
        "NSX_GET_RETRIES",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at the fake manager, diagnostic log under tmp_path."""
    return Settings(
        NSX_MANAGER=MANAGER,
        NSX_USER="admin",
        NSX_PASS="test-password",
        NSX_DEBUG_LOG=tmp_path / "nsx_api_debug.log",
    )


@pytest.fixture
def fake_nsx() -> FakeNSX:
    return FakeNSX()


@pytest.fixture
def make_client(settings: Settings) -> Callable[..., NSXClient]:
    """Build NSXClient instances wired to a FakeNSX or any handler."""

    def _make(
        backend: FakeNSX | Callable[[httpx.Request], httpx.Response],
        **overrides: Any,
    ) -> NSXClient:
        handler = getattr(backend, "handler", backend)
        client_settings = settings.model_copy(update=overrides) if overrides else settings
        return NSXClient(client_settings, transport=httpx.MockTransport(handler), retry_wait=0)

    return _make


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Commands reconfigure logging; put the root logger back afterwards."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in saved_handlers:
            handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)
