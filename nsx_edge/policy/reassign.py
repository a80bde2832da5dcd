"""
Edge Cluster Reassignment.

Attaches, moves or detaches the Edge Cluster of a Tier-1 gateway by
rewriting `edge_cluster_path` on one of its Locale Services.

Steps:
    1. Pick the Locale Service: the one named, or the first the API lists.
    2. Fetch its full document, `_revision` included, so the PUT carries
       every field NSX requires and fails on concurrent modification.
    3. Read the protection flags of the gateway and the Locale Service.
    4. Send X-Allow-Overwrite only if either flag is PROTECTED or
       REQUIRE_OVERRIDE.
    5. PUT the document back with the new path (null to detach) and
       without the hyperlink metadata NSX refuses on write.

Nothing is retried or rolled back; the first error ends the operation.
"""

import copy
from typing import Any

from nsx_edge.core.exceptions import LocaleServiceNotFoundError, ResponseFormatError
from nsx_edge.core.logging import get_logger, log_with_source
from nsx_edge.policy.client import NSXClient
from nsx_edge.policy.gateways import list_locale_services, locale_service_path, tier1_path
from nsx_edge.policy.models import ReassignmentResult
from nsx_edge.policy.protection import get_protection, protection_of, requires_override

logger = get_logger(__name__)

READ_ONLY_LINK_FIELDS = ("_links", "_self")


def build_locale_service_update(
    document: dict[str, Any],
    edge_cluster_path: str | None,
) -> dict[str, Any]:
    """
    Build the Locale Service document to PUT back.

    Args:
        document: Locale Service as returned by GET. Left untouched.
        edge_cluster_path: New Edge Cluster path, None to detach.

    Returns:
        Deep copy with edge_cluster_path replaced and link metadata removed.
    """
    updated = copy.deepcopy(document)
    for field in READ_ONLY_LINK_FIELDS:
        updated.pop(field, None)
    updated["edge_cluster_path"] = edge_cluster_path
    return updated


async def resolve_locale_service_id(client: NSXClient, tier1_id: str) -> str | None:
    """First Locale Service of the gateway in API order, None if it has none."""
    locale_services = await list_locale_services(client, tier1_id)
    if not locale_services:
        return None
    return locale_services[0].id


async def reassign_edge_cluster(
    client: NSXClient,
    tier1_id: str,
    edge_cluster_path: str | None,
    locale_service_id: str | None = None,
) -> ReassignmentResult:
    """
    Point a Tier-1 gateway's Locale Service at another Edge Cluster.

    Args:
        client: Policy API client
        tier1_id: Tier-1 gateway ID
        edge_cluster_path: Policy path of the Edge Cluster, None to detach
        locale_service_id: Locale Service to update, discovered when omitted

    Returns:
        ReassignmentResult describing what was sent. When detaching from a
        gateway without Locale Services nothing is sent and the result is
        marked skipped.

    Raises:
        LocaleServiceNotFoundError: Attaching to a gateway without Locale Services
        NSXError: Any failing API call
    """
    detach = edge_cluster_path is None
    discovered = False

    if not locale_service_id:
        locale_service_id = await resolve_locale_service_id(client, tier1_id)
        if locale_service_id is None:
            if detach:
                log_with_source(
                    logger, "policy", "info", "Nothing to detach",
                    tier1_id=tier1_id,
                )
                return ReassignmentResult(
                    tier1_id=tier1_id,
                    edge_cluster_path=None,
                    skipped=True,
                )
            raise LocaleServiceNotFoundError(tier1_id)
        discovered = True

    ls_path = locale_service_path(tier1_id, locale_service_id)
    document = await client.get(ls_path)
    if not isinstance(document, dict):
        raise ResponseFormatError(f"Locale Service '{locale_service_id}' is not a JSON object")

    tier1_protection = await get_protection(client, tier1_path(tier1_id))
    ls_protection = protection_of(document)
    overwrite = requires_override(tier1_protection, ls_protection)

    updated = build_locale_service_update(document, edge_cluster_path)

    log_with_source(
        logger, "policy", "info",
        "Detaching Edge Cluster" if detach else "Attaching Edge Cluster",
        tier1_id=tier1_id,
        locale_service_id=locale_service_id,
        edge_cluster_path=edge_cluster_path,
        overwrite=overwrite,
    )
    await client.put(ls_path, json=updated, allow_overwrite=overwrite)

    return ReassignmentResult(
        tier1_id=tier1_id,
        edge_cluster_path=edge_cluster_path,
        locale_service_id=locale_service_id,
        discovered=discovered,
        tier1_protection=tier1_protection,
        locale_service_protection=ls_protection,
        overwrite=overwrite,
        document=updated,
    )
