"""
Tier-1 Gateway Listing.

Collects, per Tier-1 gateway, its Locale Services (and through them the
bound Edge Cluster) and whether any NAT rule is configured on it.

A failure fetching the gateway list or a gateway's Locale Services aborts
the listing. NAT lookups degrade to UNKNOWN instead.
"""

from collections.abc import AsyncIterator

from nsx_edge.core.exceptions import NSXError
from nsx_edge.core.logging import get_logger, log_with_source
from nsx_edge.policy.client import NSXClient
from nsx_edge.policy.models import (
    GatewayReport,
    LocaleService,
    NatStatus,
    Tier1Gateway,
    parse_resources,
)

logger = get_logger(__name__)

TIER1S_PATH = "/tier-1s"


def tier1_path(tier1_id: str) -> str:
    return f"{TIER1S_PATH}/{tier1_id}"


def locale_services_path(tier1_id: str) -> str:
    return f"{tier1_path(tier1_id)}/locale-services"


def locale_service_path(tier1_id: str, locale_service_id: str) -> str:
    return f"{locale_services_path(tier1_id)}/{locale_service_id}"


def nat_path(tier1_id: str) -> str:
    return f"{tier1_path(tier1_id)}/nat"


def nat_rules_path(tier1_id: str, nat_id: str) -> str:
    return f"{nat_path(tier1_id)}/{nat_id}/nat-rules"


async def list_tier1_gateways(client: NSXClient) -> list[Tier1Gateway]:
    """All Tier-1 gateways, in API order."""
    results = await client.list_results(TIER1S_PATH)
    gateways = parse_resources(Tier1Gateway, results, TIER1S_PATH)
    log_with_source(logger, "policy", "info", "Tier-1 gateways found", count=len(gateways))
    return gateways


async def list_locale_services(client: NSXClient, tier1_id: str) -> list[LocaleService]:
    """Locale Services of a Tier-1 gateway, in API order."""
    path = locale_services_path(tier1_id)
    results = await client.list_results(path)
    return parse_resources(LocaleService, results, path)


async def check_nat_status(client: NSXClient, tier1_id: str) -> NatStatus:
    """
    Report whether a Tier-1 gateway has NAT rules.

    Returns:
        PRESENT as soon as one NAT service holds a rule, NONE when there
        are no NAT services or all of them are empty, UNKNOWN when the
        NAT services themselves cannot be read.
    """
    try:
        nat_services = await client.list_results(nat_path(tier1_id))
    except NSXError as e:
        log_with_source(
            logger, "policy", "warning", "NAT lookup failed",
            tier1_id=tier1_id, error=e.message,
        )
        return NatStatus.UNKNOWN

    for nat_service in nat_services:
        nat_id = nat_service.get("id") if isinstance(nat_service, dict) else None
        if not nat_id or not isinstance(nat_id, str):
            log_with_source(
                logger, "policy", "warning", "Skipping malformed NAT service entry",
                tier1_id=tier1_id, entry=repr(nat_service),
            )
            continue
        try:
            rules = await client.list_results(nat_rules_path(tier1_id, nat_id))
        except NSXError as e:
            # A NAT service whose rules cannot be read counts as empty.
            log_with_source(
                logger, "policy", "warning", "NAT rule lookup failed",
                tier1_id=tier1_id, nat_id=nat_id, error=e.message,
            )
            continue
        if rules:
            return NatStatus.PRESENT

    return NatStatus.NONE


async def build_gateway_report(client: NSXClient, gateway: Tier1Gateway) -> GatewayReport:
    locale_services = await list_locale_services(client, gateway.id)
    nat_status = await check_nat_status(client, gateway.id)
    return GatewayReport(
        gateway=gateway,
        locale_services=locale_services,
        nat_status=nat_status,
    )


async def iter_gateway_reports(
    client: NSXClient,
    gateways: list[Tier1Gateway],
) -> AsyncIterator[GatewayReport]:
    """Yield one report per Tier-1 gateway, as soon as each is complete."""
    for gateway in gateways:
        yield await build_gateway_report(client, gateway)
