"""
Protection Inspector.

Reads the `_protection` flag NSX places on policy objects. Objects flagged
PROTECTED or REQUIRE_OVERRIDE reject updates unless the request carries
X-Allow-Overwrite: true.
"""

from typing import Any

from nsx_edge.core.exceptions import NSXHTTPError, ResponseFormatError
from nsx_edge.core.logging import get_logger, log_with_source
from nsx_edge.policy.client import NSXClient
from nsx_edge.policy.models import Protection

logger = get_logger(__name__)


def protection_of(document: Any) -> Protection:
    """Protection flag of an already fetched document."""
    if not isinstance(document, dict):
        return Protection.UNKNOWN
    return Protection.parse(document.get("_protection"))


async def get_protection(client: NSXClient, path: str) -> Protection:
    """
    Fetch an object and return its protection flag.

    Error responses and documents without a readable `_protection` field
    yield Protection.UNKNOWN. Connection failures propagate.
    """
    try:
        document = await client.get(path)
    except (NSXHTTPError, ResponseFormatError) as e:
        log_with_source(
            logger, "policy", "warning", "Protection lookup failed",
            path=path, error=e.message,
        )
        return Protection.UNKNOWN
    protection = protection_of(document)
    log_with_source(logger, "policy", "debug", "Protection read", path=path, protection=protection.value)
    return protection


def requires_override(*flags: Protection) -> bool:
    """True when any flag demands the overwrite header."""
    return any(flag.requires_override for flag in flags)
