"""
NSX Policy Models.

Typed views over the Policy API documents this tool reads. They are built
fresh from every response and never written back; updates are made on the
raw document so that fields the models do not know about survive.
"""

from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from nsx_edge.core.exceptions import ResponseFormatError


class Protection(str, Enum):
    """Value of the `_protection` flag on a policy object."""

    NOT_PROTECTED = "NOT_PROTECTED"
    NONE = "NONE"
    PROTECTED = "PROTECTED"
    REQUIRE_OVERRIDE = "REQUIRE_OVERRIDE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "Protection":
        """Map a raw flag to a member, UNKNOWN when absent or unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (ValueError, TypeError):
            return cls.UNKNOWN

    @property
    def requires_override(self) -> bool:
        return self in (Protection.PROTECTED, Protection.REQUIRE_OVERRIDE)


class NatStatus(str, Enum):
    """Whether a gateway carries NAT rules."""

    PRESENT = "PRESENT"
    NONE = "NONE"
    UNKNOWN = "UNKNOWN"


class PolicyResource(BaseModel):
    """Fields shared by every Policy API object."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    display_name: str | None = None
    path: str | None = None
    protection: Protection = Field(Protection.UNKNOWN, alias="_protection")
    revision: int | None = Field(None, alias="_revision")

    @field_validator("protection", mode="before")
    @classmethod
    def _parse_protection(cls, value: Any) -> Protection:
        return Protection.parse(value)


class Tier1Gateway(PolicyResource):
    pass


class LocaleService(PolicyResource):
    edge_cluster_path: str | None = None


class EdgeCluster(PolicyResource):
    members: list[dict[str, Any]] | None = None

    @property
    def member_count(self) -> int:
        return len(self.members or [])


class GatewayReport(BaseModel):
    """Everything the gateway listing shows for one Tier-1."""

    gateway: Tier1Gateway
    locale_services: list[LocaleService]
    nat_status: NatStatus


class ReassignmentResult(BaseModel):
    """Outcome of an edge cluster attach, move or detach."""

    tier1_id: str
    edge_cluster_path: str | None
    locale_service_id: str | None = None
    discovered: bool = False
    skipped: bool = False
    tier1_protection: Protection = Protection.UNKNOWN
    locale_service_protection: Protection = Protection.UNKNOWN
    overwrite: bool = False
    document: dict[str, Any] | None = None

    @property
    def detach(self) -> bool:
        return self.edge_cluster_path is None


ResourceT = TypeVar("ResourceT", bound=PolicyResource)


def parse_resources(model: type[ResourceT], items: list[Any], path: str) -> list[ResourceT]:
    """
    Validate collection items as policy objects.

    Raises:
        ResponseFormatError: An item is not an object or lacks a required field
    """
    parsed = []
    for index, item in enumerate(items):
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(part) for part in error["loc"]) or "item"
            raise ResponseFormatError(
                f"{path} returned a malformed {model.__name__} at index {index}: "
                f"{location}: {error['msg']}"
            ) from e
    return parsed
