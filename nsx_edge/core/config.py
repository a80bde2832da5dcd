"""
Configuration Management.

Settings come from the process environment, optionally seeded from a .env
file. They are loaded once per run and passed explicitly to the API client
and the commands; nothing else reads the environment.

Environment:
    NSX_MANAGER            NSX Manager hostname or IP
    NSX_USER               NSX username
    NSX_PASS               NSX password (required, no default)
    SITE_ID                Site ID for edge clusters
    ENFORCEMENT_POINT_ID   Enforcement point ID
    NSX_DEBUG              1/true to log API traffic to NSX_DEBUG_LOG
    NSX_DEBUG_LOG          Diagnostic log path
    NSX_VERIFY_TLS         Verify the manager's TLS certificate
    NSX_TIMEOUT            Per-request timeout in seconds
    NSX_GET_RETRIES        Extra attempts for failed GET requests
"""

from pathlib import Path

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from nsx_edge.core.exceptions import ConfigurationError

POLICY_API_ROOT = "/policy/api/v1/infra"


class Settings(BaseSettings):
    """NSX connection and run settings."""

    manager: str = Field("nsx-mgr.lab.local", validation_alias="NSX_MANAGER")
    username: str = Field("admin", validation_alias="NSX_USER")
    password: SecretStr = Field(validation_alias="NSX_PASS")
    site_id: str = Field("default", validation_alias="SITE_ID")
    enforcement_point_id: str = Field("default", validation_alias="ENFORCEMENT_POINT_ID")
    debug: bool = Field(False, validation_alias="NSX_DEBUG")
    debug_log: Path = Field(Path("nsx_api_debug.log"), validation_alias="NSX_DEBUG_LOG")
    verify_tls: bool = Field(False, validation_alias="NSX_VERIFY_TLS")
    timeout: float = Field(30.0, gt=0, validation_alias="NSX_TIMEOUT")
    get_retries: int = Field(0, ge=0, validation_alias="NSX_GET_RETRIES")

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def api_base_url(self) -> str:
        """Root of the Policy API infra tree."""
        return f"https://{self.manager}{POLICY_API_ROOT}"


def load_settings(env_file: Path | None = None) -> Settings:
    """
    Load settings from the environment.

    Args:
        env_file: Optional .env file read before the process environment
            is consulted. Environment variables win over file values.

    Raises:
        ConfigurationError: If a value is missing or fails validation.
    """
    if env_file is not None and not env_file.is_file():
        raise ConfigurationError(f"Environment file not found: {env_file}")
    try:
        return Settings(_env_file=env_file)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            problems.append(f"{field}: {error['msg']}")
        raise ConfigurationError(
            "Invalid configuration: " + "; ".join(problems)
        ) from e
