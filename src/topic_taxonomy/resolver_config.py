import logging
import os
from pathlib import Path
from typing import TypeVar

import httpx
import yaml
from pydantic import AliasChoices, BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_FEEDS_SERVER_URL = "http://localhost:8081"


def default_feeds_path() -> Path:
    """Feeds directory of the local store: $STM_HOME itself, or ~/.stm/feeds when unset."""
    stm_home = os.getenv("STM_HOME")
    if stm_home:
        return Path(stm_home).expanduser().resolve()
    return Path.home() / ".stm" / "feeds"


class ResolverConfig(BaseModel):
    feeds_server_url: str = Field(default=DEFAULT_FEEDS_SERVER_URL, description="Base URL of the feeds server")
    request_timeout: float = Field(default=10.0, gt=0, description="Timeout in seconds for upstream requests")
    max_concurrency: int | None = Field(
        default=None, ge=1, description="Maximum number of patterns resolved at once, unbounded if unset"
    )
    feeds_path: Path | None = Field(default=None, description="Local feeds directory used instead of the feeds server")

    def build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.request_timeout)


class SempConfig(BaseSettings):
    """Broker SEMP v2 management API configuration.

    Loads from environment variables with NEMS_SEMP_ prefix:
    - NEMS_SEMP_URL (default: http://localhost:8080)
    - NEMS_SEMP_USER (default: admin)
    - NEMS_SEMP_PASSWORD (default: admin)
    - NEMS_VPN (default: default)
    """

    model_config = SettingsConfigDict(env_prefix="NEMS_SEMP_")

    url: str = Field(default="http://localhost:8080", description="SEMP base URL")
    user: str = Field(default="admin", description="SEMP user")
    password: str = Field(default="admin", description="SEMP password")
    vpn: str = Field(
        default="default",
        description="Message VPN name",
        validation_alias=AliasChoices("vpn", "NEMS_VPN"),
    )

    def build_client(self, timeout: float = 10.0) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            auth=httpx.BasicAuth(self.user, self.password),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )


def _yaml_files(config_path: Path) -> list[Path]:
    if not config_path.is_dir():
        return [config_path]
    yaml_files = sorted(config_path.glob("*.yaml"))
    if not yaml_files:
        raise FileNotFoundError(f"No YAML files found in the directory: {config_path}")
    return yaml_files


def combine_yaml_files(file_paths: list[Path]) -> dict:
    """Merge YAML mappings in order; keys of later files win, empty files add nothing."""
    combined_data: dict = {}
    for file_path in file_paths:
        with file_path.open("r") as file:
            combined_data.update(yaml.safe_load(file) or {})
    return combined_data


T = TypeVar("T", bound=BaseModel)


def load_config(config_path: str | Path, config_class: type[T]) -> T:
    """Load settings from one YAML file, or from every *.yaml file of a directory in name order.

    Raises:
        FileNotFoundError: If the file is missing or the directory holds no YAML files
        ValidationError: If the merged settings are rejected by config_class
    """
    config_path = Path(config_path)
    try:
        return config_class.model_validate(combine_yaml_files(_yaml_files(config_path)))
    except FileNotFoundError:
        logger.error("Resolver config not found: %s", config_path)
        raise
    except ValidationError as err:
        logger.error("Invalid resolver config in %s: %s", config_path, err)
        raise
