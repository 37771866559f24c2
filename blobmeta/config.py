# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to the tracker and the bulk importer.
#
# CLASSES:
# --------
# - DiscoveryConfig (dataclass)
#     policy: DiscoveryPolicy     (default ONLY_WRITES)
#     endpoint_suffix: str        (default ".blob.core.windows.net")
#
# - ImportConfig (dataclass)
#     container_page_size: int    (default 100)
#     blob_page_size: int         (default 2000)
#
# - AzureConfig (dataclass)
#     connection_string: str | None  (default None)
#     account_url: str | None        (default None)
#
# - AppConfig (dataclass)
#     discovery: DiscoveryConfig
#     imports: ImportConfig
#     azure: AzureConfig
#
# FUNCTIONS:
# ----------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
# - reset_config() -> None
#     Drop the singleton so the next get_config() re-reads the environment.
#
# USAGE:
# ------
#   from blobmeta.config import get_config
#   config = get_config()
#   print(config.discovery.policy)
#   print(config.imports.blob_page_size)
#
# ==============================================

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from blobmeta.analysis.classifier import BLOB_ENDPOINT_SUFFIX
from blobmeta.analysis.decision import DiscoveryPolicy
from blobmeta.bulk_importer import DEFAULT_BLOB_PAGE_SIZE, DEFAULT_CONTAINER_PAGE_SIZE


@dataclass
class DiscoveryConfig:
    """Live discovery configuration."""
    policy: DiscoveryPolicy = DiscoveryPolicy.ONLY_WRITES
    endpoint_suffix: str = BLOB_ENDPOINT_SUFFIX


@dataclass
class ImportConfig:
    """Page sizes used when walking an account."""
    container_page_size: int = DEFAULT_CONTAINER_PAGE_SIZE
    blob_page_size: int = DEFAULT_BLOB_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.container_page_size <= 0 or self.blob_page_size <= 0:
            raise ValueError(
                f"Page sizes must be positive, got containers={self.container_page_size} "
                f"blobs={self.blob_page_size}"
            )


@dataclass
class AzureConfig:
    """Azure Storage connection settings. Connection string wins over account URL."""
    connection_string: Optional[str] = None
    account_url: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.connection_string or self.account_url)


@dataclass
class AppConfig:
    """Main application configuration."""
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    imports: ImportConfig = field(default_factory=ImportConfig)
    azure: AzureConfig = field(default_factory=AzureConfig)


# Singleton instance
_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration

    Raises:
        ValueError: if a variable holds an unknown policy or a bad page size
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    discovery_config = DiscoveryConfig(
        policy=DiscoveryPolicy.parse(os.getenv("BLOBMETA_DISCOVERY_POLICY", "only_writes")),
        endpoint_suffix=os.getenv("BLOBMETA_ENDPOINT_SUFFIX", BLOB_ENDPOINT_SUFFIX),
    )

    import_config = ImportConfig(
        container_page_size=int(os.getenv("BLOBMETA_CONTAINER_PAGE_SIZE", str(DEFAULT_CONTAINER_PAGE_SIZE))),
        blob_page_size=int(os.getenv("BLOBMETA_BLOB_PAGE_SIZE", str(DEFAULT_BLOB_PAGE_SIZE))),
    )

    azure_config = AzureConfig(
        connection_string=os.getenv("AZURE_STORAGE_CONNECTION_STRING") or None,
        account_url=os.getenv("AZURE_STORAGE_ACCOUNT_URL") or None,
    )

    _config_instance = AppConfig(
        discovery=discovery_config,
        imports=import_config,
        azure=azure_config,
    )

    return _config_instance


def reset_config() -> None:
    """Forget the cached configuration (used by tests and after env changes)."""
    global _config_instance
    _config_instance = None
