# ==============================================
# Tests for Configuration Management
# ==============================================

import pytest

from blobmeta.analysis.decision import DiscoveryPolicy
from blobmeta.config import AppConfig, AzureConfig, ImportConfig, get_config, reset_config

ENV_VARS = [
    "BLOBMETA_DISCOVERY_POLICY",
    "BLOBMETA_ENDPOINT_SUFFIX",
    "BLOBMETA_CONTAINER_PAGE_SIZE",
    "BLOBMETA_BLOB_PAGE_SIZE",
    "AZURE_STORAGE_CONNECTION_STRING",
    "AZURE_STORAGE_ACCOUNT_URL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestGetConfig:

    def test_defaults(self, clean_env):
        config = get_config()
        assert config.discovery.policy is DiscoveryPolicy.ONLY_WRITES
        assert config.discovery.endpoint_suffix == ".blob.core.windows.net"
        assert config.imports.container_page_size == 100
        assert config.imports.blob_page_size == 2000
        assert not config.azure.is_configured

    def test_from_environment(self, clean_env):
        clean_env.setenv("BLOBMETA_DISCOVERY_POLICY", "ALL_REQUESTS_ENSURE_SCHEMA")
        clean_env.setenv("BLOBMETA_ENDPOINT_SUFFIX", ".blob.core.usgovcloudapi.net")
        clean_env.setenv("BLOBMETA_CONTAINER_PAGE_SIZE", "10")
        clean_env.setenv("BLOBMETA_BLOB_PAGE_SIZE", "500")
        clean_env.setenv("AZURE_STORAGE_ACCOUNT_URL", "https://acct.blob.core.usgovcloudapi.net")

        config = get_config()
        assert config.discovery.policy is DiscoveryPolicy.ALL_REQUESTS_ENSURE_SCHEMA
        assert config.discovery.endpoint_suffix == ".blob.core.usgovcloudapi.net"
        assert config.imports.container_page_size == 10
        assert config.imports.blob_page_size == 500
        assert config.azure.account_url == "https://acct.blob.core.usgovcloudapi.net"
        assert config.azure.connection_string is None

    def test_empty_connection_string_is_none(self, clean_env):
        clean_env.setenv("AZURE_STORAGE_CONNECTION_STRING", "")
        assert get_config().azure.connection_string is None

    def test_singleton(self, clean_env):
        first = get_config()
        clean_env.setenv("BLOBMETA_DISCOVERY_POLICY", "all_requests")
        assert get_config() is first

        reset_config()
        assert get_config() is not first
        assert get_config().discovery.policy is DiscoveryPolicy.ALL_REQUESTS

    def test_unknown_policy(self, clean_env):
        clean_env.setenv("BLOBMETA_DISCOVERY_POLICY", "sometimes")
        with pytest.raises(ValueError):
            get_config()

    def test_bad_page_size(self, clean_env):
        clean_env.setenv("BLOBMETA_BLOB_PAGE_SIZE", "0")
        with pytest.raises(ValueError):
            get_config()


class TestConfigClasses:

    def test_app_config_defaults(self):
        config = AppConfig()
        assert config.imports == ImportConfig()
        assert config.azure == AzureConfig()

    def test_azure_configured(self):
        assert AzureConfig(connection_string="x").is_configured
        assert AzureConfig(account_url="https://a.blob.core.windows.net").is_configured
