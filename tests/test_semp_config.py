import httpx
import pytest

from topic_taxonomy.resolver_config import SempConfig

SEMP_ENV_VARS = ("NEMS_SEMP_URL", "NEMS_SEMP_USER", "NEMS_SEMP_PASSWORD", "NEMS_SEMP_VPN", "NEMS_VPN", "VPN")


@pytest.fixture
def clean_env(monkeypatch):
    for name in SEMP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_default_values(clean_env):  # noqa: ARG001
    config = SempConfig()
    assert config.url == "http://localhost:8080"
    assert config.user == "admin"
    assert config.password == "admin"
    assert config.vpn == "default"


def test_custom_values(clean_env):  # noqa: ARG001
    config = SempConfig(url="https://broker:943", user="ops", password="secret", vpn="prod")
    assert config.url == "https://broker:943"
    assert config.user == "ops"
    assert config.password == "secret"
    assert config.vpn == "prod"


def test_from_env(clean_env):
    clean_env.setenv("NEMS_SEMP_URL", "https://env-broker:943")
    clean_env.setenv("NEMS_SEMP_USER", "env_user")
    clean_env.setenv("NEMS_SEMP_PASSWORD", "env_password")
    clean_env.setenv("NEMS_VPN", "env_vpn")

    config = SempConfig()
    assert config.url == "https://env-broker:943"
    assert config.user == "env_user"
    assert config.password == "env_password"
    assert config.vpn == "env_vpn"


@pytest.mark.asyncio
async def test_build_client_carries_credentials(clean_env):  # noqa: ARG001
    config = SempConfig(user="ops", password="secret")
    async with config.build_client(timeout=3.0) as client:
        assert isinstance(client.auth, httpx.BasicAuth)
        assert client.headers["Content-Type"] == "application/json"
        assert client.timeout.connect == 3.0  # noqa: PLR2004
