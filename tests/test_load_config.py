import pytest
import yaml
from pydantic import ValidationError

from topic_taxonomy import resolver_config

TEST_TIMEOUT = 2.5
TEST_MAX_CONCURRENCY = 8

@pytest.fixture
def temp_yaml_files(tmp_path):
    # Create temporary YAML files for testing
    yaml_file1 = tmp_path / "file1.yaml"
    yaml_file2 = tmp_path / "file2.yaml"
    yaml_file1.write_text(
        yaml.dump({"feeds_server_url": "http://feeds:8081", "request_timeout": TEST_TIMEOUT, "max_concurrency": 2})
    )
    yaml_file2.write_text(yaml.dump({"max_concurrency": TEST_MAX_CONCURRENCY}))
    return tmp_path

def test_load_single_yaml_file(temp_yaml_files):
    single_file = temp_yaml_files / "file1.yaml"
    config = resolver_config.load_config(single_file, resolver_config.ResolverConfig)
    assert config.feeds_server_url == "http://feeds:8081"
    assert config.request_timeout == TEST_TIMEOUT
    assert config.max_concurrency == 2  # noqa: PLR2004

def test_load_multiple_yaml_files(temp_yaml_files):
    config = resolver_config.load_config(temp_yaml_files, resolver_config.ResolverConfig)
    assert config.feeds_server_url == "http://feeds:8081"
    assert config.request_timeout == TEST_TIMEOUT
    assert config.max_concurrency == TEST_MAX_CONCURRENCY

def test_empty_yaml_file_uses_defaults(tmp_path):
    empty_file = tmp_path / "empty.yaml"
    empty_file.write_text("")
    config = resolver_config.load_config(empty_file, resolver_config.ResolverConfig)
    assert config.feeds_server_url == resolver_config.DEFAULT_FEEDS_SERVER_URL
    assert config.max_concurrency is None
    assert config.feeds_path is None

def test_load_nonexistent_file():
    with pytest.raises(FileNotFoundError):
        resolver_config.load_config("nonexistent.yaml", resolver_config.ResolverConfig)

def test_load_empty_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        resolver_config.load_config(tmp_path, resolver_config.ResolverConfig)

@pytest.mark.parametrize(
    "invalid_data",
    [{"request_timeout": "not_a_number"}, {"request_timeout": 0}, {"max_concurrency": 0}],
)
def test_validation_error(tmp_path, invalid_data):
    invalid_yaml_file = tmp_path / "invalid.yaml"
    invalid_yaml_file.write_text(yaml.dump(invalid_data))
    with pytest.raises(ValidationError):
        resolver_config.load_config(invalid_yaml_file, resolver_config.ResolverConfig)

def test_feeds_path_from_stm_home(monkeypatch, tmp_path):
    monkeypatch.setenv("STM_HOME", str(tmp_path))
    assert resolver_config.default_feeds_path() == tmp_path.resolve()

def test_feeds_path_defaults_to_home(monkeypatch, tmp_path):
    monkeypatch.delenv("STM_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert resolver_config.default_feeds_path() == tmp_path / ".stm" / "feeds"

@pytest.mark.asyncio
async def test_build_client_uses_timeout():
    config = resolver_config.ResolverConfig(request_timeout=TEST_TIMEOUT)
    async with config.build_client() as client:
        assert client.timeout.read == TEST_TIMEOUT
