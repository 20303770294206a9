import json

import pytest
from pydantic import ValidationError

from openwire.config import DEFAULT_BASE_URL, ClientConfig, load_client_config
from openwire.models.pagination import PageRequest


def test_defaults():
    config = ClientConfig()

    assert config.base_url == DEFAULT_BASE_URL
    assert config.max_page_limit == 100
    assert config.default_page_limit is None
    assert config.log_level == "INFO"


def test_from_env_reads_prefixed_variables():
    config = ClientConfig.from_env(
        {
            "OPENWIRE_BASE_URL": "https://proxy.internal/v1",
            "OPENWIRE_TIMEOUT_SECONDS": "5",
            "OPENWIRE_MAX_PAGE_LIMIT": "50",
            "OPENWIRE_LOG_LEVEL": "debug",
            "UNRELATED": "x",
        }
    )

    assert config.base_url == "https://proxy.internal/v1"
    assert config.timeout_seconds == 5.0
    assert config.max_page_limit == 50
    assert config.log_level == "DEBUG"


def test_default_page_limit_cannot_exceed_max():
    with pytest.raises(ValidationError, match="default_page_limit"):
        ClientConfig(max_page_limit=10, default_page_limit=20)


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        ClientConfig(log_level="VERBOSE")


def test_page_bounds_follow_config():
    bounds = ClientConfig(max_page_limit=10, default_page_limit=5).page_bounds()

    assert PageRequest(limit=10, bounds=bounds).limit == 10
    assert bounds.default_limit == 5


def test_load_from_dict():
    config = load_client_config(config_dict={"timeout_seconds": 2.5, "headers": {"OpenAI-Beta": "assistants=v2"}})

    assert config.timeout_seconds == 2.5
    assert config.headers == {"OpenAI-Beta": "assistants=v2"}


def test_load_from_json_file(tmp_path):
    path = tmp_path / "client.json"
    path.write_text(json.dumps({"base_url": "https://example.test/v1", "max_page_limit": 20}))

    config = load_client_config(config_path=str(path))

    assert config.base_url == "https://example.test/v1"
    assert config.max_page_limit == 20


def test_load_from_yaml_file(tmp_path):
    pytest.importorskip("yaml")
    path = tmp_path / "client.yaml"
    path.write_text("log_level: WARNING\nmax_page_limit: 30\n")

    config = load_client_config(config_path=str(path))

    assert config.log_level == "WARNING"
    assert config.max_page_limit == 30


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_client_config(config_path=str(tmp_path / "nope.json"))


def test_unsupported_suffix_raises(tmp_path):
    path = tmp_path / "client.toml"
    path.write_text("x = 1")

    with pytest.raises(ValueError, match="Unsupported config format"):
        load_client_config(config_path=str(path))


def test_requires_a_source():
    with pytest.raises(ValueError, match="config_path or config_dict"):
        load_client_config()
