"""
Tests for config models, proxy validation and env loading.
"""
import pytest
from pydantic import ValidationError

from xhttp_client import ClientConfig, ConstructionError, TimeoutConfig, build_config, load_config_from_env, new, new_with_options


def test_timeout_defaults():
    timeout = TimeoutConfig()
    assert timeout.connect == 3000
    assert timeout.response_header == 5000
    assert timeout.total == 30000
    assert timeout.total_seconds == 30.0


def test_timeout_to_httpx():
    timeout = TimeoutConfig(connect=1500, response_header=2500, total=9000).to_httpx()
    assert timeout.connect == 1.5
    assert timeout.read == 2.5
    assert timeout.pool == 1.5
    assert timeout.write is None


def test_config_is_frozen():
    config = ClientConfig()
    with pytest.raises(ValidationError):
        config.proxy_url = "http://proxy:3128"
    with pytest.raises(ValidationError):
        config.timeout.total = 1


def test_empty_proxy_means_direct():
    assert ClientConfig(proxy_url="").proxy_url is None
    assert new().transport.config.proxy_url is None


def test_new_with_options():
    builder = new_with_options(1000, 2000, 4000, "http://proxy.local:3128")
    config = builder.transport.config
    assert config.timeout.connect == 1000
    assert config.timeout.response_header == 2000
    assert config.timeout.total == 4000
    assert config.proxy_url == "http://proxy.local:3128"


@pytest.mark.parametrize(
    "proxy",
    ["not a url", "http://", "ftp://proxy.local:21", "http://[::1", "://missing-scheme"],
)
def test_malformed_proxy_is_construction_error(proxy):
    with pytest.raises(ConstructionError) as exc:
        new_with_options(proxy_url=proxy)
    assert "proxy_url" in str(exc.value)


@pytest.mark.parametrize("field", ["connect_timeout_ms", "response_header_timeout_ms", "total_timeout_ms"])
def test_non_positive_timeout_is_construction_error(field):
    with pytest.raises(ConstructionError):
        build_config(**{field: 0})


def test_load_config_from_env():
    config = load_config_from_env(
        environ={
            "XHTTP_CONNECT_TIMEOUT_MS": "100",
            "XHTTP_TOTAL_TIMEOUT_MS": "900",
            "XHTTP_PROXY_URL": "socks5://127.0.0.1:1080",
        }
    )
    assert config.timeout.connect == 100
    assert config.timeout.response_header == 5000
    assert config.timeout.total == 900
    assert config.proxy_url == "socks5://127.0.0.1:1080"


def test_load_config_from_env_prefix(monkeypatch):
    monkeypatch.setenv("SVC_RESPONSE_HEADER_TIMEOUT_MS", "750")
    config = load_config_from_env(prefix="SVC_")
    assert config.timeout.response_header == 750
    assert config.proxy_url is None


def test_load_config_from_env_rejects_garbage():
    with pytest.raises(ConstructionError) as exc:
        load_config_from_env(environ={"XHTTP_TOTAL_TIMEOUT_MS": "soon"})
    assert "XHTTP_TOTAL_TIMEOUT_MS" in str(exc.value)
