"""
Tests for YAML / environment configuration loading and the environment tables.
"""

import pytest

from config import AevoConfig, get_config, reset_config
from config.config_manager import substitute_env_vars
from config.environments import AevoEnvironment, get_environment_config, parse_environment
from config.structs import NetworkConfig, WebSocketConfig
from infrastructure.exceptions.system import ConfigurationError

AEVO_VARS = ("AEVO_SIGNING_KEY", "AEVO_WALLET_ADDRESS", "AEVO_API_KEY", "AEVO_API_SECRET", "AEVO_ENVIRONMENT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in AEVO_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    reset_config()


def write_config(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    return path


class TestSubstitution:

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("AEVO_TEST_VALUE", "abc")
        assert substitute_env_vars("key: ${AEVO_TEST_VALUE}") == "key: abc"

    def test_unset_variable_is_empty(self, monkeypatch):
        monkeypatch.delenv("AEVO_TEST_MISSING", raising=False)
        assert substitute_env_vars("key: ${AEVO_TEST_MISSING}") == "key: "

    def test_default_value(self, monkeypatch):
        monkeypatch.delenv("AEVO_TEST_MISSING", raising=False)
        assert substitute_env_vars("key: ${AEVO_TEST_MISSING:fallback}") == "key: fallback"


class TestAevoConfig:

    def test_full_config_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_API_SECRET", "from-env")
        path = write_config(tmp_path, """
environment: mainnet
credentials:
  api_key: yaml-key
  api_secret: ${MY_API_SECRET}
network:
  request_timeout: 3
  max_retries: 1
websocket:
  ping_interval: 15
  max_queue_size: 50
logging:
  environment: test
  console:
    min_level: ERROR
    color: false
""")
        config = AevoConfig(config_path=path, load_env=False)

        assert config.environment == AevoEnvironment.MAINNET
        assert config.config_path == path
        assert config.get_credentials().api_key == "yaml-key"
        assert config.get_credentials().api_secret == "from-env"
        assert config.get_network_config().request_timeout == 3
        assert config.get_network_config().max_retries == 1
        assert config.get_websocket_config().ping_interval == 15
        assert config.get_websocket_config().max_queue_size == 50
        assert config.get_logging_config().console.min_level == "ERROR"
        assert config.get_environment_config().rest_url == "https://api.aevo.xyz"

    def test_credentials_fall_back_to_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AEVO_API_KEY", "env-key")
        monkeypatch.setenv("AEVO_WALLET_ADDRESS", "0xabc")
        path = write_config(tmp_path, "credentials:\n  api_secret: yaml-secret\n")

        credentials = AevoConfig(config_path=path, load_env=False).get_credentials()

        assert credentials.api_key == "env-key"
        assert credentials.api_secret == "yaml-secret"
        assert credentials.wallet_address == "0xabc"
        assert credentials.signing_key is None

    def test_defaults_without_sections(self, tmp_path):
        config = AevoConfig(config_path=write_config(tmp_path, "{}\n"), load_env=False)

        assert config.environment == AevoEnvironment.TESTNET
        assert config.get_network_config() == NetworkConfig()
        assert config.get_websocket_config() == WebSocketConfig()
        assert config.get_logging_config() is None
        assert not config.get_credentials().has_api_credentials()

    def test_environment_from_env_var(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AEVO_ENVIRONMENT", "production")
        config = AevoConfig(config_path=write_config(tmp_path, "{}\n"), load_env=False)
        assert config.environment == AevoEnvironment.MAINNET

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            AevoConfig(config_path=tmp_path / "missing.yaml", load_env=False)

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigurationError):
            AevoConfig(config_path=write_config(tmp_path, "network: [unclosed\n"), load_env=False)

    def test_non_mapping_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            AevoConfig(config_path=write_config(tmp_path, "- a\n- b\n"), load_env=False)

    def test_invalid_section_values(self, tmp_path):
        path = write_config(tmp_path, "network:\n  request_timeout: -1\n")
        with pytest.raises(ConfigurationError) as exc_info:
            AevoConfig(config_path=path, load_env=False)
        assert exc_info.value.setting_name == "network"

    def test_invalid_environment(self, tmp_path):
        with pytest.raises(ConfigurationError):
            AevoConfig(config_path=write_config(tmp_path, "environment: moon\n"), load_env=False)

    def test_get_config_is_cached(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        reset_config()
        assert get_config() is get_config()


class TestEnvironments:

    @pytest.mark.parametrize("value,expected", [
        ("mainnet", AevoEnvironment.MAINNET),
        ("production", AevoEnvironment.MAINNET),
        ("PROD", AevoEnvironment.MAINNET),
        ("testnet", AevoEnvironment.TESTNET),
        ("staging", AevoEnvironment.TESTNET),
        (AevoEnvironment.TESTNET, AevoEnvironment.TESTNET),
    ])
    def test_aliases(self, value, expected):
        assert parse_environment(value) == expected

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError):
            parse_environment("devnet")

    def test_mainnet_table(self):
        config = get_environment_config(AevoEnvironment.MAINNET)

        assert config.rest_url == "https://api.aevo.xyz"
        assert config.ws_url == "wss://ws.aevo.xyz"
        assert config.signing_domain.name == "Aevo Mainnet"
        assert config.signing_domain.chain_id == 1
        assert config.addresses.l2_withdraw_proxy == "0x4d44B9AbB13C80d2E376b7C5c982aa972239d845"

    def test_testnet_table(self):
        config = get_environment_config(AevoEnvironment.TESTNET)

        assert config.rest_url == "https://api-testnet.aevo.xyz"
        assert config.ws_url == "wss://ws-testnet.aevo.xyz"
        assert config.signing_domain.chain_id == 11155111
        assert config.addresses.l2_withdraw_proxy == "0x870b65A0816B9e9A0dFCE08Fd18EFE20f245011f"

    def test_lookup_is_pure(self):
        assert get_environment_config(AevoEnvironment.TESTNET) is get_environment_config("testnet")


def test_unquoted_hex_credential_rejected(tmp_path):
    path = write_config(tmp_path, "credentials:\n  wallet_address: 0xabc\n")
    with pytest.raises(ConfigurationError) as exc_info:
        AevoConfig(config_path=path, load_env=False)
    assert exc_info.value.setting_name == "wallet_address"
