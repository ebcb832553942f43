import pytest

from vivialconnect.config import DEFAULT_BASE_URL, ClientConfig, load_config
from vivialconnect.errors import ConfigurationError

ENV_VARS = (
    "VIVIALCONNECT_ACCOUNT_ID",
    "VIVIALCONNECT_API_KEY",
    "VIVIALCONNECT_API_SECRET",
    "VIVIALCONNECT_API_BASE_URL",
    "VIVIALCONNECT_MAX_RETRIES",
    "VIVIALCONNECT_TIMEOUT_SECONDS",
    "VIVIALCONNECT_BACKOFF_SECONDS",
    "VIVIALCONNECT_MAX_BACKOFF_SECONDS",
    "VIVIALCONNECT_CONFIG_FILE",
)


def _clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_load_config_from_yaml_with_env_overlay(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    (tmp_path / "vivialconnect.yaml").write_text(
        "VIVIALCONNECT_ACCOUNT_ID: 42\n"
        "VIVIALCONNECT_API_KEY: yaml-key\n"
        "VIVIALCONNECT_API_SECRET: yaml-secret\n"
        "VIVIALCONNECT_MAX_RETRIES: 5\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("VIVIALCONNECT_API_KEY", "env-key")

    cfg = load_config()

    assert cfg.account_id == 42
    assert cfg.api_key == "env-key"
    assert cfg.api_secret == "yaml-secret"
    assert cfg.max_retries == 5
    assert cfg.has_credentials


def test_custom_config_file_path(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    path = tmp_path / "other.yaml"
    path.write_text("VIVIALCONNECT_API_BASE_URL: https://sandbox.example/api\n", encoding="utf-8")
    monkeypatch.setenv("VIVIALCONNECT_CONFIG_FILE", str(path))

    cfg = load_config()

    assert cfg.api_base_url == "https://sandbox.example/api/"
    assert not cfg.has_credentials


def test_empty_env_values_mean_unset(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setenv("VIVIALCONNECT_API_KEY", "")
    monkeypatch.setenv("VIVIALCONNECT_API_BASE_URL", "")

    cfg = ClientConfig()

    assert cfg.api_key is None
    assert cfg.api_base_url == DEFAULT_BASE_URL


def test_empty_numeric_env_values_keep_defaults(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    for var in ("VIVIALCONNECT_MAX_RETRIES", "VIVIALCONNECT_TIMEOUT_SECONDS",
                "VIVIALCONNECT_BACKOFF_SECONDS", "VIVIALCONNECT_MAX_BACKOFF_SECONDS"):
        monkeypatch.setenv(var, "")
    (tmp_path / ".env").write_text("VIVIALCONNECT_TIMEOUT_SECONDS=\n", encoding="utf-8")

    cfg = load_config()

    assert cfg.max_retries == 3
    assert cfg.timeout_seconds == 20.0
    assert cfg.backoff_seconds == 0.5
    assert cfg.max_backoff_seconds == 8.0


def test_malformed_values_raise_configuration_error(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    (tmp_path / "vivialconnect.yaml").write_text("VIVIALCONNECT_ACCOUNT_ID: abc\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as err:
        load_config()
    assert "invalid configuration" in str(err.value)


def test_malformed_env_value_raises_configuration_error(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setenv("VIVIALCONNECT_MAX_RETRIES", "many")

    with pytest.raises(ConfigurationError):
        load_config()
