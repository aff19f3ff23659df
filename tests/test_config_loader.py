from pathlib import Path

import pytest

from tempo_tx import config as config_module
from tempo_tx.config import (
    DEFAULT_RPC_URL,
    DEFAULT_TIMEOUT_SECONDS,
    ConfigurationError,
    RPCConfig,
    load_env_file,
    load_rpc_config,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    default_path = tmp_path / "home" / ".tempo-tx.yaml"
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", default_path)
    monkeypatch.setattr(config_module, "_CONFIG_PATH_OVERRIDE", None)
    return default_path


def test_load_rpc_config_prefers_environment_over_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
        rpc:
          url: https://file.example/rpc
          timeout: 5
        """
    )

    config = load_rpc_config(config_path=config_path, env={"TEMPO_RPC_URL": "https://env.example/rpc"})

    assert isinstance(config, RPCConfig)
    assert config.url == "https://env.example/rpc"
    assert config.timeout == 5.0

    config = load_rpc_config(config_path=config_path, env={"TEMPO_RPC_TIMEOUT": "12.5"})

    assert config.url == "https://file.example/rpc"
    assert config.timeout == 12.5


def test_load_rpc_config_defaults_without_sources() -> None:
    config = load_rpc_config(env={})

    assert config.url == DEFAULT_RPC_URL
    assert config.timeout == DEFAULT_TIMEOUT_SECONDS


def test_load_rpc_config_reads_default_yaml(isolated_config: Path) -> None:
    isolated_config.parent.mkdir(parents=True)
    isolated_config.write_text("rpc:\n  url: http://localhost:8545\n")

    assert load_rpc_config(env={}).url == "http://localhost:8545"


def test_generic_env_name_is_a_fallback() -> None:
    assert load_rpc_config(env={"RPC_URL": "https://generic.example"}).url == "https://generic.example"

    config = load_rpc_config(
        env={"RPC_URL": "https://generic.example", "TEMPO_RPC_URL": "https://tempo.example"}
    )
    assert config.url == "https://tempo.example"


def test_overrides_win_over_environment() -> None:
    config = load_rpc_config(
        env={"TEMPO_RPC_URL": "https://env.example", "TEMPO_RPC_TIMEOUT": "9"},
        overrides={"url": "https://flag.example", "timeout": 2},
    )
    assert config.url == "https://flag.example"
    assert config.timeout == 2.0


def test_dotenv_file_is_merged_under_process_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local settings\n"
        "TEMPO_RPC_URL=https://dotenv.example/rpc\n"
        "TEMPO_RPC_TIMEOUT=4\n"
    )
    monkeypatch.delenv("RPC_URL", raising=False)
    monkeypatch.delenv("TEMPO_RPC_URL", raising=False)
    monkeypatch.setenv("TEMPO_RPC_TIMEOUT", "11")

    config = load_rpc_config(env_file=env_file)

    assert config.url == "https://dotenv.example/rpc"
    assert config.timeout == 11.0


def test_load_env_file_strips_quotes_and_skips_bare_keys(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        'TEMPO_RPC_URL="https://quoted.example/rpc?key=a=b"\n'
        "export TEMPO_RPC_TIMEOUT='8'\n"
        "EMPTY_FLAG\n"
    )

    assert load_env_file(env_file) == {
        "TEMPO_RPC_URL": "https://quoted.example/rpc?key=a=b",
        "TEMPO_RPC_TIMEOUT": "8",
    }


def test_load_env_file_missing_returns_empty(tmp_path: Path) -> None:
    assert load_env_file(tmp_path / "absent.env") == {}


def test_explicit_config_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_rpc_config(config_path=tmp_path / "missing.yaml", env={})


def test_set_default_config_path_is_used(tmp_path: Path) -> None:
    config_path = tmp_path / "custom.yaml"
    config_path.write_text("rpc:\n  timeout: 3\n")
    config_module.set_default_config_path(config_path)

    assert load_rpc_config(env={}).timeout == 3.0


@pytest.mark.parametrize(
    "env_map",
    [
        {"TEMPO_RPC_URL": "ftp://example.com"},
        {"TEMPO_RPC_URL": "not a url"},
        {"TEMPO_RPC_TIMEOUT": "-1"},
        {"TEMPO_RPC_TIMEOUT": "soon"},
    ],
)
def test_invalid_values_raise(env_map) -> None:
    with pytest.raises(ConfigurationError):
        load_rpc_config(env=env_map)


def test_rpc_section_must_be_mapping(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("rpc: https://example.com\n")

    with pytest.raises(ConfigurationError):
        load_rpc_config(config_path=config_path, env={})
