import pytest

from healthping.common.config import (
    DEFAULT_UDP_PORT,
    ListenerConfig,
    load_config_file,
    load_listener_config,
    parse_port,
)
from healthping.common.exceptions import ConfigError
from healthping.main import build_config, build_parser


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("HEALTHPING_LOG_LEVEL", raising=False)
    monkeypatch.delenv("HEALTHPING_LOG_FORMAT", raising=False)


def test_defaults():
    config = load_listener_config({})

    assert config == ListenerConfig()
    assert config.port == DEFAULT_UDP_PORT == 7654
    assert config.host == ""
    assert config.health_port is None
    assert config.json_logs is True


def test_yaml_file(tmp_path):
    path = tmp_path / "listener.yaml"
    path.write_text(
        "listener:\n"
        "  port: 9100\n"
        "  host: 127.0.0.1\n"
        "  health_port: 8081\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  format: text\n"
    )

    config = load_listener_config(load_config_file(str(path)))

    assert config.port == 9100
    assert config.host == "127.0.0.1"
    assert config.health_port == 8081
    assert config.log_level == "DEBUG"
    assert config.json_logs is False


def test_empty_yaml_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config_file(str(path)) == {}


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config_file(str(tmp_path / "nope.yaml"))


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("listener: [unclosed\n")
    with pytest.raises(ConfigError):
        load_config_file(str(path))


def test_non_mapping_yaml(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config_file(str(path))


def test_environment_overrides_file_logging(monkeypatch):
    monkeypatch.setenv("HEALTHPING_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("HEALTHPING_LOG_FORMAT", "text")

    config = load_listener_config({"logging": {"level": "DEBUG", "format": "json"}})

    assert config.log_level == "WARNING"
    assert config.json_logs is False


@pytest.mark.parametrize("value, expected", [("7654", 7654), (9000, 9000), (" 0 ", 0), ("65535", 65535)])
def test_parse_port(value, expected):
    assert parse_port(value) == expected


@pytest.mark.parametrize("value", ["abc", "", None, "-1", "65536", "70000"])
def test_parse_port_rejects(value):
    with pytest.raises(ConfigError):
        parse_port(value)


def test_cli_flags_win(tmp_path):
    path = tmp_path / "listener.yaml"
    path.write_text("listener:\n  port: 9100\n  health_port: 8081\n")

    args = build_parser().parse_args(
        ["--config", str(path), "--port", "9200", "--health-port", "8090", "-v"]
    )
    config = build_config(args)

    assert config.port == 9200
    assert config.health_port == 8090
    assert config.log_level == "DEBUG"
    assert config.json_logs is False


def test_cli_defaults():
    config = build_config(build_parser().parse_args([]))
    assert config.port == 7654
    assert config.health_port is None


def test_cli_bad_port():
    with pytest.raises(ConfigError):
        build_config(build_parser().parse_args(["--port", "not-a-port"]))
