"""Tests for configuration loading and address parsing."""
import pytest

from gaugeshell.config import Config, DEFAULT_ADDRESS, load_config, parse_address


@pytest.mark.parametrize("address,expected", [
    ("127.0.0.1:9000", ("127.0.0.1", 9000)),
    ("localhost:0", ("localhost", 0)),
    ("[::1]:9100", ("::1", 9100)),
    ("0.0.0.0:65535", ("0.0.0.0", 65535)),
])
def test_parse_address(address, expected):
    assert parse_address(address) == expected


@pytest.mark.parametrize("address", [
    "9000",
    ":9000",
    "localhost:",
    "localhost:http",
    "localhost:70000",
    "::1:9000",
])
def test_parse_address_rejects(address):
    with pytest.raises(ValueError):
        parse_address(address)


def test_defaults(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("GAUGESHELL_ADDRESS", raising=False)
    config = load_config()
    assert config.exporter.address == DEFAULT_ADDRESS
    assert config.exporter.host == "127.0.0.1"
    assert config.exporter.port == 9000
    assert config.exporter.refresh_interval_s == 1.0
    assert config.global_.log_level == "INFO"
    assert config.shell.history_file is None


def test_load_yaml(tmp_path, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("GAUGESHELL_ADDRESS", raising=False)
    path = tmp_path / "gaugeshell.yaml"
    path.write_text(
        "global:\n"
        "  log_level: DEBUG\n"
        "exporter:\n"
        "  address: 0.0.0.0:9100\n"
        "  refresh_interval_s: 0.5\n"
        "  self_metrics: false\n"
        "shell:\n"
        "  prompt: '> '\n"
    )
    config = load_config(str(path))
    assert config.global_.log_level == "DEBUG"
    assert config.exporter.port == 9100
    assert config.exporter.refresh_interval_s == 0.5
    assert not config.exporter.self_metrics
    assert config.shell.prompt == "> "


def test_empty_yaml_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("GAUGESHELL_ADDRESS", raising=False)
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)).exporter.address == DEFAULT_ADDRESS


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("GAUGESHELL_ADDRESS", "localhost:9200")
    config = load_config()
    assert config.global_.log_level == "WARNING"
    assert config.exporter.address == "localhost:9200"


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/gaugeshell.yaml")


def test_invalid_values(tmp_path, monkeypatch):
    monkeypatch.delenv("GAUGESHELL_ADDRESS", raising=False)
    path = tmp_path / "bad.yaml"
    path.write_text("exporter:\n  address: nowhere\n")
    with pytest.raises(ValueError):
        load_config(str(path))

    path.write_text("exporter:\n  refresh_interval_s: 0\n")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_with_address():
    config = Config().with_address("10.0.0.1:9300")
    assert config.exporter.host == "10.0.0.1"
    assert config.exporter.port == 9300

    with pytest.raises(ValueError):
        Config().with_address("bad")
