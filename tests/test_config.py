import pytest

from diffdrive_trajopt import config


def test_defaults(monkeypatch):
    for name in ("TRAJOPT_POINTS_PER_INCH", "TRAJOPT_OPTIMIZER_LAYERS", "TRAJOPT_HOST",
                 "TRAJOPT_PORT", "TRAJOPT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    assert config.get_points_per_inch() == 3.0
    assert config.get_optimizer_layers() == 4
    assert config.get_server_address() == ("0.0.0.0", 8000)
    assert config.get_log_level() == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TRAJOPT_POINTS_PER_INCH", "5.5")
    monkeypatch.setenv("TRAJOPT_OPTIMIZER_LAYERS", "2")
    monkeypatch.setenv("TRAJOPT_HOST", "127.0.0.1")
    monkeypatch.setenv("TRAJOPT_PORT", "9001")
    monkeypatch.setenv("TRAJOPT_LOG_LEVEL", "debug")

    assert config.get_points_per_inch() == 5.5
    assert config.get_optimizer_layers() == 2
    assert config.get_server_address() == ("127.0.0.1", 9001)
    assert config.get_log_level() == "DEBUG"


@pytest.mark.parametrize("name, value, getter", [
    ("TRAJOPT_POINTS_PER_INCH", "lots", config.get_points_per_inch),
    ("TRAJOPT_POINTS_PER_INCH", "0", config.get_points_per_inch),
    ("TRAJOPT_OPTIMIZER_LAYERS", "2.5", config.get_optimizer_layers),
    ("TRAJOPT_PORT", "http", config.get_server_address),
])
def test_invalid_values_raise(monkeypatch, name, value, getter):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError, match=name):
        getter()
