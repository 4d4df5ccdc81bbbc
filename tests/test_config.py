import pytest
import yaml

from onvista_quotes.config import Settings, load_settings
from onvista_quotes.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("ONVISTA_QUOTES_CONFIG", "ONVISTA_QUOTES_BASE_URL", "ONVISTA_QUOTES_MONTHS"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def user_config(tmp_path):
    path = tmp_path / "settings.yaml"
    with open(path, "w") as f:
        yaml.dump({"quotes": {"months": 1}, "http": {"timeout": 10}}, f)
    return path


def test_bundled_defaults():
    settings = load_settings()
    assert settings.base_url == "https://api.onvista.de/api/v1"
    assert settings.search.limit == 2
    assert settings.quotes.months == 3
    assert settings.http.timeout is None
    assert settings.window.range == "M3"


def test_user_file_overrides_defaults(user_config):
    settings = load_settings(user_config)
    assert settings.quotes.months == 1
    assert settings.window.range == "M1"
    assert settings.http.timeout == 10
    # untouched keys keep their defaults
    assert settings.search.limit == 2


def test_config_path_from_env(user_config, monkeypatch):
    monkeypatch.setenv("ONVISTA_QUOTES_CONFIG", str(user_config))
    assert load_settings().quotes.months == 1


def test_env_overrides_file(user_config, monkeypatch):
    monkeypatch.setenv("ONVISTA_QUOTES_MONTHS", "6")
    monkeypatch.setenv("ONVISTA_QUOTES_BASE_URL", "http://localhost:8080/api")

    settings = load_settings(user_config)
    assert settings.quotes.months == 6
    assert settings.base_url == "http://localhost:8080/api"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="does not exist"):
        load_settings(tmp_path / "nope.yaml")


def test_duplicate_keys_rejected(tmp_path):
    path = tmp_path / "dup.yaml"
    path.write_text("quotes:\n  months: 1\n  months: 2\n")
    with pytest.raises(ConfigError, match="Duplicate key"):
        load_settings(path)


def test_invalid_values(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("quotes:\n  months: 0\n")
    with pytest.raises(ConfigError, match="Invalid settings"):
        load_settings(path)


def test_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_settings(path)


def test_url_joining():
    s = Settings(base_url="https://api.example.test/api/v1/")
    assert s.url("/instruments/query") == "https://api.example.test/api/v1/instruments/query"
