"""Tests for fixture settings loading."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from collection_fixture.config import DataSettings, Settings, load_settings  # noqa: E402
from collection_fixture.errors import ConfigurationError  # noqa: E402


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run in an empty directory with no connection string in the environment."""
    monkeypatch.chdir(tmp_path)
    for name in ("Data__ConnectionString", "DATA__CONNECTIONSTRING", "data__connectionstring"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def _write_config(directory: Path, document) -> None:
    (directory / "config.json").write_text(json.dumps(document), encoding="utf-8")


def test_nothing_configured(workdir):
    settings = load_settings()

    assert settings.connection_string is None


def test_connection_string_from_config_json(workdir):
    _write_config(workdir, {"Data": {"ConnectionString": "mongodb://file:27017/"}})

    assert load_settings().connection_string == "mongodb://file:27017/"


def test_connection_string_from_dotenv(workdir):
    (workdir / ".env").write_text("Data__ConnectionString=mongodb://dotenv:27017/\n", encoding="utf-8")

    assert load_settings().connection_string == "mongodb://dotenv:27017/"


def test_environment_overrides_files(workdir, monkeypatch):
    _write_config(workdir, {"Data": {"ConnectionString": "mongodb://file:27017/"}})
    (workdir / ".env").write_text("Data__ConnectionString=mongodb://dotenv:27017/\n", encoding="utf-8")
    monkeypatch.setenv("DATA__CONNECTIONSTRING", "mongodb://env:27017/")

    assert load_settings().connection_string == "mongodb://env:27017/"


def test_unrelated_variables_are_ignored(workdir, monkeypatch):
    monkeypatch.setenv("__PYVENV_LAUNCHER__", "/usr/bin/python")
    monkeypatch.setenv("MONGODB_URI", "mongodb://app:27017/")
    monkeypatch.setenv("MONGODB_DATABASE", "cover_letter_app")

    settings = load_settings()

    assert settings.connection_string is None
    assert settings.model_dump() == {"data": {"connection_string": None}}


def test_keyword_arguments_take_precedence(workdir, monkeypatch):
    monkeypatch.setenv("Data__ConnectionString", "mongodb://env:27017/")

    settings = Settings(data=DataSettings(connection_string="mongodb://explicit:27017/"))

    assert settings.connection_string == "mongodb://explicit:27017/"


def test_invalid_json_raises_configuration_error(workdir):
    (workdir / "config.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_settings()


def test_wrong_shape_raises_configuration_error(workdir):
    _write_config(workdir, {"Data": "mongodb://file:27017/"})

    with pytest.raises(ConfigurationError):
        load_settings()
