"""Tests for EngineConfig."""

import dataclasses

import pytest

from tml import EngineConfig


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig(views_dir="views")
        assert config.cache is False
        assert config.max_depth == 100
        assert config.extension == ".tml"
        assert config.encoding == "utf-8"

    def test_frozen(self):
        config = EngineConfig(views_dir="views")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.cache = True  # type: ignore[misc]


class TestFromEnviron:
    def test_views_dir_from_environment(self):
        config = EngineConfig.from_environ(environ={"TML_VIEWS_DIR": "/srv/views"})
        assert config.views_dir == "/srv/views"
        assert config.cache is False

    def test_argument_wins(self):
        config = EngineConfig.from_environ("here", environ={"TML_VIEWS_DIR": "/srv/views"})
        assert config.views_dir == "here"

    def test_missing_views_dir(self):
        with pytest.raises(ValueError, match="TML_VIEWS_DIR"):
            EngineConfig.from_environ(environ={})

    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_cache_truthy(self, value):
        assert EngineConfig.from_environ("v", environ={"TML_CACHE": value}).cache is True

    @pytest.mark.parametrize("value", ["0", "false", "off", ""])
    def test_cache_falsy(self, value):
        assert EngineConfig.from_environ("v", environ={"TML_CACHE": value}).cache is False

    def test_production_enables_cache(self):
        assert EngineConfig.from_environ("v", environ={"TML_ENV": "production"}).cache is True

    def test_explicit_cache_beats_production(self):
        environ = {"TML_ENV": "production", "TML_CACHE": "0"}
        assert EngineConfig.from_environ("v", environ=environ).cache is False

    def test_max_depth(self):
        assert EngineConfig.from_environ("v", environ={"TML_MAX_DEPTH": "7"}).max_depth == 7

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("TML_VIEWS_DIR", "/from/env")
        monkeypatch.delenv("TML_CACHE", raising=False)
        monkeypatch.delenv("TML_ENV", raising=False)
        assert EngineConfig.from_environ().views_dir == "/from/env"
