"""
Unit tests for numeric settings and configuration loading.
"""

import json
from dataclasses import FrozenInstanceError

import pytest

from geoNURBS.io.config import (
    NumericSettings, DEFAULT_SETTINGS, resolve_settings, settings_from_dict, load_config
)
from geoNURBS.errors import GeometryError, ConfigurationError, DomainError, NumericalError


class TestNumericSettings:
    """Tests for NumericSettings."""

    def test_defaults(self):
        s = NumericSettings()

        assert s.epsilon == 1e-10
        assert s.max_tolerance == 1e-6
        assert s.min_tolerance == 1e-3
        assert s.gauss_points == 24
        assert s.max_iterations == 100

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            DEFAULT_SETTINGS.epsilon = 1.0

    def test_with_overrides(self):
        s = DEFAULT_SETTINGS.with_overrides(gauss_points=8)

        assert s.gauss_points == 8
        assert s.epsilon == DEFAULT_SETTINGS.epsilon
        assert DEFAULT_SETTINGS.gauss_points == 24

    @pytest.mark.parametrize("kwargs", [
        {"epsilon": 0.0},
        {"max_tolerance": -1.0},
        {"gauss_points": 0},
        {"max_iterations": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            NumericSettings(**kwargs)

    def test_resolve(self):
        custom = NumericSettings(gauss_points=4)

        assert resolve_settings(None) is DEFAULT_SETTINGS
        assert resolve_settings(custom) is custom


class TestLoadConfig:
    """Tests for reading settings from JSON."""

    def test_from_dict(self):
        s = settings_from_dict({"epsilon": 1e-12, "max_iterations": 50})
        assert s.epsilon == 1e-12
        assert s.max_iterations == 50

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError):
            settings_from_dict({"tolerance": 1e-3})

    def test_load_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"numeric": {"gauss_points": 12}}))

        s = load_config(path)
        assert s.gauss_points == 12
        assert s.epsilon == DEFAULT_SETTINGS.epsilon

    def test_missing_section(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{}")

        assert load_config(path) == DEFAULT_SETTINGS

    def test_invalid_root(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ConfigurationError):
            load_config(path)


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        assert issubclass(ConfigurationError, GeometryError)
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(DomainError, ValueError)
        assert issubclass(NumericalError, ArithmeticError)
        assert not issubclass(NumericalError, ValueError)
