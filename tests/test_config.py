# tests/test_config.py
"""
Tests for AnalyzerConfig and logging setup.
"""

import json
import logging

import pytest

from polyscan.config import AnalyzerConfig, configure_logging


class TestAnalyzerConfig:

    def test_defaults_are_valid(self):
        config = AnalyzerConfig()
        assert config.validate() == []
        assert config.follow_imports
        assert config.is_scanner_enabled("anything")

    def test_problems_are_collected(self):
        config = AnalyzerConfig(
            max_import_depth=-1,
            known_schema_version="not a version",
            enabled_scanners=["namespaces", 3],
        )
        assert len(config.validate()) == 3

    def test_enabled_scanners(self):
        config = AnalyzerConfig(enabled_scanners=["behaviors"])
        assert config.is_scanner_enabled("behaviors")
        assert not config.is_scanner_enabled("namespaces")

    def test_from_mapping(self):
        config = AnalyzerConfig.from_mapping({"follow_imports": False})
        assert not config.follow_imports
        assert config.max_import_depth == 64

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(ValueError, match="colour, shade"):
            AnalyzerConfig.from_mapping({"follow_imports": False, "shade": 1, "colour": "blue"})

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "polyscan.json"
        path.write_text(json.dumps({"max_import_depth": 3}), encoding="utf-8")
        assert AnalyzerConfig.from_json_file(path).max_import_depth == 3

    def test_json_file_must_hold_an_object(self, tmp_path):
        path = tmp_path / "polyscan.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError, match="expected a JSON object"):
            AnalyzerConfig.from_json_file(path)


class TestConfigureLogging:

    @pytest.fixture
    def polyscan_logger(self):
        logger = logging.getLogger("polyscan")
        handlers, level = list(logger.handlers), logger.level
        yield logger
        logger.handlers[:] = handlers
        logger.setLevel(level)

    @pytest.mark.parametrize(
        "verbosity, level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_levels(self, polyscan_logger, verbosity, level):
        configure_logging(verbosity)
        assert polyscan_logger.level == level

    def test_adds_stream_handler(self, polyscan_logger):
        before = len(polyscan_logger.handlers)
        configure_logging(1)
        assert len(polyscan_logger.handlers) == before + 1
        assert isinstance(polyscan_logger.handlers[-1], logging.StreamHandler)
