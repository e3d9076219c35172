"""Tests for configuration loading and environment overrides."""
import json

import pytest

from azpredictor import config
from azpredictor.telemetry.cohort import DEFAULT_COHORT_COUNT


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    monkeypatch.setenv(config.CONFIG_DIR_ENV, str(tmp_path))
    monkeypatch.delenv(config.TELEMETRY_ENV, raising=False)
    monkeypatch.delenv(config.COHORT_COUNT_ENV, raising=False)


def test_config_path_honors_env(tmp_path):
    assert config.get_config_path() == str(tmp_path / "config.json")


def test_missing_config_is_empty():
    assert config.load_config() == {}


def test_corrupt_config_is_empty(tmp_path):
    (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
    assert config.load_config() == {}


def test_non_object_config_is_empty(tmp_path):
    (tmp_path / "config.json").write_text("[1, 2]", encoding="utf-8")
    assert config.load_config() == {}


def test_save_then_load(tmp_path):
    path = str(tmp_path / "nested" / "config.json")
    config.save_config({"telemetry": False, "cohort_count": 4}, path)
    assert config.load_config(path) == {"telemetry": False, "cohort_count": 4}
    with open(path, encoding="utf-8") as f:
        assert json.load(f)["cohort_count"] == 4


def test_telemetry_default_on():
    assert config.telemetry_enabled({}) is True


def test_telemetry_disabled_by_config():
    assert config.telemetry_enabled({"telemetry": False}) is False


def test_telemetry_disabled_by_env(monkeypatch):
    monkeypatch.setenv(config.TELEMETRY_ENV, "OFF")
    assert config.telemetry_enabled({"telemetry": True}) is False


def test_cohort_count_default():
    assert config.cohort_count({}) == DEFAULT_COHORT_COUNT


def test_cohort_count_from_config():
    assert config.cohort_count({"cohort_count": 6}) == 6


def test_cohort_count_env_wins(monkeypatch):
    monkeypatch.setenv(config.COHORT_COUNT_ENV, "3")
    assert config.cohort_count({"cohort_count": 6}) == 3


@pytest.mark.parametrize("bad", [0, -4, "many", None])
def test_invalid_cohort_count_falls_back(bad):
    assert config.cohort_count({"cohort_count": bad}) == DEFAULT_COHORT_COUNT
