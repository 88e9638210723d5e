"""Tests for configuration loading and packaged content packs."""

from __future__ import annotations

import pytest

from sprouts.config import Settings, load_settings
from sprouts.config.loader import merge_dicts
from sprouts.content import available_packs, load_pack, load_pack_file, parse_pack
from sprouts.storage import JsonFileBackend, merge_with_defaults


@pytest.fixture
def config_file(temp_data_dir):
    path = temp_data_dir / "sprouts.yaml"
    path.write_text(
        "app:\n  pack: math\ngenerator:\n  recent_history: 6\nlogging:\n  level: DEBUG\n",
        encoding="utf-8",
    )
    return path


def test_load_settings_from_yaml(config_file, monkeypatch):
    monkeypatch.delenv("SPROUTS_CONFIG_OVERRIDES", raising=False)
    settings = load_settings(config_file)
    assert settings.app.pack == "math"
    assert settings.generator.recent_history == 6
    assert settings.generator.max_retries == 25
    assert settings.app.resolved_progress_key() == "math_sprouts_progress"
    assert settings.app.resolved_parent_settings_key() == "math_sprouts_parent_settings"


def test_env_overrides_merge_recursively(config_file, monkeypatch):
    monkeypatch.setenv("SPROUTS_CONFIG_OVERRIDES", '{"generator": {"max_retries": 3}}')
    settings = load_settings(config_file)
    assert settings.generator.max_retries == 3
    assert settings.generator.recent_history == 6


def test_bad_override_json(config_file, monkeypatch):
    monkeypatch.setenv("SPROUTS_CONFIG_OVERRIDES", "{nope")
    with pytest.raises(ValueError):
        load_settings(config_file)


def test_invalid_values_rejected(temp_data_dir, monkeypatch):
    monkeypatch.delenv("SPROUTS_CONFIG_OVERRIDES", raising=False)
    path = temp_data_dir / "bad.yaml"
    path.write_text("game:\n  default_difficulty: expert\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)


def test_missing_explicit_config(temp_data_dir):
    with pytest.raises(FileNotFoundError):
        load_settings(temp_data_dir / "absent.yaml")


def test_explicit_storage_keys():
    settings = Settings.model_validate({"app": {"progress_key": "custom_progress"}})
    assert settings.app.resolved_progress_key() == "custom_progress"
    assert settings.app.resolved_parent_settings_key() == "science_sprouts_parent_settings"


def test_merge_dicts_prefers_override():
    assert merge_dicts({"a": {"b": 1, "c": 2}}, {"a": {"b": 5}}) == {"a": {"b": 5, "c": 2}}


def test_merge_with_defaults_is_shallow_and_pure():
    defaults = {"counts": {"x": 0, "y": 0}, "flag": True}
    merged = merge_with_defaults(defaults, {"counts": {"x": 3}, "extra": 1})
    assert merged == {"counts": {"x": 3}, "flag": True, "extra": 1}
    assert defaults == {"counts": {"x": 0, "y": 0}, "flag": True}
    assert merge_with_defaults(defaults, "garbage") == defaults


def test_file_backend_rejects_unsafe_keys(temp_data_dir):
    backend = JsonFileBackend(temp_data_dir)
    with pytest.raises(ValueError):
        backend.path_for("../escape")
    assert backend.get("never_written") is None


def test_packaged_packs():
    assert available_packs() == ["math", "reading", "science"]
    science = load_pack("science")
    assert science.title == "Science Sprouts"
    assert science.mode_keys == ["vocab", "labs", "facts"]
    assert science.mode_label("labs") == "Mini Labs"
    assert load_pack("science") is science


def test_science_banks_are_complete():
    science = load_pack("science")
    for theme in science.themes:
        assert len(science.banks.labs[theme]) == 4
        for difficulty in science.difficulties:
            assert len(science.banks.vocab[theme][difficulty]) == 5
            assert len(science.banks.facts[theme][difficulty]) == 2


def test_unknown_pack():
    with pytest.raises(FileNotFoundError):
        load_pack("history")


def test_template_without_placeholder_is_rejected():
    text = """
id: broken
type: science
title: Broken
modes: [{key: labs, label: Labs}]
themes: [garden]
banks:
  labs:
    garden:
      - {q: "Plants need sunlight.", a: sunlight, d: [snow, rocks]}
"""
    with pytest.raises(ValueError):
        parse_pack(text)


def test_pack_file_round_trip(temp_data_dir):
    path = temp_data_dir / "custom.yaml"
    path.write_text(
        "id: custom\ntype: math\ntitle: Custom\nmodes: [{key: math, label: Numbers}]\nthemes: [space]\n",
        encoding="utf-8",
    )
    pack = load_pack_file(path)
    assert pack.id == "custom"
    assert pack.difficulties == ["beginner", "intermediate", "advanced"]
