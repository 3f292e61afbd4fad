"""
Tests for the defaults loader configuration system.

Tests cover:
- YAML file loading
- Deep merge functionality
- Nested value access
- Convenience functions
- Caching behavior
"""

import pytest
import yaml

from habital.core import defaults_loader
from habital.core.defaults_loader import (
    clear_cache,
    deep_merge,
    get_cache_setting,
    get_config_value,
    get_label,
    get_nested,
    get_statistic,
    load_defaults,
    load_yaml_file,
)


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_cache()
    yield
    clear_cache()


class TestLoadYamlFile:
    """Tests for load_yaml_file function."""

    def test_load_valid_yaml(self, tmp_path):
        yaml_content = {"key": "value", "nested": {"inner": 123}}
        yaml_file = tmp_path / "test.yaml"
        yaml_file.write_text(yaml.dump(yaml_content))
        assert load_yaml_file(yaml_file) == yaml_content

    def test_load_nonexistent_file(self, tmp_path):
        assert load_yaml_file(tmp_path / "nonexistent.yaml") == {}

    def test_load_empty_file(self, tmp_path):
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")
        assert load_yaml_file(yaml_file) == {}

    def test_top_level_must_be_mapping(self, tmp_path):
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_yaml_file(yaml_file)


class TestDeepMerge:
    def test_nested_override(self):
        base = {"statistics": {"score_window_days": 30, "recent_window_days": 30}}
        override = {"statistics": {"score_window_days": 14}}
        assert deep_merge(base, override) == {
            "statistics": {"score_window_days": 14, "recent_window_days": 30}
        }

    def test_base_not_mutated(self):
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestGetNested:
    def test_found(self):
        assert get_nested({"a": {"b": {"c": 3}}}, "a.b.c") == 3

    def test_missing_returns_default(self):
        assert get_nested({"a": 1}, "a.b", "fallback") == "fallback"


class TestLoadDefaults:
    def write(self, path, content):
        path.write_text(yaml.dump(content))
        return path

    def test_settings_override_defaults(self, tmp_path):
        defaults = self.write(tmp_path / "defaults.yaml", {"cache": {"max_entries": 10}})
        settings = self.write(tmp_path / "settings.yaml", {"cache": {"max_entries": 3}})
        config = load_defaults(defaults, settings)
        assert config["cache"]["max_entries"] == 3

    def test_cached_until_reload(self, tmp_path):
        defaults = self.write(tmp_path / "defaults.yaml", {"labels": {"x": "one"}})
        first = load_defaults(defaults, tmp_path / "none.yaml")
        self.write(defaults, {"labels": {"x": "two"}})
        assert load_defaults(defaults, tmp_path / "none.yaml") is first
        assert load_defaults(defaults, tmp_path / "none.yaml", reload=True)["labels"]["x"] == "two"


class TestConvenienceFunctions:
    """Values from the shipped config/defaults.yaml."""

    def test_statistics(self):
        assert get_statistic("score_window_days", 0) == 30
        assert get_statistic("missing_key", 7) == 7

    def test_cache(self):
        assert get_cache_setting("max_entries", 1) == 256

    def test_label(self):
        assert get_label("all_habits") == "All Habits"

    def test_config_value_default(self):
        assert get_config_value("nope.nothing", 5) == 5

    def test_overrides_apply(self, monkeypatch, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "defaults.yaml").write_text(
            yaml.dump({"statistics": {"score_window_days": 30}})
        )
        (tmp_path / "config" / "settings.yaml").write_text(
            yaml.dump({"statistics": {"score_window_days": 14}})
        )
        monkeypatch.setattr(defaults_loader, "get_project_root", lambda: tmp_path)
        assert get_statistic("score_window_days", 0) == 14
