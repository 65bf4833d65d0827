"""Tests for configuration loading."""

import json

import pytest
import yaml

from romdat.config import Config


class TestConfig:
    """Test the Config manager."""

    def test_defaults(self):
        config = Config()
        assert config.get("string_table.capacity") == 31
        assert config.get("parser.strict_unknown_keys") is False
        assert config.get("output.header_name") == "rom_dat.h"
        assert config.get("missing.key", "fallback") == "fallback"
        assert config.validate() == []

    def test_merge_keeps_unrelated_defaults(self):
        config = Config({"output": {"header": False}})
        assert config.get("output.header") is False
        assert config.get("output.blob") is True

    def test_instances_do_not_share_state(self):
        first = Config()
        first.set("output.blob", False)
        assert Config().get("output.blob") is True

    def test_set_creates_sections(self):
        config = Config()
        config.set("extra.nested.value", 3)
        assert config.get("extra.nested.value") == 3

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "romdat.yml"
        path.write_text(yaml.safe_dump({"references": {"strict": True}}))
        assert Config.from_file(path).get("references.strict") is True

    def test_from_json(self, tmp_path):
        path = tmp_path / "romdat.json"
        path.write_text(json.dumps({"string_table": {"capacity": 8}}))
        assert Config.from_file(path).get("string_table.capacity") == 8

    def test_missing_file_gives_defaults(self, tmp_path):
        assert Config.from_file(tmp_path / "absent.yml").to_dict() == Config().to_dict()

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "romdat.toml"
        path.write_text("")
        with pytest.raises(ValueError):
            Config.from_file(path)

    def test_find_and_load_searches_parents(self, tmp_path):
        (tmp_path / ".romdat.yml").write_text("logging:\n  level: DEBUG\n")
        nested = tmp_path / "data" / "ini"
        nested.mkdir(parents=True)
        assert Config.find_and_load(nested).get("logging.level") == "DEBUG"

    def test_validate(self):
        config = Config({"string_table": {"capacity": 40}, "logging": {"level": "LOUD"}})
        problems = config.validate()
        assert len(problems) == 2
        assert any("capacity" in p for p in problems)
        assert any("logging.level" in p for p in problems)

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / "out" / ".romdat.yml"
        config = Config({"output": {"filtered_ini": True}})
        config.save(path)
        assert Config.from_file(path).to_dict() == config.to_dict()
