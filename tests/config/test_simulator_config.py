"""Tests for the nested run settings."""

import io

import pytest

from ssmkit.config import (
    get_default_simulator_config,
    get_nested_config,
    load_simulator_config,
    merge_simulator_config,
)
from ssmkit.config.simulator_config import DELTA_T, WFPT_MAX_TERMS, WFPT_TOLERANCE


class TestDefaults:
    def test_sections(self):
        config = get_default_simulator_config()
        assert set(config) == {"simulator", "likelihood", "pipeline"}
        assert config["simulator"]["delta_t"] == DELTA_T
        assert config["likelihood"]["tolerance"] == WFPT_TOLERANCE
        assert config["likelihood"]["max_terms"] == WFPT_MAX_TERMS
        assert config["pipeline"]["n_cpus"] == 1

    def test_defaults_are_fresh(self):
        first = get_default_simulator_config()
        first["simulator"]["delta_t"] = 1.0
        assert get_default_simulator_config()["simulator"]["delta_t"] == DELTA_T


class TestNestedConfigAccess:
    def test_get_nested_config(self):
        config = {"simulator": {"delta_t": 0.0005}}
        assert get_nested_config(config, "simulator", "delta_t") == 0.0005

    def test_missing_section_returns_default(self):
        config = {"simulator": {"delta_t": 0.0005}}
        assert get_nested_config(config, "pipeline", "n_cpus") is None
        assert get_nested_config(config, "pipeline", "n_cpus", default=4) == 4

    def test_missing_key_returns_default(self):
        config = {"simulator": {"delta_t": 0.0005}}
        assert get_nested_config(config, "simulator", "max_t", default=20.0) == 20.0


class TestMerge:
    def test_merge_overrides_only_given_keys(self):
        base = get_default_simulator_config()
        merged = merge_simulator_config(base, {"simulator": {"max_t": 5.0}})
        assert merged["simulator"]["max_t"] == 5.0
        assert merged["simulator"]["delta_t"] == DELTA_T
        assert base["simulator"]["max_t"] != 5.0

    def test_unknown_section(self):
        with pytest.raises(ValueError, match="Unknown settings section"):
            merge_simulator_config(get_default_simulator_config(), {"kde": {}})

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="dt"):
            merge_simulator_config(
                get_default_simulator_config(), {"simulator": {"dt": 0.1}}
            )

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError, match="mapping"):
            merge_simulator_config(get_default_simulator_config(), {"pipeline": 4})


class TestYaml:
    def test_load_from_stream(self):
        stream = io.StringIO(
            "simulator:\n"
            "  delta_t: 0.0001\n"
            "likelihood:\n"
            "  max_terms: 50\n"
            "pipeline:\n"
            "  n_cpus: 2\n"
        )
        config = load_simulator_config(stream)
        assert config["simulator"]["delta_t"] == 0.0001
        assert config["likelihood"]["max_terms"] == 50
        assert config["likelihood"]["tolerance"] == WFPT_TOLERANCE
        assert config["pipeline"]["n_cpus"] == 2

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("pipeline:\n  chunk_size: 500\n")
        assert load_simulator_config(path)["pipeline"]["chunk_size"] == 500

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_simulator_config(str(path)) == get_default_simulator_config()
