"""Basic tests for storelens."""

import pytest

from storelens.utils.config import Config, get_config, load_config


def test_version():
    """Test version is set."""
    from storelens import __version__

    assert __version__ == "0.1.0"


def test_default_config():
    config = get_config()
    assert config.get("store.prefix") == "lsdb_"
    assert config.get("store.capacity_bytes") == 5 * 1024 * 1024
    assert config.get("analysis.sample_size") == 100
    assert config.get("analysis.confidence_threshold") == 0.4
    assert config.get("analysis.missing", "fallback") == "fallback"


def test_config_set_and_merge(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("analysis:\n  sample_size: 25\n")

    config = load_config(path)
    assert get_config() is config
    assert config.get("analysis.sample_size") == 25
    assert config.get("analysis.confidence_threshold") == 0.4

    config.set("output.indent", 4)
    assert config.to_dict()["output"]["indent"] == 4


def test_config_roundtrip(tmp_path):
    config = Config()
    config.set("analysis.sample_size", 7)
    path = tmp_path / "nested" / "config.yml"
    config.save(path)

    assert Config.from_yaml(path).get("analysis.sample_size") == 7


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.from_yaml(tmp_path / "absent.yml")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
