"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from fastcheck.config import CheckConfig, load_config
from fastcheck.constants import SNAPSHOT_FILE
from fastcheck.errors import ConfigError, InvalidPatternError
from fastcheck.hashing import Algorithm


class TestLoadConfig:
    """Test reading config files."""

    def test_toml_with_camel_case_keys(self, write_config):
        path = write_config("""
roots = ["/data", "/srv"]
excludes = ["*.tmp"]
followSymlinks = true
cores = 4
saveSnapshot = true
verbose = true
""")
        config = load_config(path)

        assert config.roots == ["/data", "/srv"]
        assert config.excludes == ["*.tmp"]
        assert config.follow_symlinks is True
        assert config.cores == 4
        assert config.save_snapshot is True
        assert config.verbose is True
        assert config.algorithm is Algorithm.XXH3
        assert config.snapshot_path == SNAPSHOT_FILE

    def test_yaml(self, write_config):
        path = write_config("roots: [/data]\nalgorithm: sha256\nbatchCap: 2\n", name="config.yaml")

        config = load_config(path)

        assert config.roots == ["/data"]
        assert config.algorithm is Algorithm.SHA256
        assert config.cores == 2

    def test_nested_table(self, write_config):
        path = write_config('[fastcheck]\nroots = ["/data"]\nstrict = true\n')

        config = load_config(path)

        assert config.roots == ["/data"]
        assert config.strict is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "config.toml")

    def test_malformed_toml(self, write_config):
        with pytest.raises(ConfigError):
            load_config(write_config("roots = [\n"))

    def test_unknown_key(self, write_config):
        with pytest.raises(ConfigError):
            load_config(write_config('rootz = ["/data"]\n'))

    def test_bad_glob(self, write_config):
        with pytest.raises(InvalidPatternError):
            load_config(write_config('roots = ["/data"]\nexcludes = ["*.[ch"]\n'))

    def test_negative_cores(self, write_config):
        with pytest.raises(ConfigError):
            load_config(write_config("cores = -1\n"))

    def test_unsupported_suffix(self, write_config):
        with pytest.raises(ConfigError, match="Unsupported"):
            load_config(write_config("roots = []", name="config.ini"))


class TestCheckConfig:
    """Test the config value itself."""

    def test_roots_deduplicated_in_order(self):
        config = CheckConfig(roots=["/b", "/a", "/b"])

        assert config.roots == ["/b", "/a"]

    def test_frozen(self):
        config = CheckConfig()

        with pytest.raises(ValidationError):
            config.strict = True

    def test_with_overrides_returns_new_instance(self):
        config = CheckConfig(roots=["/data"], cores=2)

        updated = config.with_overrides(strict=True, cores=None, algorithm=Algorithm.SHA256)

        assert updated is not config
        assert updated.strict is True
        assert updated.cores == 2
        assert updated.algorithm is Algorithm.SHA256
        assert config.strict is False

    def test_with_overrides_nothing_to_change(self):
        config = CheckConfig()

        assert config.with_overrides(strict=None) is config

    def test_invalid_override(self):
        with pytest.raises(ConfigError):
            CheckConfig().with_overrides(cores=-3)
