"""
Runtime Configuration Unit Tests
Tests for sumtree/config/runtime.py
"""
import pytest

from sumtree.config import (
    RuntimeConfig,
    get_default_config,
    set_default_config,
)
from sumtree.crypto.hashing import blake2b_256
from sumtree.schemas.errors import ConfigurationException, ErrorCodes


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        config = RuntimeConfig()

        assert config.hash.algorithm == "sha256"
        assert config.tree.amount_bits == 64
        assert config.tree.max_workers == 1
        assert config.tree.parallel_threshold == 1024
        assert config.logging.level == "INFO"
        assert config.logging.file is None

    def test_build_options(self):
        options = RuntimeConfig().build_options()

        assert set(options) == {"scheme", "max_workers", "parallel_threshold"}
        assert options["scheme"].amount_bits == 64


class TestFromDict:
    """Tests for RuntimeConfig.from_dict()."""

    def test_partial(self):
        config = RuntimeConfig.from_dict({"tree": {"amount_bits": 128}})

        assert config.tree.amount_bits == 128
        assert config.hash.algorithm == "sha256"

    def test_unknown_key(self):
        with pytest.raises(ConfigurationException):
            RuntimeConfig.from_dict({"tree": {"depth": 3}})

    def test_unknown_algorithm(self):
        with pytest.raises(ConfigurationException) as exc_info:
            RuntimeConfig.from_dict({"hash": {"algorithm": "md5"}})

        assert exc_info.value.code == ErrorCodes.UNSUPPORTED_HASH_ALGORITHM

    @pytest.mark.parametrize(
        "tree",
        [{"amount_bits": 12}, {"amount_bits": 0}, {"max_workers": 0}, {"parallel_threshold": 0}],
    )
    def test_invalid_tree_values(self, tree):
        with pytest.raises(ConfigurationException):
            RuntimeConfig.from_dict({"tree": tree})

    def test_to_dict_round_trip(self):
        config = RuntimeConfig.from_dict(
            {"hash": {"algorithm": "blake2b_256"}, "tree": {"max_workers": 4}}
        )
        assert RuntimeConfig.from_dict(config.to_dict()) == config

    def test_build_scheme(self):
        scheme = RuntimeConfig.from_dict(
            {"hash": {"algorithm": "blake2b_256"}, "tree": {"amount_bits": 32}}
        ).build_scheme()

        assert scheme.digest_function is blake2b_256
        assert scheme.max_amount == 2**32 - 1


class TestEnvironment:
    """Tests for SUMTREE_* environment variables."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SUMTREE_HASH_ALGORITHM", "sha3_256")
        monkeypatch.setenv("SUMTREE_AMOUNT_BITS", "128")
        monkeypatch.setenv("SUMTREE_MAX_WORKERS", "8")
        monkeypatch.setenv("SUMTREE_LOG_LEVEL", "debug")

        config = RuntimeConfig.from_env()

        assert config.hash.algorithm == "sha3_256"
        assert config.tree.amount_bits == 128
        assert config.tree.max_workers == 8
        assert config.logging.level == "DEBUG"

    def test_non_integer_env(self, monkeypatch):
        monkeypatch.setenv("SUMTREE_MAX_WORKERS", "many")

        with pytest.raises(ConfigurationException, match="SUMTREE_MAX_WORKERS"):
            RuntimeConfig.from_env()

    def test_env_overrides_file_values(self, monkeypatch):
        config = RuntimeConfig.from_dict({"tree": {"amount_bits": 32, "max_workers": 2}})
        monkeypatch.setenv("SUMTREE_MAX_WORKERS", "6")

        merged = config.with_env_overrides()

        assert merged.tree.max_workers == 6
        assert merged.tree.amount_bits == 32

    def test_no_overrides_returns_same(self):
        config = RuntimeConfig()
        assert config.with_env_overrides() is config


class TestYaml:
    """Tests for RuntimeConfig.from_yaml()."""

    def test_load(self, tmp_path):
        path = tmp_path / "sumtree.yaml"
        path.write_text("hash:\n  algorithm: blake2b_256\ntree:\n  amount_bits: 32\n")

        config = RuntimeConfig.from_yaml(path)

        assert config.hash.algorithm == "blake2b_256"
        assert config.tree.amount_bits == 32

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert RuntimeConfig.from_yaml(path) == RuntimeConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_yaml(tmp_path / "nope.yaml")

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationException):
            RuntimeConfig.from_yaml(path)


class TestDefaultConfig:
    """Tests for the process default configuration."""

    def test_set_and_reset(self):
        custom = RuntimeConfig.from_dict({"tree": {"max_workers": 3}})
        try:
            set_default_config(custom)
            assert get_default_config() is custom
        finally:
            set_default_config(None)

        assert get_default_config().tree.max_workers == 1
        set_default_config(None)
