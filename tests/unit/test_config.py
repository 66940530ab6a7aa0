"""Tests for shared/config.py."""

import os
from pathlib import Path

import pytest

from shared.config import LensConfig


class TestLensConfig:
    """Tests for LensConfig.load."""

    def test_defaults(self) -> None:
        config = LensConfig()

        assert config.classpath.separator == os.pathsep
        assert config.classpath.entries == []
        assert config.global_settings.log_level == "WARNING"

    def test_load_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            '[global]\nlog_level = "DEBUG"\n\n'
            '[classpath]\nseparator = ";"\nentries = ["lib/runtime.jar"]\n'
        )

        config = LensConfig.load(path)

        assert config.global_settings.log_level == "DEBUG"
        assert config.classpath.separator == ";"
        assert config.classpath.entries == ["lib/runtime.jar"]

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[classpath]\nseparator = ":"\ncolour = "blue"\n\n[extra]\nkey = 1\n')

        assert LensConfig.load(path).classpath.separator == ":"

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            LensConfig.load(tmp_path / "absent.toml")

    def test_to_dict(self) -> None:
        assert LensConfig().to_dict()["classpath"]["entries"] == []
