# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the config loader.

Covers the toolchain YAML file and the precedence rules for building a
ReleaseConfig from command-line values and the environment.
"""

import textwrap
from pathlib import Path

import pytest

from srcdist.config.exceptions import ConfigLoadError, ConfigValidationError
from srcdist.config.loader import (
    build_release_config,
    default_project_name,
    load_toolchain,
)
from srcdist.config.schema import ToolchainConfig


class TestLoadToolchain:
    def test_none_gives_defaults(self) -> None:
        assert load_toolchain(None) == ToolchainConfig()

    def test_overrides_are_applied(self, tmp_path: Path) -> None:
        config_file = tmp_path / "srcdist.yaml"
        config_file.write_text(
            textwrap.dedent("""\
                toolchain:
                  make: ["gmake", "-j4"]
                  configure_flags: ["--enable-everything"]
            """),
            encoding="utf-8",
        )
        tc = load_toolchain(config_file)
        assert tc.make == ["gmake", "-j4"]
        assert tc.configure_flags == ["--enable-everything"]
        assert tc.bootstrap == ["./autogen.sh"]

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("", encoding="utf-8")
        assert load_toolchain(config_file) == ToolchainConfig()

    def test_missing_file_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not found"):
            load_toolchain(tmp_path / "nope.yaml")

    def test_broken_yaml_raises_load_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
        with pytest.raises(ConfigLoadError, match="Invalid YAML"):
            load_toolchain(config_file)

    def test_non_mapping_raises_load_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError, match="mapping"):
            load_toolchain(config_file)

    def test_unknown_key_raises_validation_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "extra.yaml"
        config_file.write_text("toolchain:\n  compiler: cc\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError):
            load_toolchain(config_file)


class TestDefaultProjectName:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/src/demo", "demo"),
            ("/src/demo/", "demo"),
            ("/srv/git/demo.git", "demo"),
            ("/src/demo/.git", "demo"),
        ],
    )
    def test_derived_from_directory(self, path: str, expected: str) -> None:
        assert default_project_name(path) == expected


class TestBuildReleaseConfig:
    def test_label_defaults_to_revision(self) -> None:
        config = build_release_config("/src/demo", "v1.2")
        assert config.label == "v1.2"
        assert config.project_name == "demo"

    def test_flag_beats_environment(self) -> None:
        config = build_release_config("/src/flag", "HEAD", environ={"GIT_DIR": "/src/env"})
        assert config.vcs_directory == "/src/flag"

    def test_environment_used_when_flag_missing(self) -> None:
        config = build_release_config(None, "HEAD", environ={"GIT_DIR": "/src/env"})
        assert config.vcs_directory == "/src/env"
        assert config.project_name == "env"

    def test_missing_repository_is_rejected(self) -> None:
        with pytest.raises(ConfigValidationError, match="vcs_directory"):
            build_release_config(None, "HEAD", environ={})

    def test_missing_revision_is_rejected(self) -> None:
        with pytest.raises(ConfigValidationError, match="revision"):
            build_release_config("/src/demo", None)

    def test_empty_out_dir_is_rejected(self) -> None:
        with pytest.raises(ConfigValidationError, match="out_dir"):
            build_release_config("/src/demo", "HEAD", out_dir="")

    def test_explicit_project_name_wins(self) -> None:
        config = build_release_config("/src/checkout", "HEAD", project_name="project")
        assert config.project_name == "project"

    def test_branch_revision_needs_explicit_label(self) -> None:
        with pytest.raises(ConfigValidationError, match="pass -l"):
            build_release_config("/src/demo", "release/1.2")

    def test_branch_revision_with_label_is_accepted(self) -> None:
        config = build_release_config("/src/demo", "release/1.2", label="1.2")
        assert config.revision == "release/1.2"
        assert config.label == "1.2"


def test_shipped_example_matches_defaults() -> None:
    example = Path(__file__).resolve().parents[2] / "configs" / "toolchain.yaml"
    assert load_toolchain(example) == ToolchainConfig()
