# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader — reads the optional toolchain YAML and builds ReleaseConfig.

Loading is linear:
  1. Read raw text from the file
  2. Parse as YAML into a plain dict
  3. Hand the dict to pydantic for schema validation
  4. Return the frozen config object

If anything goes wrong at any step, we fail immediately with a clear error.
There is no retry logic and no recovery. A broken config must stop the run
before a workspace exists.
"""

from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from srcdist.config.exceptions import ConfigLoadError, ConfigValidationError
from srcdist.config.schema import ReleaseConfig, SrcdistConfig, ToolchainConfig

# Read once by the option parser; a -g flag always wins over it.
VCS_DIRECTORY_ENV = "GIT_DIR"


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't a YAML mapping.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def load_toolchain(config_path: Optional[Path]) -> ToolchainConfig:
    """
    Load the toolchain section of a config file, or the defaults when no file is given.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (wrong types, unknown keys).
    """
    if config_path is None:
        return ToolchainConfig()

    raw_data = _read_yaml_file(config_path)

    try:
        config = SrcdistConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{err}"
        ) from err

    return config.toolchain


def default_project_name(vcs_directory: str) -> str:
    """
    Derive the archive prefix from the repository path.

    "/src/foo" and "/src/foo.git" both give "foo"; a path to the .git
    directory of a checkout gives the checkout's name.
    """
    path = Path(vcs_directory).expanduser().resolve()
    if path.name == ".git":
        path = path.parent
    name = path.name
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name


def build_release_config(
    vcs_directory: Optional[str],
    revision: Optional[str],
    label: Optional[str] = None,
    snapshot: bool = False,
    doc_dir: Optional[str] = None,
    out_dir: Optional[str] = ".",
    project_name: Optional[str] = None,
    clean_on_failure: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> ReleaseConfig:
    """
    Resolve precedence and defaults, then validate into a frozen ReleaseConfig.

    Precedence for the repository path is: explicit value, then the
    GIT_DIR entry of `environ`, then nothing (which fails validation).
    This is the only place the environment is consulted.

    Raises:
        ConfigValidationError: A required value is missing or empty, or a
            label or project name contains a path separator.
    """
    if not vcs_directory and environ is not None:
        vcs_directory = environ.get(VCS_DIRECTORY_ENV)

    if not label:
        label = revision

    if not project_name and vcs_directory:
        project_name = default_project_name(vcs_directory)

    try:
        return ReleaseConfig(
            vcs_directory=vcs_directory or "",
            revision=revision or "",
            label=label or "",
            project_name=project_name or "",
            snapshot=snapshot,
            doc_dir=doc_dir or None,
            out_dir=out_dir if out_dir is not None else "",
            clean_on_failure=clean_on_failure,
        )
    except ValidationError as err:
        missing = sorted({str(e["loc"][0]) for e in err.errors() if e["loc"]})
        hint = ""
        if "label" in missing and label and "/" in label:
            hint = "; labels cannot contain '/', pass -l for branch revisions"
        raise ConfigValidationError(
            f"Invalid release options ({', '.join(missing)}){hint}:\n{err}"
        ) from err
