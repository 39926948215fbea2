# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for srcdist.

Two kinds of configuration exist:
  - ReleaseConfig: what to release. Built once from the command line and
    never changed afterwards.
  - ToolchainConfig: how the exported tree is built. The defaults describe an
    autotools project with gettext translations and HTML docs. A YAML file
    can override any of it, which is also how tests swap in fake build tools.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReleaseConfig(BaseModel):
    """
    One release run, as requested on the command line.

    The option parser fills in the derived defaults (label from revision,
    project name from the repository directory) before constructing this,
    so every field here is concrete.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", validate_default=True, str_strip_whitespace=True
    )

    vcs_directory: str = Field(min_length=1, description="Path to the git repository")
    revision: str = Field(min_length=1, description="Tag, branch or commit to export")
    label: str = Field(
        min_length=1,
        pattern=r"^[^/]+$",
        description="Release label used in archive names; no path separators",
    )
    project_name: str = Field(
        min_length=1,
        pattern=r"^[^/]+$",
        description="Prefix of every archive name",
    )
    snapshot: bool = Field(
        default=False,
        description="Embed today's date in the top directory and 'current' in the archive name",
    )
    doc_dir: Optional[str] = Field(
        default=None,
        description="Directory with prebuilt HTML docs; skips building docs from source",
    )
    out_dir: str = Field(default=".", min_length=1, description="Where the archives end up")
    clean_on_failure: bool = Field(
        default=False,
        description="Remove the workspace when the build or packaging fails",
    )


class ToolchainConfig(BaseModel):
    """
    External build commands and the paths their outputs get relocated to.

    Commands are argv lists and run without a shell. Directory fields are
    relative to the exported tree unless the name says build dir.
    `{project}` in commands and file names is replaced by the project name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    export_prefix: str = Field(
        default="srcdist-export",
        min_length=1,
        description="Fixed top directory of the export, so build logs compare across runs",
    )
    marker_file: str = Field(
        default="git-commit-id",
        min_length=1,
        description="File at the top of the tree holding the resolved commit id",
    )
    bootstrap: list[str] = Field(
        default_factory=lambda: ["./autogen.sh"],
        min_length=1,
        description="Bootstrap command, run in the tree",
    )
    build_subdir: str = Field(default="build", min_length=1)
    configure: list[str] = Field(
        default_factory=lambda: ["../configure"],
        min_length=1,
        description="Configure command, run in the build dir",
    )
    configure_flags: list[str] = Field(
        default_factory=lambda: ["--enable-nls", "--enable-docs", "--enable-debug"],
        description="Every optional feature, so all conditional options show up in the docs",
    )
    make: list[str] = Field(default_factory=lambda: ["make"], min_length=1)
    translations_subdir: str = Field(default="po")
    translations_target: str = Field(default="update-gmo")
    translations_glob: str = Field(default="*.gmo")
    packaging_spec_file: str = Field(default="{project}.spec")
    contrib_subdir: str = Field(default="contrib")
    docs_subdir: str = Field(default="doc", description="Build dir subdirectory holding docs")
    docs_target: str = Field(default="html")
    docs_glob: str = Field(default="*.html")
    doc_html_subdir: str = Field(default="doc/html")
    prebuilt_doc_trees: list[str] = Field(
        default_factory=lambda: ["html", "html-chunked"],
        description="Subdirectories of --doc-dir copied into doc_html_subdir",
    )
    pot_target: str = Field(default="{project}.pot-update")
    pot_file: str = Field(default="{project}.pot")
    discarded_artifacts: list[str] = Field(
        default_factory=lambda: ["po/POTFILES"],
        description="Tree files produced as a side effect of the build and not shipped",
    )
    command_timeout: int = Field(
        default=3600,
        ge=1,
        description="Seconds any single build command may run",
    )


class SrcdistConfig(BaseModel):
    """Top-level YAML container. Only the toolchain section lives in files."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
