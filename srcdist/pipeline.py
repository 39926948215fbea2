# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The release pipeline, top to bottom.

    resolve revision -> create workspace -> export -> build -> assemble
        -> package -> publish

Each stage's output is the next stage's input and nothing is retried. Any
failure raises a SrcdistError subclass and ends the run.

Failed build or packaging blocks leave the workspace on disk so the broken
tree can be inspected; its path is in the error log. With clean_on_failure
the workspace is removed instead. Either way, nothing reaches out_dir unless
all four artifacts were produced.
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional

from srcdist.build.builder import build_tree
from srcdist.build.steps import StepResult
from srcdist.config.schema import ReleaseConfig, ToolchainConfig
from srcdist.errors import BuildError, PackagingError, SrcdistError
from srcdist.logging.logger import get_logger
from srcdist.release.naming import ReleaseName, assemble, release_name
from srcdist.release.packaging.packager import package_tree
from srcdist.release.publishing.publisher import check_output_dir, publish, remove_workspace
from srcdist.runtime.environment import check_minimum_python, check_required_tools, get_system_info
from srcdist.vcs.git import create_workspace, export_tree, resolve_revision

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a successful run."""

    commit: str
    name: ReleaseName
    artifacts: list[Path] = field(default_factory=list)
    dry_run: bool = False


def required_tools(toolchain: ToolchainConfig) -> list[str]:
    """Build programs this run will call, as named in argv[0]."""
    return [toolchain.bootstrap[0], toolchain.configure[0], toolchain.make[0]]


def _fail_block(
    error_cls: type[BuildError],
    result: StepResult,
    workspace: Path,
    config: ReleaseConfig,
) -> BuildError:
    if config.clean_on_failure:
        remove_workspace(workspace)
        kept = None
    else:
        kept = str(workspace)
        logger.error("Workspace left for inspection", extra={"workspace": kept})
    return error_cls(
        f"Step '{result.failed_step}' failed: {result.error}",
        step=result.failed_step or "unknown",
        workspace=kept,
    )


def run_release(
    config: ReleaseConfig,
    toolchain: Optional[ToolchainConfig] = None,
    today: Optional[date] = None,
    workspace_base: Optional[Path] = None,
    dry_run: bool = False,
) -> ReleaseResult:
    """
    Produce the release archives for one revision.

    Args:
        config: What to release.
        toolchain: How to build it. Defaults to the autotools layout.
        today: Date used for snapshot names. Defaults to the current date.
        workspace_base: Parent directory for the temporary workspace.
            Defaults to the system temp directory.
        dry_run: Resolve the revision and compute names, then stop before
            touching the disk.

    Returns:
        ReleaseResult with the commit, the names and the published paths.

    Raises:
        SrcdistError: Any stage failed.
    """
    toolchain = toolchain or ToolchainConfig()
    vcs_dir = Path(config.vcs_directory).expanduser()
    out_dir = Path(config.out_dir).expanduser()
    doc_dir = Path(config.doc_dir).expanduser() if config.doc_dir else None

    logger.info(
        "Release started",
        extra={
            "vcs_directory": str(vcs_dir),
            "revision": config.revision,
            "label": config.label,
            "snapshot": config.snapshot,
            "out_dir": str(out_dir),
        },
    )

    logger.debug("System information", extra=get_system_info()._asdict())
    check_minimum_python()
    check_required_tools(["git"])
    check_output_dir(out_dir)

    commit = resolve_revision(vcs_dir, config.revision)
    name = release_name(config.project_name, config.label, config.snapshot, today)

    if dry_run:
        logger.info(
            "Dry run, would build release",
            extra={"commit": commit, "top_dir": name.top_dir, "base_name": name.base_name},
        )
        return ReleaseResult(commit=commit, name=name, dry_run=True)

    check_required_tools(required_tools(toolchain))

    workspace = create_workspace(workspace_base)
    try:
        tree = export_tree(vcs_dir, commit, workspace, toolchain.export_prefix, toolchain.marker_file)
    except SrcdistError:
        remove_workspace(workspace)
        raise

    result = build_tree(tree, config.project_name, toolchain, doc_dir)
    if not result.ok:
        raise _fail_block(BuildError, result, workspace, config)

    try:
        assemble(tree, toolchain.build_subdir, name)
    except BuildError:
        if config.clean_on_failure:
            remove_workspace(workspace)
        raise

    result, artifacts = package_tree(workspace, name)
    if not result.ok:
        raise _fail_block(PackagingError, result, workspace, config)

    published = publish(workspace, artifacts.published(), out_dir)

    logger.info(
        "Release complete",
        extra={
            "commit": commit,
            "top_dir": name.top_dir,
            "artifacts": [p.name for p in published],
        },
    )
    return ReleaseResult(commit=commit, name=name, artifacts=published)
