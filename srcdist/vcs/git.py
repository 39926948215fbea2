# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Revision resolution and tree export through git.

This is the acquisition stage of the pipeline. A human-given revision (tag,
branch, abbreviated hash) is pinned to a full commit id first, and from then
on only that id is used. The commit id IS the version pin: it also gets
written into the exported tree so a tarball can always be traced back.

Export never clones and never checks out. `git archive` streams the tree at
the commit into a tar file in the workspace, which we then unpack. Every
export lands under the same fixed directory name, so build logs from
different runs line up regardless of the final release label.
"""

import subprocess
import tarfile
import tempfile
from pathlib import Path
from typing import Iterator

from srcdist.errors import ExportError, RevisionError, WorkspaceError
from srcdist.logging.logger import get_logger
from srcdist.runtime.commands import CommandError, run_command, scrubbed_environ
from srcdist.utils.filesystem import atomic_write, safe_delete
from srcdist.utils.paths import validate_path_within

logger = get_logger(__name__)

GIT_TIMEOUT_SECONDS = 600
WORKSPACE_PREFIX = "srcdist-"

# git honours these over -C, which would let a stray environment variable
# silently redirect the export to another repository.
_GIT_LOCATION_VARS = ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE")


def _git(
    vcs_dir: Path, *args: str, stdout_path: Path | None = None
) -> subprocess.CompletedProcess[str]:
    return run_command(
        ["git", "-C", str(vcs_dir), *args],
        cwd=vcs_dir,
        timeout=GIT_TIMEOUT_SECONDS,
        env=scrubbed_environ(*_GIT_LOCATION_VARS),
        stdout_path=stdout_path,
    )


def resolve_revision(vcs_dir: Path, revision: str) -> str:
    """
    Pin a revision to the full id of the commit it names.

    Annotated tags are peeled to their commit, so the marker written into the
    tree is the same whether the release was asked for by tag or by hash.

    Raises:
        RevisionError: The repository doesn't exist or the revision doesn't
            name a commit.
    """
    if not vcs_dir.is_dir():
        raise RevisionError(f"Repository directory not found: {vcs_dir}")

    try:
        result = _git(vcs_dir, "rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}")
    except CommandError as err:
        raise RevisionError(
            f"Revision '{revision}' does not resolve to a commit in {vcs_dir}"
        ) from err

    commit = result.stdout.strip()
    if not commit:
        raise RevisionError(f"Revision '{revision}' does not resolve to a commit in {vcs_dir}")

    logger.info("Resolved revision", extra={"revision": revision, "commit": commit})
    return commit


def create_workspace(base_dir: Path | None = None) -> Path:
    """
    Create a fresh, uniquely named temporary directory owned by this run.

    Uniqueness comes from tempfile.mkdtemp, which creates the directory
    atomically and never reuses an existing path.

    Raises:
        WorkspaceError: If the directory can't be created.
    """
    try:
        workspace = Path(
            tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=str(base_dir) if base_dir else None)
        )
    except OSError as err:
        raise WorkspaceError(f"Cannot create temporary workspace: {err}") from err

    logger.info("Created workspace", extra={"workspace": str(workspace)})
    return workspace


def _safe_members(archive: tarfile.TarFile, destination: Path) -> Iterator[tarfile.TarInfo]:
    """Yield archive members, refusing any that would land outside destination."""
    for member in archive.getmembers():
        try:
            validate_path_within(destination / member.name, destination)
        except ValueError as err:
            raise ExportError(f"Archive member escapes workspace: {member.name}") from err
        if member.issym() or member.islnk():
            link_base = (destination / member.name).parent if member.issym() else destination
            try:
                validate_path_within(link_base / member.linkname, destination)
            except ValueError as err:
                raise ExportError(
                    f"Archive link escapes workspace: {member.name} -> {member.linkname}"
                ) from err
        yield member


def export_tree(
    vcs_dir: Path,
    commit: str,
    workspace: Path,
    prefix: str,
    marker_file: str,
) -> Path:
    """
    Materialize the tree at `commit` under `workspace/prefix` and mark it.

    Steps:
      1. `git archive --prefix=<prefix>/` into workspace/<prefix>.tar
      2. Unpack it into the workspace and delete the tar
      3. Write the commit id plus a newline into <tree>/<marker_file>

    Returns:
        Path to the exported tree.

    Raises:
        ExportError: git archive failed, the archive is unsafe, the
            expected top directory is missing after extraction, or the
            disk refused a write.
    """
    tree = workspace / prefix
    if tree.exists():
        raise ExportError(f"Export target already exists: {tree}")

    archive_path = workspace / f"{prefix}.tar"
    logger.info(
        "Exporting tree",
        extra={"commit": commit, "workspace": str(workspace), "prefix": prefix},
    )

    try:
        _git(
            vcs_dir,
            "archive",
            "--format=tar",
            f"--prefix={prefix}/",
            commit,
            stdout_path=archive_path,
        )
    except CommandError as err:
        safe_delete(archive_path)
        raise ExportError(f"git archive failed for {commit}: {err}") from err

    try:
        with tarfile.open(archive_path, mode="r:") as archive:
            archive.extractall(
                path=workspace,
                members=_safe_members(archive, workspace),
                filter="data",
            )
    except (tarfile.TarError, OSError) as err:
        raise ExportError(f"Cannot unpack exported tree: {err}") from err
    finally:
        safe_delete(archive_path)

    if not tree.is_dir():
        # git archive of an empty tree produces no prefix directory at all.
        raise ExportError(f"Export produced no '{prefix}' directory for {commit}")

    try:
        atomic_write(tree / marker_file, f"{commit}\n")
    except OSError as err:
        raise ExportError(f"Cannot write {marker_file} into {tree}: {err}") from err

    logger.info("Export complete", extra={"tree": str(tree), "marker": marker_file})
    return tree
