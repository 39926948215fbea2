# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build the generated files that ship in a source release.

A release tarball has to build on machines without the maintainer tools, so
everything generated gets produced here and dropped into the tree:

    <tree>/
    ├─ po/*.gmo              compiled translation catalogs
    ├─ po/<project>.pot      translation template (docs built from source only)
    ├─ contrib/<project>.spec
    └─ doc/html/             rendered HTML manual

The sequence runs as one all-or-nothing block. The configure step enables
every optional feature so that all conditional options show up in the docs.
When a prebuilt doc directory is given, the docs are copied instead of built
and the full compile is skipped.
"""

import shutil
from pathlib import Path
from typing import Optional

from srcdist.build.steps import Step, StepResult, run_steps
from srcdist.config.schema import ToolchainConfig
from srcdist.logging.logger import get_logger
from srcdist.runtime.commands import run_command
from srcdist.utils.filesystem import move_into, move_matching, safe_delete
from srcdist.utils.paths import ensure_directory, validate_path_within

logger = get_logger(__name__)


class TreeBuilder:
    """
    Runs the toolchain against one exported tree.

    Every path is derived from `tree`; commands get their directory through
    run_command's cwd, never through chdir.
    """

    def __init__(self, tree: Path, project: str, toolchain: ToolchainConfig) -> None:
        self.tree = tree
        self.project = project
        self.toolchain = toolchain
        self.build_dir = tree / toolchain.build_subdir

    def _expand(self, template: str) -> str:
        return template.replace("{project}", self.project)

    def _argv(self, command: list[str], *extra: str) -> list[str]:
        return [self._expand(arg) for arg in (*command, *extra)]

    def _in_tree(self, relative: str) -> Path:
        return validate_path_within(self.tree / relative, self.tree)

    def _make(self, subdir: str, *targets: str) -> None:
        workdir = self.build_dir / subdir if subdir else self.build_dir
        run_command(
            self._argv(self.toolchain.make, *targets),
            cwd=workdir,
            timeout=self.toolchain.command_timeout,
        )

    def bootstrap(self) -> None:
        run_command(
            self._argv(self.toolchain.bootstrap),
            cwd=self.tree,
            timeout=self.toolchain.command_timeout,
        )

    def create_build_dir(self) -> None:
        ensure_directory(self.build_dir)

    def configure(self) -> None:
        run_command(
            self._argv(self.toolchain.configure, *self.toolchain.configure_flags),
            cwd=self.build_dir,
            timeout=self.toolchain.command_timeout,
        )

    def build_translations(self) -> None:
        """Compile the catalogs and move them next to their .po sources."""
        tc = self.toolchain
        self._make(tc.translations_subdir, tc.translations_target)
        moved = move_matching(
            self.build_dir / tc.translations_subdir,
            tc.translations_glob,
            self._in_tree(tc.translations_subdir),
        )
        logger.info("Moved translation catalogs", extra={"count": len(moved)})

    def relocate_spec_file(self) -> None:
        spec_file = self.build_dir / self._expand(self.toolchain.packaging_spec_file)
        if not spec_file.is_file():
            raise FileNotFoundError(f"Packaging spec file was not generated: {spec_file}")
        contrib = ensure_directory(self._in_tree(self.toolchain.contrib_subdir))
        move_into(spec_file, contrib)

    def copy_prebuilt_docs(self, doc_dir: Path) -> None:
        """Copy each prebuilt HTML tree from doc_dir into the tree's doc/html."""
        if not doc_dir.is_dir():
            raise FileNotFoundError(f"Prebuilt doc directory not found: {doc_dir}")

        html_dir = ensure_directory(self._in_tree(self.toolchain.doc_html_subdir))
        for name in self.toolchain.prebuilt_doc_trees:
            source = doc_dir / name
            if not source.is_dir():
                raise FileNotFoundError(f"Prebuilt doc tree missing: {source}")
            shutil.copytree(source, html_dir / name, dirs_exist_ok=True)
            logger.info("Copied prebuilt docs", extra={"source": str(source)})

    def build_project(self) -> None:
        self._make("")

    def build_docs(self) -> None:
        tc = self.toolchain
        self._make(tc.docs_subdir, tc.docs_target)
        moved = move_matching(
            self.build_dir / tc.docs_subdir,
            tc.docs_glob,
            self._in_tree(tc.doc_html_subdir),
        )
        logger.info("Moved HTML docs", extra={"count": len(moved)})

    def build_pot(self) -> None:
        tc = self.toolchain
        self._make(tc.translations_subdir, self._expand(tc.pot_target))
        pot = self.build_dir / tc.translations_subdir / self._expand(tc.pot_file)
        if not pot.is_file():
            raise FileNotFoundError(f"Translation template was not generated: {pot}")
        move_into(pot, ensure_directory(self._in_tree(tc.translations_subdir)))

    def discard_artifacts(self) -> None:
        for relative in self.toolchain.discarded_artifacts:
            target = self._in_tree(relative)
            if safe_delete(target):
                logger.info("Discarded build artifact", extra={"path": str(target)})

    def steps(self, doc_dir: Optional[Path]) -> list[Step]:
        steps = [
            Step("bootstrap", self.bootstrap),
            Step("create-build-dir", self.create_build_dir),
            Step("configure", self.configure),
            Step("translations", self.build_translations),
            Step("packaging-spec", self.relocate_spec_file),
        ]
        if doc_dir is not None:
            steps.append(Step("prebuilt-docs", lambda: self.copy_prebuilt_docs(doc_dir)))
        else:
            steps.extend(
                [
                    Step("build", self.build_project),
                    Step("docs", self.build_docs),
                    Step("pot", self.build_pot),
                    Step("discard-artifacts", self.discard_artifacts),
                ]
            )
        return steps


def build_tree(
    tree: Path,
    project: str,
    toolchain: ToolchainConfig,
    doc_dir: Optional[Path] = None,
) -> StepResult:
    """
    Produce the generated release files inside an exported tree.

    Never raises for a failing step: the StepResult says which step failed
    and why, and the caller decides what happens to the workspace.
    """
    builder = TreeBuilder(tree, project, toolchain)
    logger.info(
        "Building tree",
        extra={"tree": str(tree), "prebuilt_docs": str(doc_dir) if doc_dir else None},
    )
    return run_steps("build", builder.steps(doc_dir))
