# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for srcdist tests.

Two things most test modules need:
  - a small real git repository with a tagged commit
  - a toolchain config whose bootstrap/configure/make are a Python script,
    so the build block runs without autotools or make installed

Tests that need git are skipped when it isn't on PATH.
"""

import shutil
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from srcdist.config.schema import ToolchainConfig

PROJECT = "demo"

_FAKE_TOOLCHAIN = textwrap.dedent('''\
    """Stand-in for autogen.sh, configure and make. Role is argv[1]."""
    import os
    import sys
    from pathlib import Path

    role = sys.argv[1]
    cwd = Path.cwd()
    with open(os.environ.get("FAKE_TOOLCHAIN_LOG", os.devnull), "a") as log:
        log.write(" ".join([role, cwd.name, *sys.argv[2:]]) + "\\n")

    if role == "bootstrap":
        (cwd / "configure").write_text("generated\\n")
    elif role == "configure":
        project = sys.argv[2]
        assert (cwd.parent / "configure").exists(), "bootstrap did not run"
        (cwd / f"{project}.spec").write_text(f"Name: {project}\\n")
        (cwd / "configure-args.txt").write_text("\\n".join(sys.argv[3:]))
        (cwd / "po").mkdir(exist_ok=True)
        (cwd / "doc").mkdir(exist_ok=True)
    elif role == "make":
        targets = sys.argv[2:]
        if cwd.name == "po" and targets == ["update-gmo"]:
            for lang in ("de", "fr"):
                (cwd / f"{lang}.gmo").write_bytes(b"\\x95\\x04\\x12\\xde" + lang.encode())
        elif cwd.name == "po" and targets and targets[0].endswith(".pot-update"):
            project = targets[0][: -len(".pot-update")]
            (cwd / f"{project}.pot").write_text("msgid \\"\\"\\n")
            # pot-update regenerates the file list in the source tree
            (cwd.parent.parent / "po" / "POTFILES").write_text("src/main.c\\n")
        elif cwd.name == "doc" and targets == ["html"]:
            (cwd / "index.html").write_text("<html>index</html>")
            (cwd / "manual.html").write_text("<html>manual</html>")
        elif not targets:
            (cwd / "demo-binary").write_text("built\\n")
        else:
            sys.exit(f"unknown make target {targets} in {cwd}")
    else:
        sys.exit(f"unknown role {role}")
''')


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-C",
            str(repo),
            "-c",
            "user.name=Release Bot",
            "-c",
            "user.email=release@example.com",
            "-c",
            "commit.gpgsign=false",
            "-c",
            "tag.gpgsign=false",
            *args,
        ],
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture()
def git_repo(tmp_path: Path) -> Path:
    """
    A repository named `demo` with two commits.

    The first commit is tagged v1.2 (annotated), the second is HEAD on the
    default branch.
    """
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    repo = tmp_path / PROJECT
    repo.mkdir()
    _git(repo, "init", "-q")

    (repo / "README").write_text("demo project\n", encoding="utf-8")
    (repo / "po").mkdir()
    (repo / "po" / "de.po").write_text('msgid ""\n', encoding="utf-8")
    (repo / "src").mkdir()
    (repo / "src" / "main.c").write_text("int main(void) { return 0; }\n", encoding="utf-8")
    _git(repo, "add", "-A")
    _git(repo, "commit", "-q", "-m", "initial")
    _git(repo, "tag", "-a", "v1.2", "-m", "release 1.2")

    (repo / "NEWS").write_text("0.12 in progress\n", encoding="utf-8")
    _git(repo, "add", "-A")
    _git(repo, "commit", "-q", "-m", "news")
    return repo


@pytest.fixture()
def git_commit(git_repo: Path):  # type: ignore[no-untyped-def]
    """Return a helper that resolves a revision in git_repo with plain git."""

    def resolve(revision: str) -> str:
        return _git(git_repo, "rev-parse", f"{revision}^{{commit}}")

    return resolve


@pytest.fixture()
def toolchain_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """File the fake toolchain appends one line per invocation to."""
    log = tmp_path / "toolchain.log"
    monkeypatch.setenv("FAKE_TOOLCHAIN_LOG", str(log))
    return log


@pytest.fixture()
def fake_toolchain(tmp_path: Path, toolchain_log: Path) -> ToolchainConfig:
    """ToolchainConfig whose commands run the fake toolchain script."""
    script = tmp_path / "fake_toolchain.py"
    script.write_text(_FAKE_TOOLCHAIN, encoding="utf-8")
    python = sys.executable
    return ToolchainConfig(
        bootstrap=[python, str(script), "bootstrap"],
        configure=[python, str(script), "configure", "{project}"],
        make=[python, str(script), "make"],
        command_timeout=60,
    )


@pytest.fixture()
def exported_tree(tmp_path: Path) -> Path:
    """A directory shaped like an export, without needing git."""
    tree = tmp_path / "workspace" / "srcdist-export"
    (tree / "po").mkdir(parents=True)
    (tree / "po" / "de.po").write_text('msgid ""\n', encoding="utf-8")
    (tree / "README").write_text("demo\n", encoding="utf-8")
    return tree


@pytest.fixture()
def prebuilt_docs(tmp_path: Path) -> Path:
    """A --doc-dir with html and html-chunked trees."""
    doc_dir = tmp_path / "prebuilt-docs"
    (doc_dir / "html").mkdir(parents=True)
    (doc_dir / "html" / "index.html").write_text("<html>single</html>", encoding="utf-8")
    (doc_dir / "html-chunked" / "ch01").mkdir(parents=True)
    (doc_dir / "html-chunked" / "ch01" / "intro.html").write_text("<html>ch1</html>", encoding="utf-8")
    return doc_dir
