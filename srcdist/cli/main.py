# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for srcdist.

Single command, short flags, meant to be called from a shell or a cron job:

    srcdist -g ~/src/project -r v1.2 -l 1.2 -o /srv/releases
    srcdist -g ~/src/project -r HEAD -l 0.12 -s -o /srv/snapshots

-g falls back to $GIT_DIR. Bad flags, positional arguments and missing
required values print usage to stderr and exit 1 before anything else
happens. Progress is logged to stdout as JSON lines, errors to stderr.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Mapping, NamedTuple, Optional, Sequence

from srcdist import __version__
from srcdist.cli.exit_codes import CONFIG_ERROR, RELEASE_ERROR, SUCCESS, USER_ERROR
from srcdist.config.exceptions import ConfigError, ConfigValidationError
from srcdist.config.loader import VCS_DIRECTORY_ENV, build_release_config, load_toolchain
from srcdist.config.schema import ReleaseConfig
from srcdist.errors import BuildError, SrcdistError
from srcdist.logging.logger import configure_logging, get_logger


class UsageError(Exception):
    """Command line could not be parsed into a valid configuration."""


class RunOptions(NamedTuple):
    """Settings that shape how the run behaves, not what it releases."""

    config_path: Optional[Path]
    log_level: str
    log_file: Optional[Path]
    dry_run: bool


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="srcdist",
        description="Build source-release tarballs from a git revision.",
    )
    parser.add_argument(
        "-g",
        dest="vcs_directory",
        metavar="DIR",
        default=None,
        help=f"git repository (default: ${VCS_DIRECTORY_ENV})",
    )
    parser.add_argument("-r", dest="revision", metavar="REV", default=None, help="revision to export")
    parser.add_argument(
        "-l", dest="label", metavar="LABEL", default=None, help="release label (default: REV)"
    )
    parser.add_argument(
        "-s",
        dest="snapshot",
        action="store_true",
        default=False,
        help="snapshot: date in the top directory, 'current' in the archive name",
    )
    parser.add_argument(
        "-d",
        dest="doc_dir",
        metavar="DOCDIR",
        default=None,
        help="copy prebuilt HTML docs from DOCDIR instead of building them",
    )
    parser.add_argument(
        "-o", dest="out_dir", metavar="OUTDIR", default=".", help="output directory (default: .)"
    )
    parser.add_argument(
        "--project",
        dest="project_name",
        default=None,
        help="archive name prefix (default: repository directory name)",
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="YAML file overriding the build toolchain"
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    parser.add_argument("--log-file", dest="log_file", type=Path, default=None)
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        default=False,
        help="resolve the revision and print the release names, then stop",
    )
    parser.add_argument(
        "--clean-on-failure",
        dest="clean_on_failure",
        action="store_true",
        default=False,
        help="remove the workspace when the build or packaging fails",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_args(
    argv: Sequence[str],
    environ: Optional[Mapping[str, str]] = None,
) -> tuple[ReleaseConfig, RunOptions]:
    """
    Turn the command line into a frozen ReleaseConfig.

    The environment is only read here, for the -g default.

    Raises:
        UsageError: Unknown flag, positional argument, or a missing/empty
            required value.
    """
    parser = build_parser()
    args = parser.parse_args(list(argv))

    try:
        config = build_release_config(
            vcs_directory=args.vcs_directory,
            revision=args.revision,
            label=args.label,
            snapshot=args.snapshot,
            doc_dir=args.doc_dir,
            out_dir=args.out_dir,
            project_name=args.project_name,
            clean_on_failure=args.clean_on_failure,
            environ=os.environ if environ is None else environ,
        )
    except ConfigValidationError as err:
        raise UsageError(str(err).splitlines()[0]) from err

    options = RunOptions(
        config_path=args.config,
        log_level=args.log_level,
        log_file=args.log_file,
        dry_run=args.dry_run,
    )
    return config, options


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse, configure logging, run the pipeline, map the outcome to an exit code.

    This is what the `srcdist` console script points to.
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        config, options = parse_args(argv)
    except UsageError as err:
        build_parser().print_usage(sys.stderr)
        sys.stderr.write(f"srcdist: error: {err}\n")
        return USER_ERROR

    configure_logging(options.log_level, options.log_file)
    logger = get_logger("srcdist.cli")

    try:
        toolchain = load_toolchain(options.config_path)
    except ConfigError as err:
        logger.error("Configuration error", extra={"error": str(err)})
        return CONFIG_ERROR

    from srcdist.pipeline import run_release

    try:
        result = run_release(config, toolchain, dry_run=options.dry_run)
    except BuildError as err:
        logger.error(
            "Release failed",
            extra={"error": str(err), "step": err.step, "workspace": err.workspace},
        )
        return RELEASE_ERROR
    except SrcdistError as err:
        logger.error("Release failed", extra={"error": str(err)})
        return RELEASE_ERROR
    except Exception as err:
        logger.error("Unexpected error", extra={"error": str(err)}, exc_info=True)
        return RELEASE_ERROR

    if not result.dry_run:
        logger.info(
            "Artifacts written",
            extra={"artifacts": [str(p) for p in result.artifacts]},
        )
    return SUCCESS


if __name__ == "__main__":
    sys.exit(main())
