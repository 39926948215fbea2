# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised by the release pipeline.

Every failure that should end a run derives from SrcdistError, so the CLI
can turn the whole family into a single exit code with one except clause.
Configuration problems live in srcdist.config.exceptions instead, since they
happen before the pipeline starts.
"""


class SrcdistError(Exception):
    """Base for every pipeline failure."""


class EnvironmentCheckError(SrcdistError):
    """A required external tool or interpreter feature is missing."""


class RevisionError(SrcdistError):
    """The requested revision does not resolve to a commit."""


class WorkspaceError(SrcdistError):
    """The temporary workspace could not be created."""


class ExportError(SrcdistError):
    """git archive or tree extraction failed."""


class BuildError(SrcdistError):
    """
    A step of the build block failed.

    The workspace path is kept on the exception so the caller can report
    where the half-built tree was left.
    """

    def __init__(self, message: str, step: str, workspace: str | None = None) -> None:
        super().__init__(message)
        self.step = step
        self.workspace = workspace


class PackagingError(BuildError):
    """Creating the tarballs or their checksum files failed."""


class PublishError(SrcdistError):
    """The artifacts could not be moved to the output directory."""
