"""Exceptions raised by the cleaning and analysis stages.

File-level errors are recoverable: the ingestion step logs them and skips the
file. Dataset-level errors abort the stage.
"""


class CyclisticError(Exception):
    """Base class for pipeline failures."""


class CleaningError(CyclisticError):
    """The combined dataset violates an invariant; the cleaning run aborts."""


class AnalysisError(CyclisticError):
    """The cleaned dataset cannot be analysed."""


class FileReadError(CyclisticError):
    """A single raw file could not be parsed."""


class MissingColumnsError(FileReadError):
    """A raw file parsed but lacks required columns."""

    def __init__(self, path, missing):
        self.path = path
        self.missing = list(missing)
        super().__init__(f"{path} is missing required columns: {', '.join(self.missing)}")
