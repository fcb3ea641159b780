"""Exceptions for podstats.

Row-level problems in an import are never raised; they are counted and
reported as warnings on the parse result. The exceptions below are the
whole-operation failures that prevent any usable result.
"""


class PodstatsError(Exception):
    """Base exception for all podstats errors."""

    pass


class ParseError(PodstatsError):
    """The payload could not be turned into an episode collection."""

    pass


class EmptyInputError(ParseError):
    """The payload was empty or contained only whitespace."""

    pass


class NoEpisodesError(ParseError):
    """Parsing finished but no row produced a valid episode."""

    pass


class ImportRejectedError(PodstatsError):
    """A file was refused before parsing started."""

    pass


class FileTooLargeError(ImportRejectedError):
    """The file exceeds the configured maximum size."""

    def __init__(self, size_bytes: int, max_bytes: int):
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(
            f"File size exceeds {max_bytes / (1024 * 1024):g} MB limit "
            f"({size_bytes} bytes)"
        )


class UnsupportedFileTypeError(ImportRejectedError):
    """The file does not look like a CSV export."""

    pass


class UnreadableFileError(ImportRejectedError):
    """The file is not valid UTF-8 text."""

    pass


class StorageError(PodstatsError):
    """Base class for persisted dataset storage failures."""

    pass


class StorageReadError(StorageError):
    """Reading from the storage backend failed."""

    pass


class StorageWriteError(StorageError):
    """Writing to the storage backend failed (e.g. quota exceeded)."""

    pass
