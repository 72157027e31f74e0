"""Exception classes for mdcite."""

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdcite.core.models import LoadFailure


class MdciteError(Exception):
    """Base exception for mdcite errors."""

    pass


class EntryLoadError(MdciteError):
    """Raised when a bibliography file cannot be loaded."""

    kind = "io_error"

    def __init__(self, path: str, reason: str):
        """Initialize with path and reason."""
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Unable to read bibliography file '{self.path}': {reason}")


# A load error for one file of a multi-file bibliography
PerFileLoadError = EntryLoadError


class BibliographyFileNotFound(EntryLoadError):
    """Raised when a bibliography file does not exist."""

    kind = "not_found"

    def __init__(self, path: str):
        super().__init__(path, "file not found")


class BibliographyParseError(EntryLoadError):
    """Raised when a bibliography file cannot be parsed."""

    kind = "parse_error"


class AllSourcesFailedError(MdciteError):
    """Raised when every file of a bibliography failed to load."""

    def __init__(self, failures: Iterable["LoadFailure"]):
        """Initialize with the per-file failures."""
        self.failures = tuple(failures)
        paths = ", ".join(f"'{failure.path}'" for failure in self.failures)
        super().__init__(f"Unable to read bibliography file(s) {paths}")


class InvalidKeyError(MdciteError, ValueError):
    """Raised when a citation key cannot be formatted."""

    def __init__(self, key: object, reason: str):
        """Initialize with the offending key and reason."""
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid citation key {key!r}: {reason}")


class FrontMatterError(MdciteError, ValueError):
    """Raised when a document's front matter cannot be interpreted."""

    pass


class ConfigError(MdciteError, ValueError):
    """Raised when configuration cannot be read or written."""

    pass
