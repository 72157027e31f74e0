"""Markdown citation insertion for Pandoc documents.

Resolves the bibliography files that apply to a document, caches their
parsed entries, and formats selected citation keys as ``[@key]``
citations.
"""

__version__ = "0.1.0"

from mdcite.cache import BibliographyCache, raise_for_failures
from mdcite.catalog import LabelRenderer, SelectionCatalog
from mdcite.core.models import BibliographyCacheEntry, Entry, LoadFailure
from mdcite.exceptions import (
    AllSourcesFailedError,
    BibliographyFileNotFound,
    BibliographyParseError,
    ConfigError,
    EntryLoadError,
    FrontMatterError,
    InvalidKeyError,
    MdciteError,
    PerFileLoadError,
)
from mdcite.formatter import (
    NOTHING_SELECTED,
    CitationFormatter,
    format_citation,
    is_insertable,
)
from mdcite.frontmatter import DocumentContext, FrontMatterParser, read_document
from mdcite.paths import BibliographyPathSet, PathResolver
from mdcite.session import CitationSession, SessionState
from mdcite.sources import BibtexFileSource, EntrySource

__all__ = [
    "__version__",
    # Pipeline
    "PathResolver",
    "BibliographyPathSet",
    "BibliographyCache",
    "raise_for_failures",
    "SelectionCatalog",
    "LabelRenderer",
    "CitationFormatter",
    "format_citation",
    "is_insertable",
    "NOTHING_SELECTED",
    "CitationSession",
    "SessionState",
    # Sources
    "EntrySource",
    "BibtexFileSource",
    "FrontMatterParser",
    "DocumentContext",
    "read_document",
    # Models
    "Entry",
    "LoadFailure",
    "BibliographyCacheEntry",
    # Errors
    "MdciteError",
    "EntryLoadError",
    "PerFileLoadError",
    "BibliographyFileNotFound",
    "BibliographyParseError",
    "AllSourcesFailedError",
    "InvalidKeyError",
    "FrontMatterError",
    "ConfigError",
]
