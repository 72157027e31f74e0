"""Core domain models and BibTeX decoding."""

from mdcite.core.bibtex import BibtexDecoder, BibtexParseError
from mdcite.core.fields import ALL_FIELDS, MODERN_FIELDS, STANDARD_FIELDS, EntryType
from mdcite.core.models import BibliographyCacheEntry, Entry, LoadFailure, split_names

__all__ = [
    # Fields and types
    "EntryType",
    "ALL_FIELDS",
    "STANDARD_FIELDS",
    "MODERN_FIELDS",
    # BibTeX processing
    "BibtexDecoder",
    "BibtexParseError",
    # Models
    "Entry",
    "LoadFailure",
    "BibliographyCacheEntry",
    "split_names",
]
