"""Entry sources: turn a bibliography file into citation entries.

The cache only depends on the :class:`EntrySource` protocol. The
bundled :class:`BibtexFileSource` reads BibTeX files with the decoder
from :mod:`mdcite.core.bibtex`; tests and embedding applications can
pass any object with a compatible ``load`` method.
"""

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from mdcite.core.bibtex import BibtexDecoder, BibtexParseError
from mdcite.core.models import Entry
from mdcite.exceptions import (
    BibliographyFileNotFound,
    BibliographyParseError,
    EntryLoadError,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class EntrySource(Protocol):
    """Loads the entries of a single bibliography file."""

    def load(self, path: Path) -> dict[str, Entry]:
        """Return a mapping of citation key to entry.

        Raises:
            EntryLoadError: If the file cannot be read or parsed.
        """
        ...


class BibtexFileSource:
    """Load entries from a BibTeX file on disk."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self.decoder = BibtexDecoder()

    def load(self, path: Path) -> dict[str, Entry]:
        """Read and decode a BibTeX file.

        Within one file a repeated key replaces the earlier definition.
        An empty or comment-only file yields an empty mapping.
        """
        path = Path(path)

        try:
            text = path.read_text(encoding=self.encoding)
        except FileNotFoundError:
            raise BibliographyFileNotFound(str(path)) from None
        except IsADirectoryError:
            raise EntryLoadError(str(path), "is a directory") from None
        except UnicodeDecodeError as e:
            raise BibliographyParseError(str(path), f"not valid {self.encoding}: {e}")
        except OSError as e:
            raise EntryLoadError(str(path), e.strerror or str(e))

        return self.load_text(text, source=str(path))

    def load_text(self, text: str, source: str = "<string>") -> dict[str, Entry]:
        """Decode BibTeX text that was read elsewhere."""
        try:
            decoded = self.decoder.decode(text)
        except BibtexParseError as e:
            raise BibliographyParseError(source, str(e))

        entries: dict[str, Entry] = {}
        for data in decoded:
            try:
                entry = Entry.from_dict(data, source=source)
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping entry {data.get('key', '?')} in {source}: {e}")
                continue

            if entry.key in entries:
                logger.debug(f"Duplicate key {entry.key} in {source}; keeping last")
            entries[entry.key] = entry

        logger.debug(f"Decoded {len(entries)} entries from {source}")
        return entries
