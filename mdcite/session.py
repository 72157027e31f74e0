"""Citation session: the resolve, load, project, format pipeline.

A session stands for one interactive citation dialog. It owns a path
resolver and a bibliography cache, keeps the explicit bibliography path
the user configured, and runs the whole pipeline to completion on each
user action (opening the dialog, editing the path, asking for a reload).
"""

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from mdcite.cache import BibliographyCache
from mdcite.catalog import PLACEHOLDER_NOT_FOUND, SelectionCatalog
from mdcite.core.models import BibliographyCacheEntry
from mdcite.formatter import CitationFormatter, NothingSelected
from mdcite.frontmatter import DocumentContext, read_document
from mdcite.paths import BibliographyPathSet, PathResolver
from mdcite.sources import EntrySource

logger = logging.getLogger(__name__)

DEFAULT_BIBLIOGRAPHY = "references.bib"


@dataclass
class SessionState:
    """Outcome of one pipeline run."""

    paths: BibliographyPathSet
    changed: bool
    source: str
    entry: BibliographyCacheEntry
    choices: list[tuple[str, str]] = field(default_factory=list)
    declared_paths: list[str] | None = None

    @property
    def found(self) -> bool:
        """True when at least one entry is available for selection."""
        return bool(self.choices)

    @property
    def warnings(self) -> list[str]:
        """Per-file load failures, ready for display."""
        return [
            f"Unable to read bibliography file '{failure.path}': {failure.reason}"
            for failure in self.entry.failures
        ]

    @property
    def status(self) -> str:
        """Help text describing where the bibliography came from."""
        if not self.found:
            return PLACEHOLDER_NOT_FOUND
        if self.source == "front_matter":
            declared = ", ".join(self.declared_paths or [])
            return f"Bibliography file(s) found in YAML front matter: {declared}"
        return "YAML front matter missing or no bibliography file(s) specified."


class CitationSession:
    """One citation dialog with its own cache and resolver."""

    def __init__(
        self,
        explicit_path: str | os.PathLike | None = DEFAULT_BIBLIOGRAPHY,
        source: EntrySource | None = None,
        cache: BibliographyCache | None = None,
        catalog: SelectionCatalog | None = None,
        formatter: CitationFormatter | None = None,
    ):
        self._explicit_path = explicit_path
        self.cache = cache or BibliographyCache(source)
        self.resolver = PathResolver()
        self.catalog = catalog or SelectionCatalog()
        self.formatter = formatter or CitationFormatter()
        self.document = DocumentContext()
        self.state: SessionState | None = None

    @property
    def explicit_path(self) -> str | os.PathLike | None:
        return self._explicit_path

    @explicit_path.setter
    def explicit_path(self, value: str | os.PathLike | None) -> None:
        if value != self._explicit_path:
            logger.debug(f"Explicit bibliography path set to {value}")
            self._explicit_path = value
            self.cache.invalidate()

    def open_document(self, path: Path) -> DocumentContext:
        """Read the front matter of the document being edited."""
        self.document = read_document(path)
        return self.document

    def refresh(
        self,
        document: DocumentContext | Path | None = None,
        force_reload: bool = False,
    ) -> SessionState:
        """Run the pipeline for the current document and configuration.

        Args:
            document: Document context or path. Defaults to the document
                opened last.
            force_reload: Read the bibliography files even if unchanged.
        """
        if isinstance(document, str | os.PathLike):
            self.open_document(Path(document))
        elif document is not None:
            self.document = document

        paths, changed = self.resolver.resolve(
            self._explicit_path,
            self.document.declared_paths,
            self.document.directory,
        )

        entry = self.cache.load(paths, force_reload=force_reload)
        choices = self.catalog.labels(entry)

        self.state = SessionState(
            paths=paths,
            changed=changed,
            source=self.resolver.source,
            entry=entry,
            choices=choices,
            declared_paths=self.document.declared_paths,
        )
        return self.state

    def reload(self) -> SessionState:
        """Reload the bibliography files at an unchanged location."""
        return self.refresh(force_reload=True)

    def search(self, term: str, limit: int | None = None) -> list[tuple[str, str]]:
        """Filter the current choices."""
        entry = self.state.entry if self.state else None
        return self.catalog.search(entry, term, limit=limit)

    def cite(
        self, keys: Sequence[str], in_parentheses: bool = True
    ) -> str | NothingSelected:
        """Format the selected keys as a citation.

        Keys missing from the loaded bibliography are still formatted;
        they are only reported in the log.
        """
        self.check_keys(keys)
        return self.formatter.format(keys, in_parentheses)

    def check_keys(self, keys: Sequence[str]) -> list[str]:
        """Log and return the keys missing from the loaded bibliography."""
        if self.state is None:
            return []

        unknown = [k for k in keys if isinstance(k, str) and k not in self.state.entry]
        if unknown:
            logger.warning(f"Keys not in bibliography: {', '.join(unknown)}")
        return unknown

    def close(self) -> None:
        """Discard cached state at the end of the session."""
        self.cache.reset()
        self.resolver.reset()
        self.state = None
