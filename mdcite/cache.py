"""Session-owned cache of loaded bibliographies.

The cache holds at most one :class:`BibliographyCacheEntry`: the merged
entries of the path set that was loaded last. Asking for the same path
set again returns that entry without touching the disk; a different
path set, or an explicit reload, reads every file again.

Loading never fails as a whole. Files that cannot be read are recorded
as failures next to whatever could be merged from the other files.
"""

import logging
import threading
from datetime import datetime

from mdcite.core.models import BibliographyCacheEntry, Entry, LoadFailure
from mdcite.exceptions import AllSourcesFailedError, EntryLoadError
from mdcite.paths import BibliographyPathSet
from mdcite.sources import BibtexFileSource, EntrySource

logger = logging.getLogger(__name__)


class BibliographyCache:
    """Cache of the merged entries for the current bibliography path set.

    One instance is created per session. ``load`` calls are serialized,
    and a freshly loaded entry is published with a single reference swap,
    so readers only ever see a complete entry.
    """

    def __init__(self, source: EntrySource | None = None):
        """Initialize the cache.

        Args:
            source: Loader for individual files. Defaults to the bundled
                BibTeX file loader.
        """
        self.source = source or BibtexFileSource()
        self._entry: BibliographyCacheEntry | None = None
        self._lock = threading.Lock()
        self._load_lock = threading.Lock()
        self.load_count = 0

    @property
    def current(self) -> BibliographyCacheEntry | None:
        """The entry published by the last load, if any."""
        with self._lock:
            return self._entry

    def is_current(self, path_set: BibliographyPathSet) -> bool:
        """Check whether the cached entry was loaded for ``path_set``."""
        entry = self.current
        return entry is not None and entry.paths == path_set

    def load(
        self, path_set: BibliographyPathSet, force_reload: bool = False
    ) -> BibliographyCacheEntry:
        """Return the merged entries for a path set.

        Args:
            path_set: Effective bibliography paths, in merge order.
            force_reload: Read the files even if the path set is unchanged.

        Returns:
            The cached entry, or a newly loaded one.
        """
        with self._load_lock:
            cached = self.current
            if not force_reload and cached is not None and cached.paths == path_set:
                logger.debug(f"Using cached bibliography for [{path_set}]")
                return cached

            entry = self._read(path_set)

            with self._lock:
                self._entry = entry

            return entry

    def _read(self, path_set: BibliographyPathSet) -> BibliographyCacheEntry:
        merged: dict[str, Entry] = {}
        failures: list[LoadFailure] = []

        for path in path_set:
            self.load_count += 1
            try:
                entries = self.source.load(path)
            except EntryLoadError as e:
                logger.warning(f"Unable to read bibliography file '{path}': {e.reason}")
                failures.append(LoadFailure(str(path), e.reason, e.kind))
                continue
            except OSError as e:
                logger.warning(f"Unable to read bibliography file '{path}': {e}")
                failures.append(LoadFailure(str(path), str(e), "io_error"))
                continue

            for key in entries.keys() & merged.keys():
                logger.debug(f"Key {key} from {path} replaces earlier definition")
            merged.update(entries)

        if path_set and len(failures) == len(path_set):
            logger.error(f"No bibliography could be loaded from [{path_set}]")
        else:
            logger.info(
                f"Loaded {len(merged)} entries from {len(path_set) - len(failures)} "
                f"of {len(path_set)} bibliography file(s)"
            )

        return BibliographyCacheEntry(
            paths=path_set,
            entries=merged,
            failures=tuple(failures),
            loaded_at=datetime.now(),
        )

    def invalidate(self) -> None:
        """Drop the cached entry so that the next load reads the files."""
        with self._lock:
            self._entry = None

    def reset(self) -> None:
        """Return the cache to its initial state."""
        with self._load_lock:
            self.invalidate()
            self.load_count = 0


def raise_for_failures(entry: BibliographyCacheEntry) -> BibliographyCacheEntry:
    """Raise if none of the entry's files could be loaded.

    Returns:
        The entry itself when at least one file was loaded.

    Raises:
        AllSourcesFailedError: If every path failed.
    """
    if entry.all_failed:
        raise AllSourcesFailedError(entry.failures)
    return entry
