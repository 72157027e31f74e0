"""Resolution of the bibliography files that apply to a document.

Two sources compete: the explicitly configured bibliography path and the
paths declared in the document's front matter. Declared paths win
outright; the explicit path is only used when the document declares
nothing. Paths are normalized before comparison so that the same files
supplied in different spellings never look like a change.
"""

import logging
import os
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

PathLike = str | os.PathLike


def is_absolute(path: str) -> bool:
    """Check whether a bibliography path needs no document directory.

    A path is absolute when it starts at the filesystem root or at the
    home directory marker.
    """
    return path.startswith(("/", "~")) or os.path.isabs(path)


def normalize_path(path: PathLike, base_dir: PathLike | None = None) -> Path:
    """Turn a bibliography path into a normalized absolute path.

    Relative paths are joined with ``base_dir`` (or the working
    directory). The filesystem is not touched: symlinks are not
    resolved and the file need not exist.
    """
    text = os.fspath(path).strip()

    if text.startswith("~"):
        text = os.path.expanduser(text)
    elif not is_absolute(text):
        base = os.fspath(base_dir) if base_dir is not None else os.getcwd()
        text = os.path.join(os.path.expanduser(base), text)

    return Path(os.path.normpath(os.path.abspath(text)))


class BibliographyPathSet:
    """Ordered, normalized sequence of bibliography file paths.

    Compares by value: two sets are equal when they list the same
    absolute paths in the same order. A path listed twice is kept at its
    last position only, so it still takes precedence over the paths
    listed before that position when entries are merged.
    """

    __slots__ = ("_paths",)

    def __init__(self, paths: Iterable[Path] = ()):
        unique: list[Path] = []
        for path in reversed([Path(p) for p in paths]):
            if path not in unique:
                unique.append(path)
        self._paths = tuple(reversed(unique))

    @classmethod
    def from_strings(
        cls, paths: Iterable[PathLike], base_dir: PathLike | None = None
    ) -> "BibliographyPathSet":
        """Normalize raw paths, skipping blank ones."""
        return cls(
            normalize_path(path, base_dir)
            for path in paths
            if os.fspath(path).strip()
        )

    @property
    def paths(self) -> tuple[Path, ...]:
        return self._paths

    @property
    def empty(self) -> bool:
        return not self._paths

    def __iter__(self) -> Iterator[Path]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __bool__(self) -> bool:
        return bool(self._paths)

    def __getitem__(self, index: int) -> Path:
        return self._paths[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BibliographyPathSet):
            return NotImplemented
        return self._paths == other._paths

    def __hash__(self) -> int:
        return hash(self._paths)

    def __repr__(self) -> str:
        return f"BibliographyPathSet({[str(p) for p in self._paths]!r})"

    def __str__(self) -> str:
        return ", ".join(str(p) for p in self._paths)


class PathResolver:
    """Compute the effective bibliography path set and detect changes.

    The resolver remembers the set it returned last. The first call
    always reports a change.
    """

    def __init__(self):
        self._last: BibliographyPathSet | None = None
        self.source = "none"

    @property
    def last(self) -> BibliographyPathSet | None:
        """Path set returned by the previous call, if any."""
        return self._last

    def reset(self) -> None:
        """Forget the previous resolution."""
        self._last = None
        self.source = "none"

    def resolve(
        self,
        explicit_path: PathLike | None,
        document_declared_paths: Sequence[PathLike] | None = None,
        document_dir: PathLike | None = None,
    ) -> tuple[BibliographyPathSet, bool]:
        """Resolve the effective path set.

        Args:
            explicit_path: Configured bibliography path, if any.
            document_declared_paths: Paths from the document's front
                matter. When it normalizes to a non-empty set it replaces
                the explicit path entirely.
            document_dir: Directory of the edited document.

        Returns:
            Tuple of (effective path set, changed since the last call).
        """
        effective = BibliographyPathSet()
        source = "none"

        if document_declared_paths:
            effective = BibliographyPathSet.from_strings(
                document_declared_paths, document_dir
            )
            source = "front_matter"
            if effective.empty:
                logger.debug("Declared bibliography is empty; using explicit path")

        if effective.empty:
            source = "none"
            if explicit_path is not None and os.fspath(explicit_path).strip():
                effective = BibliographyPathSet.from_strings(
                    [explicit_path], document_dir
                )
                source = "explicit"

        changed = self._last is None or effective != self._last
        if changed:
            logger.debug(f"Bibliography paths changed to [{effective}] ({source})")

        self._last = effective
        self.source = source
        return effective, changed
