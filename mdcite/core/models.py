"""Core data models for loaded bibliographies.

This module defines the records that flow between the entry sources,
the bibliography cache and the selection catalog. All of them are
immutable msgspec structs: a cache entry is replaced wholesale when a
bibliography is reloaded, never patched in place.

Key components:
- Entry: Immutable bibliography entry identified by its citation key
- LoadFailure: A bibliography file that could not be read or parsed
- BibliographyCacheEntry: Merged entries of one resolved path set
"""

import re
from datetime import datetime
from typing import TYPE_CHECKING, Any

import msgspec

from .fields import EntryType

if TYPE_CHECKING:
    from mdcite.paths import BibliographyPathSet

_NAME_SEPARATOR = re.compile(r"\s+and\s+")


def split_names(value: str | None) -> tuple[str, ...]:
    """Split a BibTeX name list on ' and ' delimiters.

    Escaped ampersands (\\&) are not treated as delimiters.
    """
    if not value:
        return ()

    temp = value.replace(r"\&", "\x00")
    names = _NAME_SEPARATOR.split(temp)
    return tuple(name.replace("\x00", "&").strip() for name in names if name.strip())


class Entry(msgspec.Struct, frozen=True, kw_only=True):
    """Immutable bibliography entry.

    Only the fields needed to label an entry in a selector are modelled
    explicitly. Everything else a BibTeX file carries ends up in
    ``custom`` so that nothing is silently dropped.
    """

    key: str
    type: EntryType = EntryType.MISC
    author: str | None = None
    editor: str | None = None
    title: str | None = None
    booktitle: str | None = None
    journal: str | None = None
    publisher: str | None = None
    institution: str | None = None
    school: str | None = None
    organization: str | None = None
    howpublished: str | None = None
    volume: str | None = None
    number: str | None = None
    pages: str | None = None
    month: str | None = None
    year: int | str | None = None
    note: str | None = None
    doi: str | None = None
    url: str | None = None
    keywords: tuple[str, ...] | None = None
    custom: dict[str, Any] | None = None
    source: str | None = None

    @property
    def authors(self) -> tuple[str, ...]:
        """Author names in the order they appear."""
        return split_names(self.author)

    @property
    def editors(self) -> tuple[str, ...]:
        """Editor names in the order they appear."""
        return split_names(self.editor)

    def get(self, field: str, default: Any = None) -> Any:
        """Look up a field by name, falling back to custom fields."""
        if field in self.__struct_fields__:
            value = getattr(self, field)
            return default if value is None else value
        if self.custom and field in self.custom:
            return self.custom[field]
        return default

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = msgspec.to_builtins(self)
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str | None = None) -> "Entry":
        """Create an Entry from a decoded BibTeX dictionary.

        Args:
            data: Dictionary with at least a ``key`` item.
            source: Path of the file the entry was read from.

        Returns:
            New Entry instance.
        """
        data = dict(data)
        known = set(cls.__struct_fields__)

        if "type" in data and not isinstance(data["type"], EntryType):
            data["type"] = EntryType(data["type"])

        if "keywords" in data and data["keywords"] is not None:
            keywords = data["keywords"]
            if isinstance(keywords, str):
                keywords = [k.strip() for k in keywords.split(",")]
            data["keywords"] = tuple(k for k in keywords if k)

        custom = dict(data.pop("custom", None) or {})
        for field in list(data):
            if field not in known:
                custom[field] = data.pop(field)

        if custom:
            data["custom"] = custom
        if source is not None:
            data["source"] = source

        return cls(**data)


class LoadFailure(msgspec.Struct, frozen=True):
    """A bibliography file that could not be loaded."""

    path: str
    reason: str
    kind: str = "parse_error"

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class BibliographyCacheEntry(msgspec.Struct, frozen=True, kw_only=True):
    """Merged entries of a resolved bibliography path set.

    Created by the cache on each (re)load and published as a whole.
    Readers hold on to the instance they were given; a later reload
    never changes it.
    """

    paths: "BibliographyPathSet"
    entries: dict[str, Entry] = msgspec.field(default_factory=dict)
    failures: tuple[LoadFailure, ...] = ()
    loaded_at: datetime = msgspec.field(default_factory=datetime.now)

    @property
    def keys(self) -> tuple[str, ...]:
        """Citation keys in merge order."""
        return tuple(self.entries)

    @property
    def all_failed(self) -> bool:
        """True when paths were given and none of them could be loaded."""
        return bool(self.failures) and len(self.failures) == len(self.paths)

    @property
    def partial(self) -> bool:
        """True when some, but not all, paths failed."""
        return bool(self.failures) and not self.all_failed

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries
