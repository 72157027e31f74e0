"""Selector choices derived from a loaded bibliography.

The catalog turns the merged entries of a cache entry into
``(key, label)`` pairs for a selection list. Labels are a compact
author-year-title line; they are recomputed from the cache entry on
every call and never cached on their own.
"""

import re
from collections.abc import Callable

from rapidfuzz import fuzz, process

from mdcite.core.models import BibliographyCacheEntry, Entry

PLACEHOLDER_NOT_FOUND = "BibTeX file not found"

_BRACES = re.compile(r"[{}]")
_LATEX_COMMAND = re.compile(r"\\[a-zA-Z]+\s*")
_WHITESPACE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Strip TeX braces and simple commands from a field value."""
    text = _LATEX_COMMAND.sub("", text)
    text = _BRACES.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def last_name(name: str) -> str:
    """Return the family name part of a BibTeX name.

    Handles "Last, First", "von Last, Jr, First", "First Last" and
    corporate names protected by braces.
    """
    name = name.strip()
    if name.startswith("{") and name.endswith("}"):
        return clean_text(name)

    if "," in name:
        return clean_text(name.split(",", 1)[0])

    tokens = name.split()
    if not tokens:
        return ""

    # "First von Last": the family name starts at the first lowercase token
    for index, token in enumerate(tokens[:-1]):
        if index > 0 and token[:1].islower():
            return clean_text(" ".join(tokens[index:]))

    return clean_text(tokens[-1])


def format_names(names: tuple[str, ...]) -> str:
    """Format family names: A; A & B; A et al."""
    families = [family for family in (last_name(n) for n in names) if family]

    if not families:
        return ""
    if len(families) == 1:
        return families[0]
    if len(families) == 2:
        return f"{families[0]} & {families[1]}"
    return f"{families[0]} et al."


class LabelRenderer:
    """Render an entry as a single selector line.

    Example: ``Smith & Doe (2020). Deep learning for citations.``
    """

    missing_year = "n.d."

    def __call__(self, entry: Entry) -> str:
        return self.render(entry)

    def render(self, entry: Entry) -> str:
        parts = []

        creators = format_names(entry.authors)
        if not creators and entry.editors:
            suffix = "(Ed.)" if len(entry.editors) == 1 else "(Eds.)"
            creators = f"{format_names(entry.editors)} {suffix}"
        if not creators:
            creators = clean_text(entry.organization or entry.institution or "")
        if creators:
            parts.append(creators)

        year = entry.year if entry.year not in (None, "") else self.missing_year
        parts.append(f"({year}).")

        if entry.title:
            title = clean_text(entry.title).rstrip(".")
            if title:
                parts.append(f"{title}.")

        label = " ".join(parts)
        return label if creators or entry.title else f"{entry.key} {label}"


class SelectionCatalog:
    """Project a cache entry into ordered selector choices."""

    def __init__(
        self,
        render: Callable[[Entry], str] | None = None,
        score_cutoff: float = 70.0,
    ):
        """Initialize the catalog.

        Args:
            render: Callable producing a label for an entry.
            score_cutoff: Minimum fuzzy score (0-100) for search matches.
        """
        self.render = render or LabelRenderer()
        self.score_cutoff = score_cutoff

    def labels(
        self, cache_entry: BibliographyCacheEntry | None
    ) -> list[tuple[str, str]]:
        """Return ``(key, label)`` pairs in the order of the merged mapping."""
        if cache_entry is None:
            return []
        return [(key, self.render(entry)) for key, entry in cache_entry.entries.items()]

    def search(
        self,
        cache_entry: BibliographyCacheEntry | None,
        term: str,
        limit: int | None = None,
    ) -> list[tuple[str, str]]:
        """Filter choices the way a selector's search box does.

        Exact substring matches on key or label come first, in catalog
        order, followed by fuzzy matches ordered by score.
        """
        choices = self.labels(cache_entry)
        term = term.strip()
        if not term:
            return choices[:limit] if limit is not None else choices

        needle = term.lower()
        exact = [
            (key, label)
            for key, label in choices
            if needle in key.lower() or needle in label.lower()
        ]
        matched = {key for key, _ in exact}

        remaining = {
            key: f"{key} {label}" for key, label in choices if key not in matched
        }
        fuzzy = process.extract(
            term,
            remaining,
            scorer=fuzz.partial_ratio,
            processor=str.lower,
            score_cutoff=self.score_cutoff,
            limit=None,
        )
        lookup = dict(choices)
        results = exact + [(key, lookup[key]) for _, _, key in fuzzy]

        return results[:limit] if limit is not None else results
