"""Markdown citation formatting.

Selected citation keys become a Pandoc-style citation: ``[@a; @b]`` in
parentheses, ``@a; @b`` in running text. An empty selection produces
the :data:`NOTHING_SELECTED` sentinel rather than a string so that
callers cannot insert it by accident.
"""

from collections.abc import Sequence
from typing import Final

from mdcite.exceptions import InvalidKeyError

# Citations with no key; never inserted into a document
EMPTY_CITATIONS: Final = frozenset({"[@]", "@"})


class NothingSelected:
    """Sentinel type for an empty selection."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOTHING_SELECTED"

    def __str__(self) -> str:
        return "No reference selected."


NOTHING_SELECTED: Final = NothingSelected()


def validate_key(key: object) -> str:
    """Check that a key can be written into a citation.

    Raises:
        InvalidKeyError: If the key is not a non-empty string. Keys are
            otherwise written verbatim, as the bibliography spells them.
    """
    if not isinstance(key, str):
        raise InvalidKeyError(key, f"expected a string, got {type(key).__name__}")
    if not key:
        raise InvalidKeyError(key, "key is empty")
    return key


class CitationFormatter:
    """Format selected keys as a Markdown citation."""

    prefix = "@"
    separator = "; "

    def format(
        self, selected_keys: Sequence[str], in_parentheses: bool = True
    ) -> str | NothingSelected:
        """Format keys in selection order.

        Args:
            selected_keys: Citation keys in the order they were selected.
            in_parentheses: Bracketed form when True, narrative otherwise.

        Returns:
            The citation string, or NOTHING_SELECTED for no keys.

        Raises:
            InvalidKeyError: If any key is malformed.
        """
        if isinstance(selected_keys, str):
            raise InvalidKeyError(selected_keys, "expected a sequence of keys")

        keys = [validate_key(key) for key in selected_keys]
        if not keys:
            return NOTHING_SELECTED

        citation = self.separator.join(f"{self.prefix}{key}" for key in keys)
        return f"[{citation}]" if in_parentheses else citation

    def try_format(
        self, selected_keys: Sequence[str], in_parentheses: bool = True
    ) -> tuple[str | NothingSelected | None, InvalidKeyError | None]:
        """Format keys, returning the error instead of raising it."""
        try:
            return self.format(selected_keys, in_parentheses), None
        except InvalidKeyError as e:
            return None, e


def is_insertable(result: object) -> bool:
    """Check whether a formatter result may be inserted into a document."""
    if result is NOTHING_SELECTED or not isinstance(result, str):
        return False
    return bool(result) and result not in EMPTY_CITATIONS


def format_citation(selected_keys: Sequence[str], in_parentheses: bool = True):
    """Format keys with a default formatter."""
    return CitationFormatter().format(selected_keys, in_parentheses)
