"""BibTeX decoding.

A small regular-expression based decoder that turns BibTeX text into
entry dictionaries. It is the parser behind the bundled file entry
source; any other parser can be plugged in through the
:class:`~mdcite.sources.EntrySource` protocol instead.

Key components:
- BibtexDecoder: Parses BibTeX text into entry dictionaries
- BibtexParseError: Raised when declared entries cannot be decoded
"""

import re
from typing import Any

from .fields import ALL_FIELDS


class BibtexParseError(ValueError):
    """BibTeX text declares entries but none of them could be decoded."""

    def __init__(self, message: str, declared: int = 0, decoded: int = 0):
        self.declared = declared
        self.decoded = decoded
        super().__init__(message)


class BibtexDecoder:
    """Parse BibTeX format into entry dictionaries.

    Handles nested braces, @string definitions, and various field
    value formats (quoted strings, braced values, unquoted values).
    Supports up to 3 levels of brace nesting for complex field values.
    """

    ENTRY_PATTERN = re.compile(
        r"@(\w+)\s*\{([^,\s]+)\s*,\s*((?:[^{}]|{(?:[^{}]|{(?:[^{}]|{(?:[^{}]|{[^{}]*})*})*})*})*)\s*\}",
        re.DOTALL | re.MULTILINE,
    )

    DECLARATION_PATTERN = re.compile(r"^\s*@(\w+)\s*[{(]", re.MULTILINE)

    STRING_PATTERN = re.compile(
        r'@string\s*\{\s*(\w+)\s*=\s*(?:"([^"]*?)"|{([^{}]*)})\s*\}',
        re.IGNORECASE | re.MULTILINE,
    )

    FIELD_PATTERN = re.compile(
        r'(\w+)\s*=\s*(?:"([^"]*?)"|{((?:[^{}]|{(?:[^{}]|{(?:[^{}]|{[^{}]*})*})*})*)}|([^,}]+?))\s*(?:,|$)',
        re.MULTILINE,
    )

    NON_ENTRY_TYPES = {"string", "comment", "preamble"}

    UNESCAPE_MAP = {
        "\\\\": "\\",  # Backslash
        "\\$": "$",
        "\\&": "&",
        "\\#": "#",
        "\\_": "_",
        "\\%": "%",
        "\\~{}": "~",
        "\\^{}": "^",
    }

    @classmethod
    def unescape(cls, text: str) -> str:
        """Unescape LaTeX special characters."""
        if not text:
            return text

        result = text
        for escaped, char in sorted(cls.UNESCAPE_MAP.items(), key=len, reverse=True):
            result = result.replace(escaped, char)
        return result

    @classmethod
    def strip_comments(cls, bibtex_str: str) -> str:
        """Remove % line comments, keeping escaped percent signs."""
        bibtex_str = bibtex_str.replace(r"\%", "\x00PERCENT\x00")
        bibtex_str = re.sub(r"%.*$", "", bibtex_str, flags=re.MULTILINE)
        return bibtex_str.replace("\x00PERCENT\x00", r"\%")

    @classmethod
    def count_declarations(cls, bibtex_str: str) -> int:
        """Count @type{ declarations that should produce entries."""
        return sum(
            1
            for match in cls.DECLARATION_PATTERN.finditer(bibtex_str)
            if match.group(1).lower() not in cls.NON_ENTRY_TYPES
        )

    @classmethod
    def decode(cls, bibtex_str: str) -> list[dict[str, Any]]:
        """Decode BibTeX string to list of entry dictionaries.

        Unquoted field values that name an @string macro are replaced by
        the macro text. Unknown fields are collected under ``custom``.

        Args:
            bibtex_str: BibTeX format string.

        Returns:
            List of dictionaries representing parsed entries, in file order.

        Raises:
            BibtexParseError: If the text declares entries and none of
                them can be decoded.
        """
        entries = []

        bibtex_str = cls.strip_comments(bibtex_str)

        macros = {
            match.group(1).lower(): match.group(2) or match.group(3) or ""
            for match in cls.STRING_PATTERN.finditer(bibtex_str)
        }
        bibtex_str = cls.STRING_PATTERN.sub("", bibtex_str)

        for match in cls.ENTRY_PATTERN.finditer(bibtex_str):
            entry_type = match.group(1).lower()
            if entry_type in cls.NON_ENTRY_TYPES:
                continue

            entry_key = match.group(2).strip()
            fields_str = match.group(3)

            fields: dict[str, Any] = {"type": entry_type, "key": entry_key}
            custom_fields = {}

            for field_match in cls.FIELD_PATTERN.finditer(fields_str):
                field_name = field_match.group(1).lower()
                bare = field_match.group(4)
                value = (
                    field_match.group(2) or field_match.group(3) or bare or ""
                ).strip()

                if bare is not None and value.lower() in macros:
                    value = macros[value.lower()]

                value = cls.unescape(value)

                if field_name == "keywords":
                    value = [k.strip() for k in value.split(",") if k.strip()]
                elif field_name == "year":
                    try:
                        value = int(value)
                    except ValueError:
                        pass

                if field_name in ALL_FIELDS:
                    fields[field_name] = value
                else:
                    custom_fields[field_name] = value

            if custom_fields:
                fields["custom"] = custom_fields

            entries.append(fields)

        declared = cls.count_declarations(bibtex_str)
        if declared and not entries:
            raise BibtexParseError(
                f"Found {declared} entry declaration(s) but could not decode any",
                declared=declared,
                decoded=0,
            )

        return entries
