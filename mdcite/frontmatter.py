"""Front matter handling for Markdown documents.

Only the ``bibliography`` field of a document's YAML front matter is of
interest here. A front matter block starts with a ``---`` line and ends
at the next ``---`` or ``...`` line; it must contain at least one line.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mdcite.exceptions import FrontMatterError

logger = logging.getLogger(__name__)

DELIMITER_PATTERN = re.compile(r"^(---|\.\.\.)\s*$")
OPENING_PATTERN = re.compile(r"^---\s*$")


def extract_front_matter(lines: Sequence[str] | str) -> str | None:
    """Return the raw front matter block of a document, if any.

    Args:
        lines: Document text, either whole or split into lines.

    Returns:
        The text between the first two delimiters, or None if the
        document has no usable front matter.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    delimiters = [
        index for index, line in enumerate(lines) if DELIMITER_PATTERN.match(line)
    ]

    if len(delimiters) < 2:
        return None

    start, end = delimiters[0], delimiters[1]
    if end - start <= 1 or not OPENING_PATTERN.match(lines[start]):
        return None

    return "\n".join(lines[start + 1 : end])


class FrontMatterParser:
    """Parse a front matter block into a mapping."""

    def parse(self, text: str) -> dict[str, Any]:
        """Parse YAML front matter.

        Raises:
            FrontMatterError: If the block is not valid YAML.
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise FrontMatterError(f"Invalid YAML in front matter: {e}")

        if not isinstance(data, dict):
            return {}
        return data


def declared_bibliography(metadata: dict[str, Any]) -> list[str] | None:
    """Read the ``bibliography`` field of parsed front matter.

    Returns:
        None when the field is absent, otherwise the declared paths in
        order. Blank strings are dropped, so the list may be empty.

    Raises:
        FrontMatterError: If the field is neither a string nor a list of
            strings.
    """
    value = metadata.get("bibliography")

    if value is None:
        return None

    if isinstance(value, str):
        values = [value]
    elif isinstance(value, list | tuple):
        values = list(value)
    else:
        raise FrontMatterError(
            f"bibliography must be a path or a list of paths, "
            f"not {type(value).__name__}"
        )

    paths = []
    for item in values:
        if item is None:
            continue
        if not isinstance(item, str):
            raise FrontMatterError(
                f"bibliography entries must be strings, not {type(item).__name__}"
            )
        if item.strip():
            paths.append(item.strip())

    return paths


@dataclass
class DocumentContext:
    """What the resolver needs to know about the edited document."""

    path: Path | None = None
    front_matter_found: bool = False
    declared_paths: list[str] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def directory(self) -> Path | None:
        """Directory relative bibliography paths are resolved against."""
        if self.path is None:
            return None
        return self.path.parent

    @property
    def declares_bibliography(self) -> bool:
        return bool(self.declared_paths)

    @classmethod
    def from_text(
        cls,
        text: str,
        path: Path | None = None,
        parser: FrontMatterParser | None = None,
    ) -> "DocumentContext":
        """Build a context from document text.

        Front matter that cannot be parsed is logged and treated as if
        the document had none.
        """
        parser = parser or FrontMatterParser()
        block = extract_front_matter(text)

        if block is None:
            return cls(path=path)

        try:
            metadata = parser.parse(block)
            declared = declared_bibliography(metadata)
        except FrontMatterError as e:
            logger.warning(f"Ignoring front matter of {path or 'document'}: {e}")
            return cls(path=path)

        return cls(
            path=path,
            front_matter_found=True,
            declared_paths=declared,
            metadata=metadata,
        )


def read_document(
    path: Path, parser: FrontMatterParser | None = None
) -> DocumentContext:
    """Read a document from disk and extract its bibliography context."""
    path = Path(path).expanduser().absolute()
    text = path.read_text(encoding="utf-8")
    return DocumentContext.from_text(text, path=path, parser=parser)
