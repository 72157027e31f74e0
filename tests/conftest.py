"""Pytest configuration and fixtures."""

import os
from pathlib import Path

import pytest

from mdcite.core.models import Entry
from mdcite.exceptions import BibliographyFileNotFound, BibliographyParseError


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and user configuration for each test."""
    original_env = os.environ.copy()

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.delenv("MDCITE_BIBLIOGRAPHY", raising=False)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def sample_bibtex() -> str:
    """Two-entry BibTeX file content."""
    return """
@article{smith2020,
    author = {Smith, John and Doe, Jane},
    title = {Deep Learning for Citations},
    journal = {Journal of Examples},
    year = {2020},
    volume = {12},
    pages = {1--10}
}

@book{doe2019,
    author = {Jane Doe},
    title = {{Markdown} in Practice},
    publisher = {Example Press},
    year = 2019
}
"""


@pytest.fixture
def bib_dir(tmp_path: Path) -> Path:
    """Directory holding bibliography files and documents."""
    directory = tmp_path / "project"
    directory.mkdir()
    return directory


@pytest.fixture
def refs_bib(bib_dir: Path, sample_bibtex: str) -> Path:
    """A refs.bib file with smith2020 and doe2019."""
    path = bib_dir / "refs.bib"
    path.write_text(sample_bibtex, encoding="utf-8")
    return path


@pytest.fixture
def extra_bib(bib_dir: Path) -> Path:
    """A second file redefining smith2020 and adding jones2021."""
    path = bib_dir / "extra.bib"
    path.write_text(
        """
@misc{smith2020,
    author = {Smith, Adam},
    title = {A Different Smith},
    year = {2021}
}

@inproceedings{jones2021,
    author = {Jones, Alice and Brown, Bob and Green, Carol},
    title = {Citation Graphs},
    booktitle = {Proceedings of Examples},
    year = {2021}
}
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def broken_bib(bib_dir: Path) -> Path:
    """A file whose only entry cannot be decoded."""
    path = bib_dir / "broken.bib"
    path.write_text("@article{broken,\n  title = {Unbalanced\n", encoding="utf-8")
    return path


def write_document(directory: Path, front_matter: str | None, name="paper.md") -> Path:
    """Write a Markdown document with optional front matter."""
    body = "# Introduction\n\nSome text.\n"
    text = f"---\n{front_matter}\n---\n\n{body}" if front_matter else body
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def make_document(bib_dir: Path):
    """Factory writing documents into the bibliography directory."""

    def factory(front_matter: str | None = None, name: str = "paper.md") -> Path:
        return write_document(bib_dir, front_matter, name)

    return factory


class FakeSource:
    """Entry source serving canned mappings and counting calls."""

    def __init__(self, data: dict[str, dict[str, Entry] | Exception] | None = None):
        self.data = data or {}
        self.calls: list[Path] = []

    def load(self, path: Path) -> dict[str, Entry]:
        self.calls.append(Path(path))
        result = self.data.get(Path(path).name)
        if result is None:
            raise BibliographyFileNotFound(str(path))
        if isinstance(result, Exception):
            raise result
        return dict(result)


def entries(*keys: str, title: str = "Title", source: str | None = None):
    """Build a key -> Entry mapping for fake sources."""
    return {key: Entry(key=key, title=title, source=source) for key in keys}


@pytest.fixture
def fake_source() -> FakeSource:
    """Fake source with files a.bib, b.bib and a broken c.bib."""
    return FakeSource(
        {
            "a.bib": entries("k", "a1", title="from A", source="a.bib"),
            "b.bib": entries("k", "b1", title="from B", source="b.bib"),
            "c.bib": BibliographyParseError("c.bib", "unbalanced braces"),
        }
    )


@pytest.fixture
def source_factory():
    """Build fake sources from {file name: entries or exception} mappings."""
    return FakeSource


@pytest.fixture
def make_entries():
    """Build key -> Entry mappings."""
    return entries
