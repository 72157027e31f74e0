"""Pytest configuration and fixtures for CLI tests."""

from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner(tmp_path: Path, monkeypatch):
    """Click CLI test runner invoking the mdcite group from a clean directory."""

    class MdciteCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            """Invoke the mdcite CLI when given an argument list."""
            from mdcite.cli.main import cli

            if isinstance(args, list):
                return super().invoke(cli, args, **kwargs)
            return super().invoke(args, **kwargs)

    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    return MdciteCliRunner()


@pytest.fixture
def config_file(tmp_path: Path, refs_bib: Path) -> Path:
    """Configuration file pointing at refs.bib."""
    path = tmp_path / "config.yaml"
    path.write_text(f"bibliography_path: {refs_bib}\n")
    return path
