"""Tests for the command-line interface."""

from pathlib import Path

import click
import pytest
import yaml

from mdcite.cli.main import Context, cli


class TestCLIEntryPoint:
    """Test the main CLI entry point."""

    def test_cli_no_command_shows_help(self, cli_runner):
        result = cli_runner.invoke([])

        assert result.exit_code in (0, 2)
        assert "Insert Markdown citations" in result.output

    def test_cli_version_flag(self, cli_runner):
        result = cli_runner.invoke(["--version"])

        assert result.exit_code == 0
        assert "mdcite version" in result.output

    def test_cli_with_invalid_config_file(self, cli_runner, tmp_path):
        bad_config = tmp_path / "bad_config.yaml"
        bad_config.write_text("invalid: yaml: content:")

        result = cli_runner.invoke(["--config", str(bad_config), "paths"])

        assert result.exit_code == 1
        assert "Error loading config file" in result.output

    def test_cli_context_initialization(self, cli_runner, refs_bib):
        @cli.command(name="ctx-check")
        @click.pass_context
        def ctx_check(ctx):
            assert isinstance(ctx.obj, Context)
            click.echo(f"explicit={ctx.obj.session.explicit_path}")

        try:
            result = cli_runner.invoke(["-b", str(refs_bib), "ctx-check"])
        finally:
            cli.commands.pop("ctx-check", None)

        assert result.exit_code == 0
        assert f"explicit={refs_bib}" in result.output


class TestPathsCommand:
    """Test the paths command."""

    def test_explicit(self, cli_runner, refs_bib):
        result = cli_runner.invoke(["-b", str(refs_bib), "paths"])

        assert result.exit_code == 0
        assert "configured bibliography path" in result.output
        assert str(refs_bib) in result.output

    def test_front_matter(self, cli_runner, refs_bib, extra_bib, make_document):
        document = make_document("bibliography: [extra.bib, refs.bib]")

        result = cli_runner.invoke(["-b", "/ignored.bib", "paths", str(document)])

        assert result.exit_code == 0
        assert "YAML front matter" in result.output
        assert str(extra_bib) in result.output
        assert "/ignored.bib" not in result.output

    def test_default_path_from_config(self, cli_runner, config_file, refs_bib):
        result = cli_runner.invoke(["--config", str(config_file), "paths"])

        assert result.exit_code == 0
        assert str(refs_bib) in result.output


class TestListCommand:
    """Test the list command."""

    def test_list(self, cli_runner, refs_bib):
        result = cli_runner.invoke(["-b", str(refs_bib), "list"])

        assert result.exit_code == 0
        assert "smith2020" in result.output
        assert "doe2019" in result.output

    def test_list_search(self, cli_runner, refs_bib):
        result = cli_runner.invoke(["-b", str(refs_bib), "list", "--search", "markdown"])

        assert result.exit_code == 0
        assert "doe2019" in result.output

    def test_list_not_found(self, cli_runner, tmp_path):
        result = cli_runner.invoke(["-b", str(tmp_path / "missing.bib"), "list"])

        assert result.exit_code == 1
        assert "BibTeX file not found" in result.output

    def test_list_partial_failure_warns(self, cli_runner, refs_bib, make_document):
        document = make_document("bibliography: [missing.bib, refs.bib]")

        result = cli_runner.invoke(["list", str(document)])

        assert result.exit_code == 0
        assert "Warning" in result.output
        assert "missing.bib" in result.output
        assert "smith2020" in result.output


class TestCiteCommand:
    """Test the cite command."""

    def test_cite_in_parentheses(self, cli_runner):
        result = cli_runner.invoke(["cite", "smith2020", "doe2019"])

        assert result.exit_code == 0
        assert "[@smith2020; @doe2019]" in result.output

    def test_cite_narrative(self, cli_runner):
        result = cli_runner.invoke(["cite", "--narrative", "smith2020"])

        assert result.exit_code == 0
        assert result.output.strip().endswith("@smith2020")
        assert "[@" not in result.output

    def test_cite_nothing(self, cli_runner):
        result = cli_runner.invoke(["cite"])

        assert result.exit_code == 1
        assert "No reference selected" in result.output

    def test_cite_invalid_key(self, cli_runner):
        result = cli_runner.invoke(["cite", "a", ""])

        assert result.exit_code == 1
        assert "Invalid citation key" in result.output

    def test_cite_with_document(self, cli_runner, refs_bib, make_document):
        document = make_document("bibliography: refs.bib")

        result = cli_runner.invoke(["cite", "-d", str(document), "smith2020"])

        assert result.exit_code == 0
        assert "[@smith2020]" in result.output

    def test_config_narrative_default(self, cli_runner, tmp_path):
        config = tmp_path / "narrative.yaml"
        config.write_text("in_parentheses: false\n")

        result = cli_runner.invoke(["--config", str(config), "cite", "a"])

        assert result.exit_code == 0
        assert "[@a]" not in result.output
        assert "@a" in result.output

    @pytest.mark.parametrize("flag", ["--parentheses", "-p"])
    def test_parentheses_flag_overrides_config(self, cli_runner, tmp_path, flag):
        config = tmp_path / "narrative.yaml"
        config.write_text("in_parentheses: false\n")

        result = cli_runner.invoke(["--config", str(config), "cite", flag, "a"])

        assert result.exit_code == 0
        assert result.output.strip().endswith("[@a]")

    def test_pick_parentheses_flag(self, cli_runner, tmp_path, refs_bib):
        config = tmp_path / "narrative.yaml"
        config.write_text(f"bibliography_path: {refs_bib}\nin_parentheses: false\n")

        result = cli_runner.invoke(
            ["--config", str(config), "pick", "--parentheses"], input="1\n\n"
        )

        assert result.exit_code == 0
        assert result.output.strip().endswith("[@smith2020]")


class TestPickCommand:
    """Test the interactive picker."""

    def test_pick_by_number(self, cli_runner, refs_bib):
        result = cli_runner.invoke(["-b", str(refs_bib), "pick"], input="1\n\n")

        assert result.exit_code == 0
        assert result.output.strip().endswith("[@smith2020]")

    def test_pick_by_key_and_toggle(self, cli_runner, refs_bib):
        result = cli_runner.invoke(
            ["-b", str(refs_bib), "pick"], input="doe2019 smith2020\np\n\n"
        )

        assert result.exit_code == 0
        assert result.output.strip().endswith("@doe2019; @smith2020")

    def test_pick_remove(self, cli_runner, refs_bib):
        result = cli_runner.invoke(
            ["-b", str(refs_bib), "pick"], input="1 2\n-1\n\n"
        )

        assert result.exit_code == 0
        assert result.output.strip().endswith("[@doe2019]")

    def test_pick_search_then_select(self, cli_runner, refs_bib):
        result = cli_runner.invoke(
            ["-b", str(refs_bib), "pick"], input="/markdown\n1\n\n"
        )

        assert result.exit_code == 0
        assert result.output.strip().endswith("[@doe2019]")

    def test_pick_key_with_brackets(self, cli_runner, bib_dir):
        bib = bib_dir / "odd.bib"
        bib.write_text("@misc{Smith[2020],\n  title = {Odd Key},\n  year = {2020}\n}\n")

        result = cli_runner.invoke(["-b", str(bib), "pick"], input="1\n\n")

        assert result.exit_code == 0
        assert result.output.strip().endswith("[@Smith[2020]]")

    def test_pick_unknown(self, cli_runner, refs_bib):
        result = cli_runner.invoke(["-b", str(refs_bib), "pick"], input="ghost\n\n")

        assert "Unknown reference: ghost" in result.output
        assert result.exit_code == 1

    def test_pick_nothing(self, cli_runner, refs_bib):
        result = cli_runner.invoke(["-b", str(refs_bib), "pick"], input="\n")

        assert result.exit_code == 1
        assert "No reference selected" in result.output

    def test_pick_cancel(self, cli_runner, refs_bib):
        result = cli_runner.invoke(["-b", str(refs_bib), "pick"], input="1\nq\n")

        assert result.exit_code == 1
        assert result.output.strip().endswith("Cancelled")

    def test_pick_reload(self, cli_runner, refs_bib):
        result = cli_runner.invoke(
            ["-b", str(refs_bib), "pick"], input="1\nr\n\n"
        )

        assert result.exit_code == 0
        assert result.output.strip().endswith("[@smith2020]")


class TestSetPathCommand:
    """Test persisting the explicit bibliography path."""

    def test_set_path_writes_user_config(self, cli_runner, tmp_path):
        result = cli_runner.invoke(["set-path", "/data/library.bib"])

        assert result.exit_code == 0
        saved = tmp_path / "xdg-config" / "mdcite" / "config.yaml"
        assert yaml.safe_load(saved.read_text()) == {
            "bibliography_path": "/data/library.bib"
        }

        follow_up = cli_runner.invoke(["paths"])
        assert "/data/library.bib" in follow_up.output

    def test_set_path_with_config_option(self, cli_runner, config_file: Path):
        result = cli_runner.invoke(["--config", str(config_file), "set-path", "x.bib"])

        assert result.exit_code == 0
        assert yaml.safe_load(config_file.read_text())["bibliography_path"] == "x.bib"
