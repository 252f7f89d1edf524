"""Tests for CLI commands."""

import json

import pytest
from typer.testing import CliRunner

from sqlprep.cli import app
from sqlprep.placeholders.registry import clear_registry, register_type

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every CLI test in an empty directory with a clean registry."""
    monkeypatch.chdir(tmp_path)
    clear_registry()
    yield tmp_path
    clear_registry()


class TestRenderCommand:
    """Tests for the render command."""

    def test_render_quoted(self):
        """Test a quoted text value."""
        result = runner.invoke(app, ["render", "name = ?", "O'Brien"])

        assert result.exit_code == 0
        assert result.stdout.strip() == 'name = "O\\\'Brien"'

    def test_render_infers_numbers(self):
        """Test that numeric arguments are rendered unquoted."""
        result = runner.invoke(app, ["render", "WHERE id = ?", "5"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "WHERE id = 5"

    def test_render_null(self):
        """Test that null becomes NULL."""
        result = runner.invoke(app, ["render", "name IS ?", "null"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "name IS NULL"

    def test_render_text_flag(self):
        """Test that --text disables type inference."""
        result = runner.invoke(app, ["render", "--text", "age >= ?", "18"])

        assert result.exit_code == 0
        assert result.stdout.strip() == 'age >= "18"'

    def test_render_raw(self):
        """Test a raw value."""
        result = runner.invoke(app, ["render", "dated = @", "CURDATE()"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "dated = CURDATE()"

    def test_render_typed_modifiers(self):
        """Test a typed placeholder with modifiers."""
        result = runner.invoke(
            app, ["render", "SET name = %varchar:trim:crop:4", "  abcdef  "]
        )

        assert result.exit_code == 0
        assert result.stdout.strip() == 'SET name = "abcd"'

    def test_render_square_brackets_verbatim(self):
        """Test that markup-like text is printed as is."""
        result = runner.invoke(app, ["render", "x IN [a] AND y = ?", "[bold]"])

        assert result.exit_code == 0
        assert result.stdout.strip() == 'x IN [a] AND y = "[bold]"'

    def test_render_quote_char_option(self):
        """Test the --quote-char option."""
        result = runner.invoke(app, ["render", "-q", "'", "name = ?", "Bob"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "name = 'Bob'"

    def test_render_utf8mb4_option(self):
        """Test that --utf8mb4 keeps 4-byte characters."""
        result = runner.invoke(
            app, ["render", "--utf8mb4", "%s", "hi \U0001f600"]
        )

        assert result.exit_code == 0
        assert "\U0001f600" in result.stdout

    def test_render_from_file(self, isolated_cwd):
        """Test reading the pattern from a file."""
        pattern_file = isolated_cwd / "query.sql"
        pattern_file.write_text("SELECT * FROM t WHERE id = ? AND n = ?\n")

        result = runner.invoke(app, ["render", "--file", str(pattern_file), "1", "2"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "SELECT * FROM t WHERE id = 1 AND n = 2"

    def test_render_args_file(self, isolated_cwd):
        """Test loading arguments from a JSON file."""
        args_file = isolated_cwd / "args.json"
        args_file.write_text(json.dumps([7, "x"]))

        result = runner.invoke(
            app, ["render", "--args-file", str(args_file), "a = ? AND b = ?"]
        )

        assert result.exit_code == 0
        assert result.stdout.strip() == 'a = 7 AND b = "x"'

    def test_render_uses_config(self, isolated_cwd):
        """Test that sqlprep.toml settings are applied."""
        (isolated_cwd / "sqlprep.toml").write_text("[sqlprep]\nquote_char = \"'\"\n")

        result = runner.invoke(app, ["render", "name = ?", "Bob"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "name = 'Bob'"

    def test_cli_option_overrides_config(self, isolated_cwd):
        """Test that CLI options win over sqlprep.toml."""
        (isolated_cwd / "sqlprep.toml").write_text("[sqlprep]\nquote_char = \"'\"\n")

        result = runner.invoke(app, ["render", "-q", "`", "name = ?", "Bob"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "name = `Bob`"

    def test_render_registered_type(self):
        """Test that types registered in the process are available."""
        register_type("password", lambda value, modifiers: '"hashed"')

        result = runner.invoke(app, ["render", "SET pw = %password", "secret"])

        assert result.exit_code == 0
        assert result.stdout.strip() == 'SET pw = "hashed"'

    def test_render_count_mismatch(self):
        """Test that a missing argument exits with an error."""
        result = runner.invoke(app, ["render", "a = ? AND b = ?", "1"])

        assert result.exit_code == 1
        assert "Invalid number of parameters" in result.output

    def test_render_length_violation(self):
        """Test that a length violation exits with an error."""
        result = runner.invoke(app, ["render", "%varchar:2", "abc"])

        assert result.exit_code == 1
        assert "Invalid string length" in result.output

    def test_render_unknown_type(self):
        """Test that an unknown placeholder type exits with an error."""
        result = runner.invoke(app, ["render", "LIKE '%abc'", "1"])

        assert result.exit_code == 1
        assert "Unknown placeholder type" in result.output

    def test_render_missing_pattern(self):
        """Test that render without a pattern fails."""
        result = runner.invoke(app, ["render"])

        assert result.exit_code == 1
        assert "Provide a pattern" in result.output

    def test_render_unreadable_file(self, isolated_cwd, mocker):
        """Test that an OS error while reading exits cleanly."""
        pattern_file = isolated_cwd / "query.sql"
        pattern_file.write_text("SELECT ?")
        mocker.patch(
            "sqlprep.cli.read_pattern_file",
            side_effect=PermissionError("Cannot read file query.sql"),
        )

        result = runner.invoke(app, ["render", "--file", str(pattern_file), "1"])

        assert result.exit_code == 1
        assert "Unexpected error" in result.output
        assert "Cannot read file" in result.output
        assert not isinstance(result.exception, PermissionError)

    def test_render_bad_args_file(self, isolated_cwd):
        """Test that an invalid arguments file exits with an error."""
        args_file = isolated_cwd / "args.json"
        args_file.write_text('{"not": "a list"}')

        result = runner.invoke(app, ["render", "-a", str(args_file), "?"])

        assert result.exit_code == 1
        assert "JSON array" in result.output


class TestQuoteCommand:
    """Tests for the quote command."""

    def test_quote(self):
        result = runner.invoke(app, ["quote", "O'Brien"])

        assert result.exit_code == 0
        assert result.stdout.strip() == '"O\\\'Brien"'

    def test_quote_custom_char(self):
        result = runner.invoke(app, ["quote", "--quote-char", "'", "abc"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "'abc'"


class TestEscapeCommand:
    """Tests for the escape command."""

    def test_escape(self):
        result = runner.invoke(app, ["escape", 'say "hi"'])

        assert result.exit_code == 0
        assert result.stdout.strip() == 'say \\"hi\\"'

    def test_escape_like(self):
        result = runner.invoke(app, ["escape", "--like", "50%_off"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "50\\%\\_off"


class TestTypesCommand:
    """Tests for the types command."""

    def test_lists_builtin_types(self):
        result = runner.invoke(app, ["types"])

        assert result.exit_code == 0
        assert "Placeholder Types" in result.stdout
        assert "%varchar" in result.stdout
        assert "%clamp" in result.stdout
        assert "Modifiers:" in result.stdout
        assert "nullable" in result.stdout

    def test_lists_registered_types(self):
        register_type("password", lambda value, modifiers: "x")

        result = runner.invoke(app, ["types"])

        assert result.exit_code == 0
        assert "%password" in result.stdout
        assert "registered" in result.stdout

    def test_plugins_disabled_by_config(self, isolated_cwd):
        """Test that plugins = false hides process registrations."""
        (isolated_cwd / "sqlprep.toml").write_text("[sqlprep]\nplugins = false\n")
        register_type("password", lambda value, modifiers: "x")

        result = runner.invoke(app, ["types"])

        assert result.exit_code == 0
        assert "%password" not in result.stdout


class TestHelp:
    """Tests for help output."""

    def test_main_help(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "render" in result.stdout
        assert "quote" in result.stdout
