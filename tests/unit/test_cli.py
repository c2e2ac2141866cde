"""
Unit tests for CLI commands.
"""

from unittest.mock import AsyncMock, MagicMock, patch

from typer.testing import CliRunner

from rolecall import __version__
from rolecall.cli.app import app


def _fake_orchestrator(reply: str = "Here you go.") -> MagicMock:
    orchestrator = MagicMock()
    orchestrator.respond = AsyncMock(return_value=reply)
    orchestrator.message_count.return_value = 0
    return orchestrator


def test_version(cli_runner: CliRunner) -> None:
    """Test --version flag."""
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_help(cli_runner: CliRunner) -> None:
    """Test --help flag."""
    result = cli_runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "rolecall" in result.stdout
    for command in ("chat", "ask", "resolve", "tools", "auth", "config"):
        assert command in result.stdout


def test_invalid_profile_config(cli_runner: CliRunner, rolecall_home) -> None:
    """Test that a broken config file is reported, not raised."""
    (rolecall_home / "config.yaml").write_text("remote: [unclosed\n")
    result = cli_runner.invoke(app, ["tools", "list"])
    assert result.exit_code == 1
    assert "Configuration error" in result.stdout


class TestToolsCommands:
    def test_list(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["tools", "list"])
        assert result.exit_code == 0
        assert "GetB2CUsers" in result.stdout
        assert "Total: 9 tool(s)" in result.stdout

    def test_info(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["tools", "info", "ManageRoles"])
        assert result.exit_code == 0
        assert "GET http://localhost:5156/Roles/manage" in result.stdout
        assert "assign-role" in result.stdout
        assert "Timeout: 30s (read)" in result.stdout

    def test_info_unknown(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["tools", "info", "DeleteEverything"])
        assert result.exit_code == 1
        assert "Tool not found" in result.stdout


class TestResolveCommand:
    def test_rules_only(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            app,
            ["resolve", "--rules-only", "Assign role Admin to user john@example.com in app MyApp"],
        )
        assert result.exit_code == 0
        assert "ManageRoles" in result.stdout
        assert "assign-role" in result.stdout
        assert "john@example.com" in result.stdout
        assert "rules" in result.stdout

    def test_rules_only_missing_slots(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["resolve", "--rules-only", "Assign role Admin"])
        assert result.exit_code == 0
        assert "username, appName" in result.stdout

    def test_no_tool(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["resolve", "--rules-only", "hello there"])
        assert result.exit_code == 0
        assert "No tool call" in result.stdout

    def test_requires_request(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["resolve"])
        assert result.exit_code == 1
        assert "A request is required" in result.stdout


class TestConfigCommand:
    def test_show(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "base_url" in result.stdout

    def test_secrets_masked(self, cli_runner: CliRunner, monkeypatch) -> None:
        monkeypatch.setenv("ROLECALL_AUTH_CLIENT_SECRET", "super-secret-value-9876")
        result = cli_runner.invoke(app, ["config", "show", "auth", "--json"])
        assert result.exit_code == 0
        assert "super-secret-value-9876" not in result.stdout
        assert "****9876" in result.stdout

    def test_section(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["config", "show", "remote.read_timeout"])
        assert result.exit_code == 0
        assert "30.0" in result.stdout

    def test_unknown_section(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["config", "show", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestAuthCommand:
    def test_no_token(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["auth", "status"])
        assert result.exit_code == 0
        assert "not configured" in result.stdout
        assert "static token" in result.stdout

    def test_valid_token(self, cli_runner: CliRunner, monkeypatch, make_jwt) -> None:
        token = make_jwt()
        monkeypatch.setenv("ROLECALL_AUTH_ACCESS_TOKEN", token)
        result = cli_runner.invoke(app, ["auth", "status"])
        assert result.exit_code == 0
        assert token not in result.stdout
        assert f"****{token[-4:]}" in result.stdout
        assert "yes" in result.stdout


class TestConversationCommands:
    def test_ask_requires_question(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["ask"])
        assert result.exit_code == 1
        assert "A question is required" in result.stdout

    def test_ask(self, cli_runner: CliRunner) -> None:
        orchestrator = _fake_orchestrator("There are 3 users.")
        with patch("rolecall.cli.commands.ask.build_orchestrator", return_value=orchestrator):
            result = cli_runner.invoke(app, ["ask", "--plain", "Get all users"])

        assert result.exit_code == 0
        assert "There are 3 users." in result.stdout
        orchestrator.respond.assert_awaited_once_with("cli", "Get all users")

    def test_chat_loop(self, cli_runner: CliRunner) -> None:
        orchestrator = _fake_orchestrator("Hello!")
        with patch("rolecall.cli.commands.chat.build_orchestrator", return_value=orchestrator):
            result = cli_runner.invoke(
                app, ["chat", "--session", "s1"], input="hi\n/count\n/reset\n/exit\n"
            )

        assert result.exit_code == 0
        orchestrator.respond.assert_awaited_once_with("s1", "hi")
        orchestrator.reset.assert_called_once_with("s1")
        assert "Messages in conversation: 0" in result.stdout
        assert "Conversation cleared." in result.stdout

    def test_chat_ends_on_eof(self, cli_runner: CliRunner) -> None:
        orchestrator = _fake_orchestrator()
        with patch("rolecall.cli.commands.chat.build_orchestrator", return_value=orchestrator):
            result = cli_runner.invoke(app, ["chat"], input="")

        assert result.exit_code == 0
        orchestrator.respond.assert_not_called()
