"""
Tests for the command line entry point.
"""

import pytest

import src.main as cli
from src.adapters.auth.jwt_identity import JWTIdentityAdapter
from src.infrastructure.container import create_container


@pytest.fixture
def offline(monkeypatch, fake_coingecko, store):
    """Route CLI commands to the fake API and the in-memory store."""

    async def create(settings):
        return await create_container(settings, transport=fake_coingecko.transport, user_store=store)

    monkeypatch.setattr(cli, "create_container", create)
    return store


class TestParseArgs:
    """Tests for argument parsing."""

    def test_subcommands(self):
        args = cli.parse_args(["--log-level", "DEBUG", "top", "--limit", "5"])

        assert args.command == "top"
        assert args.limit == 5
        assert args.log_level == "DEBUG"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.parse_args([])


class TestRunAsync:
    """Tests for market data commands."""

    @pytest.mark.asyncio
    async def test_top(self, offline, settings, capsys):
        code = await cli.run_async(cli.parse_args(["top"]), settings)

        output = capsys.readouterr().out
        assert code == 0
        assert "Bitcoin" in output
        assert "$50,000.00" in output

    @pytest.mark.asyncio
    async def test_unknown_coin(self, offline, settings, capsys):
        code = await cli.run_async(cli.parse_args(["coin", "nope"]), settings)

        output = capsys.readouterr().out
        assert code == 1
        assert "not found" in output
        assert "suggestion" in output

    @pytest.mark.asyncio
    async def test_chart(self, offline, settings, capsys):
        code = await cli.run_async(cli.parse_args(["chart", "eth", "--days", "7"]), settings)

        output = capsys.readouterr().out
        assert code == 0
        assert "ethereum: last 7 days" in output
        assert "$3,000.00" in output

    @pytest.mark.asyncio
    async def test_trending(self, offline, settings, capsys):
        code = await cli.run_async(cli.parse_args(["trending"]), settings)

        output = capsys.readouterr().out
        assert code == 0
        assert "1. Bitcoin (BIT)" in output

    @pytest.mark.asyncio
    async def test_create_user_and_valuate(self, offline, settings, capsys):
        assert await cli.run_async(cli.parse_args(["create-user", "alice"]), settings) == 0
        assert "alice" in offline.records

        code = await cli.run_async(cli.parse_args(["valuate", "alice"]), settings)

        assert code == 0
        assert "Total Invested" in capsys.readouterr().out


class TestMain:
    """Tests for synchronous commands."""

    def test_issue_token(self, monkeypatch, settings, capsys):
        monkeypatch.setattr(cli, "get_settings", lambda: settings)
        monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["issue-token", "alice"])

        token = capsys.readouterr().out.strip()
        assert exc_info.value.code == 0
        assert JWTIdentityAdapter(settings.jwt_secret).resolve_user_id(token) == "alice"

    def test_serve_requires_secret(self, settings):
        settings = settings.model_copy(update={"jwt_secret": ""})

        assert cli.serve(settings) == 1
