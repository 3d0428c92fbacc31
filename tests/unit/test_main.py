"""
Unit tests for the smarthub.__main__ CLI module.

Tests:
- parse_args argument parsing
- _apply_application_name defaulting
- main() command dispatch and exit codes
- run_server() one-shot mode
- run_migrations() error boundary
"""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import yaml

from smarthub.__main__ import (
    CONFIG_PATH,
    _apply_application_name,
    main,
    parse_args,
    run_migrations,
    run_server,
)
from smarthub.core.exceptions import ConnectionPoolError
from smarthub.server import Server


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def patched_pool():
    """Replace Pool in the CLI module with an async context manager mock."""
    pool = MagicMock()
    pool.__aenter__ = AsyncMock(return_value=pool)
    pool.__aexit__ = AsyncMock(return_value=None)
    with patch("smarthub.__main__.Pool") as pool_cls:
        pool_cls.return_value = pool
        pool_cls.from_dict.return_value = pool
        yield pool_cls


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("smarthub.__main__.setup_logging"):
        yield


# ============================================================================
# parse_args Tests
# ============================================================================


class TestParseArgs:
    """parse_args()."""

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    @pytest.mark.parametrize("command", ["serve", "migrate"])
    def test_commands(self, command) -> None:
        assert parse_args([command]).command == command

    def test_invalid_command(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["seed"])

    def test_defaults(self) -> None:
        args = parse_args(["serve"])
        assert args.config == CONFIG_PATH
        assert args.log_level == "INFO"
        assert args.once is False

    def test_options(self) -> None:
        args = parse_args(
            ["serve", "--config", "custom.yaml", "--log-level", "DEBUG", "--once"]
        )
        assert args.config == Path("custom.yaml")
        assert args.log_level == "DEBUG"
        assert args.once is True

    def test_invalid_log_level(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["serve", "--log-level", "TRACE"])


class TestApplyApplicationName:
    """_apply_application_name()."""

    def test_defaults_to_service_name(self) -> None:
        pool_dict: dict = {}
        _apply_application_name(pool_dict, {"service_name": "catalog"})
        assert pool_dict == {"server_settings": {"application_name": "catalog"}}

    def test_explicit_value_kept(self) -> None:
        pool_dict = {"server_settings": {"application_name": "explicit"}}
        _apply_application_name(pool_dict, {"service_name": "catalog"})
        assert pool_dict["server_settings"]["application_name"] == "explicit"

    def test_no_service_name(self) -> None:
        pool_dict: dict = {}
        _apply_application_name(pool_dict, {})
        assert pool_dict == {}


# ============================================================================
# main Tests
# ============================================================================


class TestMain:
    """main()."""

    async def test_migrate(self, patched_pool, tmp_path) -> None:
        with patch(
            "smarthub.__main__.run_migrations", new_callable=AsyncMock, return_value=0
        ) as migrate:
            code = await main(["migrate", "--config", str(tmp_path / "missing.yaml")])
        assert code == 0
        migrate.assert_awaited_once()
        patched_pool.assert_called_once_with()

    async def test_serve_passes_server_section(self, patched_pool, tmp_path) -> None:
        config_file = tmp_path / "smarthub.yaml"
        config_file.write_text(
            yaml.dump({"pool": {"database": {"host": "db"}}, "server": {"port": 6000}})
        )
        with patch(
            "smarthub.__main__.run_server", new_callable=AsyncMock, return_value=0
        ) as serve:
            code = await main(["serve", "--once", "--config", str(config_file)])
        assert code == 0
        assert serve.await_args.args[1] == {"port": 6000}
        assert serve.await_args.kwargs == {"once": True}
        patched_pool.from_dict.assert_called_once_with({"database": {"host": "db"}})

    async def test_invalid_config(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("DB_PASSWORD", "secret")
        config_file = tmp_path / "smarthub.yaml"
        config_file.write_text(yaml.dump({"pool": {"limits": {"min_size": 10, "max_size": 2}}}))
        assert await main(["serve", "--config", str(config_file)]) == 1

    async def test_connection_failure(self, patched_pool, tmp_path) -> None:
        pool = patched_pool.return_value
        pool.__aenter__ = AsyncMock(side_effect=ConnectionPoolError("refused"))
        assert await main(["migrate", "--config", str(tmp_path / "none.yaml")]) == 1

    async def test_keyboard_interrupt(self, patched_pool, tmp_path) -> None:
        with patch(
            "smarthub.__main__.run_migrations",
            new_callable=AsyncMock,
            side_effect=KeyboardInterrupt,
        ):
            assert await main(["migrate", "--config", str(tmp_path / "none.yaml")]) == 130


# ============================================================================
# run_server / run_migrations Tests
# ============================================================================


class TestRunServer:
    """run_server() one-shot mode."""

    async def test_once_success(self, mock_pool) -> None:
        async def idle(self, app) -> None:
            await asyncio.Event().wait()

        with patch.object(Server, "_run_server", idle):
            code = await run_server(mock_pool, {"apply_migrations": False}, once=True)
        assert code == 0

    async def test_once_failure(self, mock_pool) -> None:
        with patch.object(Server, "__aenter__", side_effect=RuntimeError("bind failed")):
            code = await run_server(mock_pool, {"apply_migrations": False}, once=True)
        assert code == 1


class TestRunMigrations:
    """run_migrations()."""

    async def test_success(self, mock_pool) -> None:
        with patch(
            "smarthub.__main__.apply_migrations", new_callable=AsyncMock, return_value=["001"]
        ):
            assert await run_migrations(mock_pool) == 0

    async def test_failure(self, mock_pool) -> None:
        with patch(
            "smarthub.__main__.apply_migrations",
            new_callable=AsyncMock,
            side_effect=RuntimeError("syntax error"),
        ):
            assert await run_migrations(mock_pool) == 1
