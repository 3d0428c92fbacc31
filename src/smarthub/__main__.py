"""CLI entry point for SmartHub.

Runs the RPC server or applies schema migrations. The server can run in
one-shot mode (``--once``) or continuously with a Prometheus metrics
server.

Examples:
    ```bash
    python -m smarthub serve
    python -m smarthub serve --config config/smarthub.yaml --log-level DEBUG
    python -m smarthub migrate
    ```
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from smarthub.core import Pool, apply_migrations, setup_logging, start_metrics_server
from smarthub.core.exceptions import ConfigurationError, ConnectionPoolError
from smarthub.core.logger import Logger
from smarthub.core.yaml import load_yaml
from smarthub.server import Server


CONFIG_PATH = Path("config") / "smarthub.yaml"

logger = Logger("cli")


async def run_server(pool: Pool, server_dict: dict[str, Any], *, once: bool) -> int:
    """Run the RPC server in one-shot or continuous mode.

    In one-shot mode the server starts, runs a single stats cycle and exits.
    In continuous mode a Prometheus metrics server is started and the RPC
    server runs until a shutdown signal is received.

    Args:
        pool: Connected pool.
        server_dict: Parsed ``server`` section of the configuration.
        once: If True, run a single cycle and exit.

    Returns:
        Exit code: 0 for success, 1 for failure.
    """
    server = Server.from_dict(server_dict, pool) if server_dict else Server(pool)

    if once:
        try:
            async with server:
                await server.run()
            logger.info("server_completed")
            return 0
        except Exception as e:  # Intentionally broad: CLI error boundary for one-shot mode
            logger.error("server_failed", error=str(e))
            return 1

    metrics_config = server.config.metrics
    metrics_server = await start_metrics_server(metrics_config)

    if metrics_config.enabled:
        logger.info(
            "metrics_server_started",
            host=metrics_config.host,
            port=metrics_config.port,
            path=metrics_config.path,
        )

    def handle_signal(sig: signal.Signals) -> None:
        logger.info("shutdown_signal", signal=sig.name)
        server.request_shutdown()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_signal, sig)

    try:
        async with server:
            await server.run_forever()
        return 0
    except Exception as e:  # Intentionally broad: CLI error boundary for continuous mode
        logger.error("server_failed", error=str(e))
        return 1
    finally:
        await metrics_server.stop()
        if metrics_config.enabled:
            logger.info("metrics_server_stopped")


async def run_migrations(pool: Pool) -> int:
    """Apply pending migrations and report the versions applied."""
    try:
        applied = await apply_migrations(pool, logger=logger)
    except Exception as e:  # Intentionally broad: CLI error boundary for migrate
        logger.error("migrate_failed", error=str(e))
        return 1
    logger.info("migrate_completed", applied=",".join(applied) or "none")
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="smarthub",
        description="SmartHub catalog server",
    )

    parser.add_argument(
        "command",
        choices=["serve", "migrate"],
        help="Run the RPC server, or apply pending schema migrations and exit",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_PATH,
        help=f"Config path (default: {CONFIG_PATH})",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level (default: INFO)",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="serve: run one cycle and exit (default: run continuously)",
    )

    return parser.parse_args(argv)


def _load_yaml_dict(path: Path) -> dict[str, Any]:
    """Load a YAML file as a dict, returning ``{}`` if the file does not exist."""
    if not path.exists():
        logger.warning("config_not_found", path=str(path))
        return {}
    return load_yaml(path)


def _apply_application_name(pool_dict: dict[str, Any], server_dict: dict[str, Any]) -> None:
    """Default ``pool.server_settings.application_name`` to the service name."""
    service_name = server_dict.get("service_name")
    if not service_name:
        return
    server_settings = pool_dict.setdefault("server_settings", {})
    server_settings.setdefault("application_name", service_name)


async def main(argv: list[str] | None = None) -> int:
    """Main entry point: parse args, connect the pool, and run the command."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = _load_yaml_dict(args.config)
        pool_dict = dict(config.get("pool") or {})
        server_dict = dict(config.get("server") or {})
        _apply_application_name(pool_dict, server_dict)
        pool = Pool.from_dict(pool_dict) if pool_dict else Pool()
    except (ConfigurationError, ValidationError) as e:
        logger.error("config_invalid", path=str(args.config), error=str(e))
        return 1

    try:
        async with pool:
            if args.command == "migrate":
                return await run_migrations(pool)
            return await run_server(pool, server_dict, once=args.once)
    except ConnectionPoolError as e:
        logger.error("connection_failed", error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
