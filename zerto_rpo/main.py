"""Main entry point for the Zerto RPO check.

This module handles:
- Parsing command-line options with click
- Coordinating config loading, login, VPG query and averaging
- Printing the average RPO and optionally writing Prometheus metrics
"""

import logging
import os
import sys
import time
from typing import Optional

import click
import requests

from zerto_rpo.client import RPOSummary, ZertoClient
from zerto_rpo.config import DEFAULT_SERVER, Credentials, Settings, load_credentials, load_settings
from zerto_rpo.errors import ZertoError
from zerto_rpo.exporter import RPOExporter

# Configure module logger
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbosity: int) -> None:
    """Send log output to stderr; stdout carries only the result."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger().setLevel(level)


def run_check(
    settings: Settings,
    credentials: Credentials,
    session: Optional[requests.Session] = None,
) -> RPOSummary:
    """Execute the login, query and average flow.

    Args:
        settings: Connection settings
        credentials: ZVM login credentials
        session: Optional requests session to use

    Returns:
        RPOSummary for all VPGs on the server

    Raises:
        AuthError: If login fails (no query is attempted)
        QueryError: If the VPG query fails
    """
    with ZertoClient(settings, credentials, session=session) as client:
        client.login()
        return client.average_rpo()


def _write_metrics(exporter: RPOExporter, path: str) -> bool:
    try:
        exporter.write(path)
    except OSError as e:
        logger.error(f"Failed to write metrics to {path}: {e}")
        click.echo(f"Error: metrics: {e}", err=True)
        return False
    return True


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--server", default=None, help="ZVM server address [env: ZERTO_SERVER, default: localhost]")
@click.option("--port", type=int, default=None, help="ZVM API port [env: ZERTO_PORT, default: 9669]")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), required=True,
              help="Path to the JSON credentials file")
@click.option("--timeout", type=float, default=None,
              help="Request timeout in seconds [env: ZERTO_TIMEOUT, default: 10]")
@click.option("--insecure/--verify", default=None,
              help="Disable or force TLS certificate validation [env: ZERTO_INSECURE, default: verify]")
@click.option("--textfile", type=click.Path(dir_okay=False), default=None,
              help="Also write Prometheus metrics to this textfile collector file")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug)")
def main(
    server: Optional[str],
    port: Optional[int],
    config_path: str,
    timeout: Optional[float],
    insecure: Optional[bool],
    textfile: Optional[str],
    verbose: int,
) -> None:
    """Print the average ActualRPO of all VPGs on a Zerto Virtual Manager."""
    configure_logging(verbose)
    start_time = time.time()
    exporter: Optional[RPOExporter] = None

    try:
        settings = load_settings(server=server, port=port, timeout=timeout, insecure=insecure)
        if textfile:
            exporter = RPOExporter(server=settings.server)

        credentials = load_credentials(config_path)
        summary = run_check(settings, credentials)

    except ZertoError as e:
        logger.error(f"Check failed ({e.stage} error): {e}")
        click.echo(f"Error: {e.stage}: {e}", err=True)
        if textfile:
            if exporter is None:
                # Settings failed to load; label with the best known server
                exporter = RPOExporter(server=server or os.getenv("ZERTO_SERVER") or DEFAULT_SERVER)
            exporter.set_check_result(False, time.time() - start_time)
            _write_metrics(exporter, textfile)
        sys.exit(1)

    click.echo(summary.average)

    if exporter is not None:
        exporter.update(summary)
        exporter.set_check_result(True, time.time() - start_time)
        if not _write_metrics(exporter, textfile):
            sys.exit(1)


if __name__ == "__main__":
    main()
