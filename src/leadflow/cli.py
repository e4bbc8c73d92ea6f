from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path

import click

from leadflow import __version__
from leadflow.errors import LeadflowError
from leadflow.utils.config import Config, get_config
from leadflow.utils.logger import setup_logging


def _config(db_path: str | None) -> Config:
    config = get_config()
    if db_path:
        config = replace(config, db_path=Path(db_path))
    setup_logging(config.log_level)
    return config


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except LeadflowError as e:
        raise click.ClickException(e.message) from e


_db_option = click.option(
    "--db-path",
    default=None,
    help="Path for the SQLite database file (defaults to LEADFLOW_DB_PATH).",
)


@click.group()
@click.version_option(version=__version__, prog_name="leadflow")
def main() -> None:
    """Leadflow: lead upload and round-robin distribution."""


@main.command()
@_db_option
def init(db_path: str | None) -> None:
    """Initialize the Leadflow database."""
    from leadflow.db.database import Database

    config = _config(db_path)

    async def _init() -> None:
        db = Database(config.db_path)
        await db.initialize()
        await db.close()
        click.echo(f"Database initialized at {config.db_path}")

    _run(_init())


@main.command()
@_db_option
@click.option("--host", default=None, help="Bind address (defaults to LEADFLOW_HOST).")
@click.option("--port", default=None, type=int, help="Port (defaults to LEADFLOW_PORT).")
def serve(db_path: str | None, host: str | None, port: int | None) -> None:
    """Start the Leadflow HTTP API."""
    from leadflow.server import run

    config = _config(db_path)
    if host:
        config = replace(config, host=host)
    if port:
        config = replace(config, port=port)
    click.echo(f"Starting Leadflow API on {config.host}:{config.port}...")
    run(config)


@main.command("create-agent")
@_db_option
@click.option("--name", required=True)
@click.option("--email", required=True)
@click.option("--mobile", required=True)
@click.password_option()
def create_agent(db_path: str | None, name: str, email: str, mobile: str, password: str) -> None:
    """Register a new agent in the distribution pool."""
    from leadflow.api.deps import build_services

    config = _config(db_path)

    async def _create() -> None:
        services = await build_services(config)
        try:
            agent = await services.agents.create(name, email, mobile, password)
            click.echo(f"Created agent {agent.id} <{agent.email}>")
        finally:
            await services.db.close()

    _run(_create())


@main.command("agents")
@_db_option
def list_agents(db_path: str | None) -> None:
    """List agents in distribution order."""
    from leadflow.api.deps import build_services

    config = _config(db_path)

    async def _list() -> None:
        services = await build_services(config)
        try:
            for index, agent in enumerate(await services.agents.list_all()):
                click.echo(f"{index}\t{agent.id}\t{agent.name}\t{agent.email}\t{agent.mobile}")
        finally:
            await services.db.close()

    _run(_list())


@main.command()
@_db_option
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--content-type",
    default=None,
    help="Declared MIME type (guessed from the extension when omitted).",
)
def distribute(db_path: str | None, file: Path, content_type: str | None) -> None:
    """Parse FILE and distribute its rows across the agent pool."""
    from leadflow.api.deps import build_services

    config = _config(db_path)

    async def _distribute() -> None:
        services = await build_services(config)
        try:
            result = await services.uploads.ingest_path(file, content_type)
            report = result.report
            click.echo(
                f"Distributed {report.distributed_count} record(s) from {file.name} "
                f"({report.outcome.value})"
            )
            if report.failed_indices:
                click.echo(f"Failed rows: {report.failed_indices}", err=True)
        finally:
            await services.db.close()

    _run(_distribute())


@main.command()
def version() -> None:
    """Print the version and exit."""
    click.echo(f"leadflow {__version__}")


if __name__ == "__main__":
    main()
