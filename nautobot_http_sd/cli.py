#!/usr/bin/env python3
"""
Command line entry point for nautobot-http-sd.

Commands:
  serve     Build the target snapshot from Nautobot, then serve it over HTTP
  targets   Build the target snapshot and print it
  devices   Print the devices returned by every query document
  config    Show the effective configuration (token masked)

Common options:
  --config PATH       YAML/JSON config file (optional)
  --env-file PATH     dotenv file loaded before reading the environment (default: .env)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT Logging format string

Required environment:
  NAUTOBOT_URL, NAUTOBOT_API_TOKEN

Example:
  nautobot-http-sd serve --port 6645 --query-dir graphql_queries
"""
import asyncio
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from nautobot_http_sd import __version__
from nautobot_http_sd.config import DiscoveryConfig, load_config
from nautobot_http_sd.errors import ConfigurationError, HttpSdError
from nautobot_http_sd.logger import DEFAULT_FORMAT, init_logging, logger
from nautobot_http_sd.pipeline import build_snapshot, collect_devices
from nautobot_http_sd.server import serve

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _load(ctx: click.Context, **overrides) -> DiscoveryConfig:
    try:
        return load_config(ctx.obj['config_path'], **overrides)
    except ConfigurationError as e:
        print_error(f'Configuration error: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='nautobot-http-sd, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML or JSON config file.'
)
@click.option(
    '--env-file', 'env_file',
    default='.env',
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help='dotenv file loaded before reading the environment.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stderr only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, env_file, log_level, log_file, log_format):
    """Prometheus HTTP service discovery backed by Nautobot GraphQL."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    if env_file.is_file():
        load_dotenv(env_file)
        logger.debug('Loaded environment from %s', env_file)
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Listen address (default 0.0.0.0)')
@click.option('--port', '-p', type=int, default=None, help='Listen port (default 6645)')
@click.option(
    '--query-dir', '-q', 'query_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory with *.gql query files (default graphql_queries)'
)
@click.pass_context
def serve_cmd(ctx, host, port, query_dir):
    """Build the snapshot once, then serve it until interrupted."""
    cfg = _load(ctx, host=host, port=port, query_dir=query_dir)

    async def _run() -> None:
        snapshot = await build_snapshot(cfg)
        await serve(snapshot, cfg.host, cfg.port)

    try:
        asyncio.run(_run())
    except HttpSdError as e:
        print_error(f'Error: {e}')
    except KeyboardInterrupt:
        logger.info('Interrupted, shutting down')


@cli.command('targets', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--pretty/--compact', 'pretty',
    default=None,
    help='Indent the JSON output (default from config)'
)
@click.option(
    '--query-dir', '-q', 'query_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory with *.gql query files'
)
@click.pass_context
def targets_cmd(ctx, pretty, query_dir):
    """Build the snapshot and print it to stdout."""
    cfg = _load(ctx, pretty=pretty, query_dir=query_dir)
    try:
        snapshot = asyncio.run(build_snapshot(cfg))
    except HttpSdError as e:
        print_error(f'Error: {e}')
    click.echo(snapshot.body.decode('utf-8'))


@cli.command('devices', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--query-dir', '-q', 'query_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory with *.gql query files'
)
@click.pass_context
def devices_cmd(ctx, query_dir):
    """Print every device returned by every query document."""
    cfg = _load(ctx, query_dir=query_dir)
    try:
        results = asyncio.run(collect_devices(cfg))
    except HttpSdError as e:
        print_error(f'Error: {e}')

    for document, devices in results:
        click.secho(f'# {document.job_name} ({len(devices)} device(s))', bold=True)
        for device in devices:
            click.echo(f'Device Name: {device.name}')
            click.echo(f'Location: {device.location.name}')
            if device.role is not None and device.role.name:
                click.echo(f'Role: {device.role.name}')
            if device.primary_ip4 is not None:
                click.echo(f'Primary IP: {device.primary_ip4.address}')
            click.echo()


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = _load(ctx)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
