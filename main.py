#!/usr/bin/env python3
"""
AssetPipe - Content-Addressed Asset Bundling Service
====================================================

Main application entry point with CLI interface.

Usage:
    python main.py --help                    # Show all commands
    python main.py check-config              # Validate configuration
    python main.py serve                     # Start the HTTP server
"""

import sys

import click
from aiohttp import web
from rich.console import Console
from rich.table import Table

from assetpipe.config.settings import get_settings
from assetpipe.server.app import create_app
from assetpipe.storage.memory_sink import MemorySink
from assetpipe.utils.logging import configure_application_logging, get_logger_for_component
from assetpipe.utils.exceptions import AssetPipeError

console = Console()


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug mode')
@click.pass_context
def cli(ctx, debug):
    """AssetPipe - content-addressed JS/CSS bundling service."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.pass_context
def check_config(ctx):
    """Validate environment configuration and print the effective settings."""
    console.print("[bold blue]🔧 Checking AssetPipe Configuration[/bold blue]")

    try:
        settings = get_settings()
    except AssetPipeError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)

    table = Table(title="Effective Configuration")
    table.add_column("Section", style="cyan")
    table.add_column("Setting", style="green")
    table.add_column("Value")

    for section_name in ("server", "pipeline", "bundler", "logging"):
        section = getattr(settings, section_name)
        for key, value in section.model_dump(mode="json").items():
            table.add_row(section_name, key, str(value))

    console.print(table)
    console.print("[bold green]✅ Configuration is valid[/bold green]")


@cli.command()
@click.option('--host', default=None, help='Interface to bind (default from config)')
@click.option('--port', default=None, type=int, help='Port to listen on (default from config)')
@click.pass_context
def serve(ctx, host, port):
    """Start the HTTP server with an in-memory sink."""
    try:
        settings = get_settings()
    except AssetPipeError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)

    configure_application_logging(
        log_level="DEBUG" if ctx.obj.get('debug') else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count,
    )
    server_logger = get_logger_for_component("main")

    host = host or settings.server.host
    port = port or settings.server.port
    server_logger.info(f"Starting {settings.app_name} {settings.version} on {host}:{port}")

    web.run_app(create_app(sink=MemorySink(), settings=settings), host=host, port=port, print=None)


if __name__ == '__main__':
    cli()
