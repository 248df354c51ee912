#!/usr/bin/env python3
"""
Command line entry point of SitePress.

Commands:
  serve     Run the HTTP service
  convert   Render one site into a PDF or Markdown file
  traverse  Print the URLs a crawl of a site visits
  config    Show the effective configuration

Global options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only when omitted)
  --log-format FORMAT Logging format string

Example:
  site_press convert https://example.com --traverse --max-pages 5 --markdown
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_press import __version__
from site_press.config import load_config
from site_press.crawler.models import CrawlRequest, OutputMode
from site_press.engine import ConversionService
from site_press.logger import configure
from site_press.server import run
from site_press.utils import sanitize_filename

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


async def run_conversion(cfg, request: CrawlRequest, mode: OutputMode):
    return await ConversionService(cfg).convert(request, mode)


async def run_traversal(cfg, request: CrawlRequest):
    return await ConversionService(cfg).traverse(request)


def _build_request(url, username, password, traverse, max_pages) -> CrawlRequest:
    try:
        return CrawlRequest(
            url=url,
            username=username,
            password=password,
            traverse_links=traverse,
            max_pages=max_pages,
        )
    except ValidationError as e:
        print_error(f'Invalid request: {e.errors()[0]["msg"]}')


def _crawl_options(func):
    func = click.option('--max-pages', '-n', 'max_pages', type=int, default=10, show_default=True,
                        help='Maximum number of pages to visit')(func)
    func = click.option('--password', '-p', default=None, help='Login password')(func)
    func = click.option('--username', '-u', default=None, help='Login user name')(func)
    return func


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SitePress, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to the YAML/JSON configuration file.'
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
    help='Log file (stdout when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SitePress command group."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Interface to listen on (overrides config)')
@click.option('--port', type=int, default=None, envvar='PORT',
              help='TCP port (overrides config, also read from $PORT)')
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP service."""
    cfg = ctx.obj['config']
    overrides = {k: v for k, v in (('host', host), ('port', port)) if v is not None}
    if overrides:
        try:
            cfg = cfg.model_validate({**cfg.model_dump(), **overrides})
        except ValidationError as e:
            print_error(f'Invalid server option: {e.errors()[0]["msg"]}')
    run(cfg)


@cli.command('convert', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--markdown', '-m', is_flag=True, help='Produce Markdown instead of PDF')
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Output file (derived from the URL when omitted)'
)
@click.option('--traverse', '-t', is_flag=True, help='Follow same-origin links')
@_crawl_options
@click.pass_context
def convert(ctx, url, markdown, output, traverse, username, password, max_pages):
    """Render URL (and optionally its linked pages) into one document."""
    cfg = ctx.obj['config']
    request = _build_request(url, username, password, traverse, max_pages)
    mode = OutputMode.MARKDOWN if markdown else OutputMode.PDF
    try:
        artifact = asyncio.run(run_conversion(cfg, request, mode))
    except Exception as e:
        print_error(f'Conversion failed: {e}')

    if not artifact.pages:
        print_error('No page could be rendered')

    if output is None:
        output = Path(f'{sanitize_filename(url)}.{"md" if markdown else "pdf"}')
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        if markdown:
            output.write_text(artifact.content, encoding='utf-8')
        else:
            output.write_bytes(artifact.content)
    except OSError as e:
        print_error(f'Failed to write {output}: {e}')
    click.echo(f'{len(artifact.pages)} page(s) written to {output}')


@cli.command('traverse', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@_crawl_options
@click.option('--pretty', is_flag=True, help='Indent the JSON output')
@click.pass_context
def traverse(ctx, url, username, password, max_pages, pretty):
    """Print the URLs a crawl starting at URL visits, as JSON."""
    cfg = ctx.obj['config']
    request = _build_request(url, username, password, True, max_pages)
    try:
        urls = asyncio.run(run_traversal(cfg, request))
    except Exception as e:
        print_error(f'Traversal failed: {e}')
    click.echo(json.dumps(urls, indent=2 if pretty else None))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
