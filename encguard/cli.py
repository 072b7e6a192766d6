import asyncio
import json
import sys

import click

from .config import load_settings, setup_logging
from .scanning.api import verdict_to_dict
from .scanning.models import VerdictAction
from .scanning.orchestrator import EncryptedContentScanner

EXIT_CODES = {
    VerdictAction.ALLOWED: 0,
    VerdictAction.BLOCKED: 1,
    VerdictAction.INDETERMINATE: 2,
}


@click.group()
@click.option('--config', '-c', default=None, help='Configuration file path')
@click.pass_context
def cli(ctx, config):
    """Encrypted content scanner CLI"""
    ctx.ensure_object(dict)
    settings = load_settings(config)
    setup_logging(settings)
    ctx.obj['settings'] = settings


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--filename', '-f', help='Original upload name (defaults to the file name on disk)')
@click.pass_context
def scan(ctx, file_path, filename):
    """Scan a file and print the verdict as JSON"""
    scanner = EncryptedContentScanner(ctx.obj['settings'])
    verdict = asyncio.run(scanner.scan_file(file_path, filename))
    click.echo(json.dumps(verdict_to_dict(verdict), indent=2))
    sys.exit(EXIT_CODES[verdict.action])


@cli.command()
@click.pass_context
def tools(ctx):
    """Show PDF inspection tool availability"""
    scanner = EncryptedContentScanner(ctx.obj['settings'])
    pdf = scanner.pdf_probe
    for source in (pdf.primary, pdf.secondary):
        info = scanner.tool_manager.check_tool(source.tool_name)
        state = "installed" if info.installed else "missing"
        enabled = "enabled" if source.enabled else "disabled"
        click.echo(f"{info.display_name:<12} {enabled:<9} {state:<10} {info.path or '-'}")


@cli.command()
@click.pass_context
def check(ctx):
    """Check that every enabled dependency is usable"""
    scanner = EncryptedContentScanner(ctx.obj['settings'])
    if scanner.is_configured():
        click.echo("Scanner is configured.")
        return
    click.echo("Scanner is NOT configured: an enabled PDF tool is missing.", err=True)
    sys.exit(1)
