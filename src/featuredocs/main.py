"""
Main entry point for the featuredocs CLI.

This module provides the command-line interface for looking up feature
documentation and completion entries, and for inspecting the bundled catalogs.
"""

import sys
from typing import Optional

import click

from featuredocs.core.container import ServiceContainer
from featuredocs.core.interfaces import ICatalogSource, IResolutionService, IWorkspaceRegistry
from featuredocs.utils.config import get_settings
from featuredocs.utils.logging import configure_root_logging, setup_logging

logger = setup_logging(__name__)


def _build_container(verbose: bool) -> ServiceContainer:
    settings = get_settings()
    configure_root_logging(
        level="DEBUG" if verbose or settings.debug else settings.log_level,
        structured=settings.structured_logging,
        log_file=settings.get_log_file_path(),
        fmt=settings.log_format,
    )
    container = ServiceContainer(settings)
    container.configure_default_services()
    return container


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """featuredocs - feature documentation for editor tooling."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@cli.command()
@click.argument('name')
@click.option('--version', 'version', help='Product version, e.g. 21.0.0.3')
@click.option('--runtime', 'runtime_type', help='Runtime type, e.g. ol or wlp')
@click.option('--document', 'document_uri', help='URI of the document the name appears in')
@click.option('--root', 'roots', multiple=True, help='Workspace root URI (repeatable)')
@click.pass_context
def describe(ctx: click.Context, name: str, version: Optional[str], runtime_type: Optional[str],
             document_uri: Optional[str], roots: tuple[str, ...]) -> None:
    """Print the hover documentation for a feature."""
    with _build_container(ctx.obj.get('verbose', False)) as container:
        registry = container.get(IWorkspaceRegistry)
        for root in roots:
            registry.add_root(root)

        description = container.get(IResolutionService).resolve_feature(
            name, explicit_version=version, explicit_runtime=runtime_type, document_uri=document_uri
        )
        if description is None:
            click.echo(f"No documentation available for {name}")
            sys.exit(1)
        click.echo(description.to_hover_text())


@cli.command()
@click.option('--version', 'version', help='Product version, e.g. 21.0.0.3')
@click.option('--runtime', 'runtime_type', help='Runtime type, e.g. ol or wlp')
@click.pass_context
def complete(ctx: click.Context, version: Optional[str], runtime_type: Optional[str]) -> None:
    """Print every feature as a completion entry."""
    with _build_container(ctx.obj.get('verbose', False)) as container:
        entries = container.get(IResolutionService).list_completions(
            explicit_version=version, explicit_runtime=runtime_type
        )
        for entry in entries:
            click.echo(f"{entry.label}\t{entry.documentation}")


@cli.command()
@click.pass_context
def catalogs(ctx: click.Context) -> None:
    """List the bundled catalog datasets."""
    with _build_container(ctx.obj.get('verbose', False)) as container:
        catalog = container.get(ICatalogSource)
        default = catalog.default_key()
        for key in catalog.available_keys():
            marker = " (default)" if key == default else ""
            click.echo(f"{key.runtime_type}\t{key.version}{marker}")


@cli.command()
def config() -> None:
    """Validate the current settings."""
    settings = get_settings()
    result = settings.validate_settings()
    for warning in result.warnings:
        click.echo(f"Warning: {warning}")
    for error in result.errors:
        click.echo(f"Error: {error}")
    if not result.valid:
        logger.error("Settings are invalid")
        sys.exit(1)
    click.echo("Settings are valid.")


if __name__ == '__main__':
    cli()
