"""
Command-line interface for filtergen.

This module implements the CLI using Click.

CLI Structure:
    filtergen generate CONFIG [-o OUTPUT] [--author-name NAME] [--author-email EMAIL]
    filtergen show CONFIG
    filtergen check CONFIG

Global options (before the command):
    --log-level, --log-format, --env-file, --version
"""
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
from dotenv import load_dotenv

from filtergen import __version__
from filtergen.config_loader import load_config
from filtergen.error_handling import FilterGenError, log_error_with_context
from filtergen.logging_config import init_logging
from filtergen.models import Config, Entry
from filtergen.rules import generate_rules
from filtergen.xml_export import entries_to_xml, write_xml

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name='filtergen')
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default=None,
    help='Set logging level (default: WARNING, or FILTERGEN_LOG_LEVEL)'
)
@click.option(
    '--log-format',
    type=click.Choice(['plain', 'json'], case_sensitive=False),
    default=None,
    help='Log output format (default: plain)'
)
@click.option(
    '--env-file',
    type=click.Path(path_type=Path, dir_okay=False),
    default='.env',
    help='Path to .env file with FILTERGEN_* settings (default: .env)'
)
def cli(log_level: Optional[str], log_format: Optional[str], env_file: Path):
    """
    Generate Gmail filters from a YAML rule configuration.
    """
    # Must happen before logging reads FILTERGEN_* variables
    if env_file.exists():
        load_dotenv(env_file, override=False)

    overrides = {}
    if log_level:
        overrides['level'] = log_level.upper()
    if log_format:
        overrides['format'] = log_format.lower()
    init_logging(overrides=overrides)

    if env_file.exists():
        logger.debug(f"Loaded environment variables from: {env_file}")


def _load_and_generate(config_path: Path) -> tuple[Config, List[Entry]]:
    """
    Load the configuration and run the generator, exiting with code 1 on failure.
    """
    try:
        config = load_config(config_path)
        entries = generate_rules(config)
    except (FilterGenError, FileNotFoundError) as e:
        log_error_with_context(e, "Generating filters", context={'config': str(config_path)}, level=logging.DEBUG)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    return config, entries


@cli.command()
@click.argument('config_path', type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    '-o', '--output',
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help='Write XML to this file instead of stdout'
)
@click.option('--author-name', default=None, help='Author name recorded in the feed')
@click.option('--author-email', default=None, help='Author email recorded in the feed')
def generate(config_path: Path, output: Optional[Path], author_name: Optional[str], author_email: Optional[str]):
    """Generate Gmail filter XML from CONFIG_PATH."""
    _, entries = _load_and_generate(config_path)

    if output:
        try:
            write_xml(entries, output, author_name=author_name, author_email=author_email)
        except OSError as e:
            log_error_with_context(e, "Writing filters", context={'output': str(output)})
            click.echo(f"Error: could not write {output}: {e}", err=True)
            sys.exit(1)
        click.echo(f"Wrote {len(entries)} filters to {output}", err=True)
    else:
        click.echo(entries_to_xml(entries, author_name=author_name, author_email=author_email), nl=False)


@cli.command()
@click.argument('config_path', type=click.Path(path_type=Path, dir_okay=False))
def show(config_path: Path):
    """Print the generated filters of CONFIG_PATH in readable form."""
    _, entries = _load_and_generate(config_path)

    for i, entry in enumerate(entries):
        if i:
            click.echo()
        click.echo(click.style(f"Filter #{i}", bold=True))
        for name, value in entry.to_pairs():
            click.echo(f"  {name}: {value}")


@cli.command()
@click.argument('config_path', type=click.Path(path_type=Path, dir_okay=False))
def check(config_path: Path):
    """Validate CONFIG_PATH without writing any output."""
    config, entries = _load_and_generate(config_path)
    click.echo(f"OK: {len(config.rules)} rules, {len(entries)} filters")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == '__main__':
    main()
