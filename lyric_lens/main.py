"""
Main CLI interface for Lyric-Lens

Command-line front end for song search and analysis. It plays the role of
the presentation layer for a single local user, identified by ``--user``
(defaults to the login name).

The CLI is built using Click and provides:
- Song search with AI analysis (search, show)
- Search history (history, history --clear)
- Favorites management (favorites list/add/remove)
- Source diagnostics (sources)
- Configuration management (config show/validate)
"""

import functools
import getpass
import sys

import click

from . import __version__
from .config.settings import get_settings, reload_settings
from .core.exceptions import (
    AnalysisGenerationError,
    DuplicateFavoriteError,
    LyricLensError,
    SongNotFoundError
)
from .core.models import StoredAnalysis
from .service import get_search_service
from .utils.logger import configure_from_settings, get_logger, get_current_log_file


logger = get_logger(__name__)


def _default_user() -> str:
    try:
        return getpass.getuser()
    except Exception:
        return "local"


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Known application errors are shown as coloured one-line messages; anything
    else is logged and reported as a generic failure. Exit code is 1 on error
    and 130 on Ctrl-C.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except DuplicateFavoriteError as e:
            click.echo(click.style(str(e), fg='yellow'), err=True)
            sys.exit(1)
        except SongNotFoundError as e:
            click.echo(click.style(f"Song not found: {e}", fg='red'), err=True)
            sys.exit(1)
        except AnalysisGenerationError as e:
            logger.debug(f"Analysis failure details: {e.details}")
            click.echo(click.style(f"Analysis failed: {e}", fg='red'), err=True)
            sys.exit(1)
        except LyricLensError as e:
            logger.debug(f"Error details: {e.details}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def _print_analysis(analysis: StoredAnalysis, favorite: bool = False) -> None:
    """Print an analysis with its metadata header"""
    star = click.style(" [favorite]", fg='yellow') if favorite else ""
    click.echo(click.style(f"{analysis.title}", fg='green', bold=True) + f" by {analysis.artist}{star}")
    click.echo(f"   Genre: {analysis.genre or 'Unknown'}")
    click.echo(f"   Year: {analysis.year_released or 'Unknown'}")
    click.echo(f"   Analysis ID: {analysis.id}")
    click.echo("")
    click.echo(analysis.lyrics_analysis)


# Main CLI group - root command that all subcommands attach to
@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(exists=True, dir_okay=False), help='Path to config file')
@click.option('--user', '-u', default=_default_user, show_default='login name',
              help='User the searches, history and favorites belong to')
@click.pass_context
def cli(ctx, version, verbose, config, user):
    """
    Lyric-Lens - find a song, its lyrics and what it means

    Search with "Artist - Title", "Title by Artist", "Title (Artist)" or
    just a title.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"Lyric-Lens v{__version__}")
        ctx.exit()

    if config:
        reload_settings(config)

    configure_from_settings(verbose=verbose)
    if config:
        logger.info(f"Loaded config: {config}")

    ctx.obj['user'] = user
    ctx.obj['verbose'] = verbose

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('query', nargs=-1, required=True)
@click.pass_context
@handle_error
def search(ctx, query):
    """
    Search for a song and analyze it

    The analysis is stored and added to your search history.
    """
    query_text = " ".join(query)
    service = get_search_service()

    click.echo(f"Searching for: {query_text}")
    analysis = service.search(query_text, ctx.obj['user'])

    click.echo("")
    _print_analysis(analysis)


@cli.command()
@click.argument('analysis_id', type=int)
@click.pass_context
@handle_error
def show(ctx, analysis_id):
    """Show a stored analysis"""
    service = get_search_service()
    analysis = service.get_analysis(analysis_id)
    _print_analysis(analysis, favorite=service.is_favorite(ctx.obj['user'], analysis_id))


@cli.command()
@click.option('--limit', '-n', type=click.IntRange(min=1), help='Number of entries to show')
@click.option('--clear', is_flag=True, help='Delete your search history (analyses are kept)')
@click.pass_context
@handle_error
def history(ctx, limit, clear):
    """Show or clear your search history"""
    service = get_search_service()
    user = ctx.obj['user']

    if clear:
        deleted = service.clear_history(user)
        click.echo(f"Cleared {deleted} history entries")
        return

    entries = service.list_history(user, limit)
    if not entries:
        click.echo("No searches yet")
        return

    click.echo(f"Recent searches ({len(entries)}):\n")
    for entry in entries:
        analysis = entry.analysis
        song = f"{analysis.artist} - {analysis.title}" if analysis else "(analysis missing)"
        click.echo(f"   [{entry.song_analysis_id}] {entry.search_query!r} -> {song}")


# Favorites command group
@cli.group()
def favorites():
    """Manage favorite analyses"""
    pass


@favorites.command(name='list')
@click.pass_context
@handle_error
def list_favorites(ctx):
    """List your favorites"""
    entries = get_search_service().list_favorites(ctx.obj['user'])
    if not entries:
        click.echo("No favorites yet")
        return

    click.echo(f"Favorites ({len(entries)}):\n")
    for entry in entries:
        analysis = entry.analysis
        click.echo(f"   [{entry.song_analysis_id}] {analysis.artist} - {analysis.title}")


@favorites.command(name='add')
@click.argument('analysis_id', type=int)
@click.pass_context
@handle_error
def add_favorite(ctx, analysis_id):
    """Add an analysis to your favorites"""
    entry = get_search_service().add_favorite(ctx.obj['user'], analysis_id)
    click.echo(click.style(
        f"Added {entry.analysis.artist} - {entry.analysis.title} to favorites", fg='green'
    ))


@favorites.command(name='remove')
@click.argument('analysis_id', type=int)
@click.pass_context
@handle_error
def remove_favorite(ctx, analysis_id):
    """Remove an analysis from your favorites"""
    if get_search_service().remove_favorite(ctx.obj['user'], analysis_id):
        click.echo(f"Removed analysis {analysis_id} from favorites")
    else:
        click.echo(click.style(f"Analysis {analysis_id} is not in your favorites", fg='yellow'))


@cli.command()
@handle_error
def sources():
    """
    Check song sources status

    Shows which external services are configured. Unconfigured sources are
    skipped during searches.
    """
    click.echo("Song Sources Status:")

    for status in get_search_service().source_status():
        status_icon = "[OK]" if status['configured'] else "[SKIP]"
        status_text = "Configured" if status['configured'] else "Not configured"
        click.echo(f"   {status_icon} {status['name']}: {status_text}")


# Configuration commands group
@cli.group()
def config():
    """Configuration management"""
    pass


@config.command(name='show')
@handle_error
def show_config():
    """Show current configuration (secrets are masked)"""
    settings = get_settings()

    click.echo("Current Configuration:\n")
    click.echo(str(settings))

    click.echo(f"\nDatabase: {settings.get_database_path()}")
    current_log = get_current_log_file()
    click.echo(f"Log file: {current_log if current_log else 'console only'}")


@config.command(name='init')
@click.option('--path', type=click.Path(dir_okay=False), help='Where to write the file')
@handle_error
def init_config(path):
    """Write the current configuration to a YAML file (secrets excluded)"""
    settings = get_settings()
    settings.save_config(path)
    click.echo(f"Configuration written to {path or settings.get_config_directory() / 'config.yaml'}")


@config.command(name='validate')
@handle_error
def validate_config():
    """Check configuration for problems"""
    problems = get_settings().validate()

    errors = [problem for problem in problems if not problem.startswith("warning:")]
    warnings = [problem for problem in problems if problem.startswith("warning:")]

    for warning in warnings:
        click.echo(click.style(f"   • {warning}", fg='yellow'))
    for error in errors:
        click.echo(click.style(f"   • {error}", fg='red'))

    if errors:
        click.echo(f"\nFound {len(errors)} configuration errors")
        sys.exit(1)

    click.echo("\nConfiguration is valid")


# Entry point for module execution
if __name__ == '__main__':
    cli()
