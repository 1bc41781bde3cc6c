"""CLI entry point for story-linter.

Provides the ``validate`` command, which lints a Markdown corpus and
prints the findings in the chosen format.
"""

import asyncio
import sys
from pathlib import Path

import click
from loguru import logger

from story_linter import __version__
from story_linter.errors import ConfigError, DiscoveryError
from story_linter.formatters import FORMATS, get_formatter
from story_linter.services.events import Event, EventBus, EventType

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Story Linter.

    Finds cross-file inconsistencies in long-form prose written as a
    tree of Markdown files: broken links, orphaned documents and
    drifting character names.
    """
    pass


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(FORMATS),
    default="text",
    help="Output format",
)
@click.option("--no-color", is_flag=True, help="Disable coloured output")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@click.option("--verbose", "-v", is_flag=True, help="Log run progress")
def validate(
    paths: tuple[Path, ...],
    config: Path | None,
    output_format: str,
    no_color: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Validate Markdown files.

    PATHS replace the configured include globs; a directory stands
    for every Markdown file beneath it. Exits 0 when no error-severity
    finding remains, 1 otherwise and 2 on configuration or discovery
    errors.
    """
    from story_linter.config.loader import default_config, find_config, load_config
    from story_linter.plugins import get_default_plugins
    from story_linter.services.engine import ValidationEngine
    from story_linter.utils.logging import configure_logging, verbosity_level
    from story_linter.utils.paths import canonical_path

    if quiet and verbose:
        raise click.UsageError("--quiet and --verbose cannot be combined")

    try:
        if config is not None:
            loaded = load_config(config)
        else:
            found = find_config(Path.cwd())
            loaded = load_config(found) if found else default_config(Path.cwd())

        logging_config = loaded.logging
        if quiet or verbose:
            logging_config = logging_config.model_copy(
                update={"level": verbosity_level(quiet=quiet, verbose=verbose)}
            )
        configure_logging(logging_config, colorize=not no_color)

        engine_config = loaded.engine
        if paths:
            include = _include_patterns(paths, engine_config.root_dir)
            engine_config = engine_config.model_copy(update={"include": include})

        events = EventBus()
        if verbose:
            events.subscribe(_log_progress)

        engine = ValidationEngine(
            engine_config,
            get_default_plugins(),
            events=events,
            diagnostics=loaded.diagnostics,
        )
        result = asyncio.run(engine.run())
    except (ConfigError, DiscoveryError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_USAGE)

    formatter = get_formatter(output_format, color=not no_color)
    click.echo(formatter.format(result, canonical_path(engine_config.root_dir)))
    sys.exit(EXIT_OK if result.passed else EXIT_FINDINGS)


def _include_patterns(paths: tuple[Path, ...], root_dir: Path) -> list[str]:
    """Turn command-line paths into include globs relative to ``root_dir``."""
    patterns: list[str] = []
    for path in paths:
        resolved = path.expanduser().resolve()
        try:
            relative = resolved.relative_to(root_dir)
        except ValueError:
            raise ConfigError(f"Path is outside the project root {root_dir}: {path}") from None
        if resolved.is_dir():
            patterns.append((relative / "**" / "*.md").as_posix())
        else:
            patterns.append(relative.as_posix())
    return patterns


def _log_progress(event: Event) -> None:
    """Verbose-mode listener reporting run progress through the logger."""
    data = event.data
    if event.type == EventType.RUN_START and data.get("file_count") is not None:
        logger.info("Validating {} files", data["file_count"])
    elif event.type == EventType.FILE_PARSE:
        logger.info("Parsing {}", data["file"])
    elif event.type == EventType.VALIDATOR_START:
        logger.info("Running validator {}", data["validator"])
    elif event.type == EventType.VALIDATOR_DONE:
        logger.info("Validator {} reported {} findings", data["validator"], data["finding_count"])
    elif event.type == EventType.RUN_END:
        logger.info("Run finished (passed={})", data["passed"])


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
