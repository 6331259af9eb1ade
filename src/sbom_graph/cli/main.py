"""
CLI interface for SBOM graph analysis using Click.
"""

from pathlib import Path

import click

from .. import __version__
from ..shared.logging import get_logger, setup_logging


@click.group()
@click.version_option(__version__, prog_name="sbom-graph")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Enable quiet mode")
@click.option("--log-file", type=click.Path(path_type=Path), help="Also write logs to a file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, log_file: Path | None) -> None:
    """SBOM Graph - dependency graph, vulnerability propagation and SBOM merging."""
    ctx.ensure_object(dict)

    ctx.obj["global_flags"] = {"verbose": verbose, "quiet": quiet}

    if quiet:
        log_level = "WARNING"
    elif verbose:
        log_level = "DEBUG"
    else:
        log_level = "INFO"

    setup_logging(log_level, log_file=log_file)
    ctx.obj["logger"] = get_logger()


def _register_commands() -> None:
    """Register all CLI commands. Separated for cleaner typing."""
    from .commands.analyze import analyze
    from .commands.merge import merge

    cli.add_command(analyze)
    cli.add_command(merge)


_register_commands()


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
