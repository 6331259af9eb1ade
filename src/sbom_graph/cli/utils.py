"""
Utilities shared by CLI commands.
"""

import json
from pathlib import Path
from typing import Any

import click

from ..shared.cloning import deep_to_plain
from ..shared.exceptions import DocumentWriteError, create_error_context
from .output import CLIOutputManager, create_output_manager


def get_cli_flags(ctx: click.Context) -> dict[str, Any]:
    """Extract CLI flags from Click context, traversing parent contexts."""
    flags: dict[str, Any] = {}

    # Parents first so child params override
    chain = []
    current_ctx: click.Context | None = ctx
    while current_ctx:
        chain.append(current_ctx)
        current_ctx = current_ctx.parent
    for current in reversed(chain):
        if current.params:
            flags.update(current.params)

    return flags


def get_output_manager_from_context(ctx: click.Context) -> CLIOutputManager:
    """Create output manager from Click context flags."""
    flags = get_cli_flags(ctx)
    return create_output_manager(
        quiet=flags.get("quiet", False), verbose=flags.get("verbose", False)
    )


def source_names_for(paths: list[Path], names: tuple[str, ...]) -> list[str]:
    """Explicit --name values first, then file stems for the remaining paths."""
    return [names[i] if i < len(names) else path.stem for i, path in enumerate(paths)]


def write_json(data: Any, path: Path) -> None:
    """Write data as indented JSON, converting dataclasses and enums first."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(deep_to_plain(data), f, indent=2, default=str)
    except OSError as e:
        raise DocumentWriteError(
            f"Could not write {path}: {e}", create_error_context(path=str(path))
        ) from e
