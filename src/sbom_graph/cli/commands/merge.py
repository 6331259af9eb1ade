"""
Merge command for SBOM graph CLI.
"""

import sys
from pathlib import Path

import click
from rich.table import Table

from ...engine.loader import read_document_file
from ...engine.merger import merge_documents
from ...shared.exceptions import SBOMGraphError
from ...shared.models import MultiSourceStats
from ..utils import get_output_manager_from_context, source_names_for, write_json


def gap_table(stats: MultiSourceStats) -> Table:
    table = Table(title="Findings reported by a single source")
    table.add_column("Source")
    table.add_column("Unique components", justify="right")
    table.add_column("Unique vulnerabilities", justify="right")
    for gap in stats.gaps:
        table.add_row(
            gap.source_name,
            str(len(gap.unique_components)),
            str(len(gap.unique_vulnerabilities)),
        )
    return table


@click.command()
@click.argument(
    "sbom_paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path)
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(path_type=Path),
    help="Path for the merged SBOM",
)
@click.option("--name", "-n", "names", multiple=True, help="Source name per SBOM, in order")
@click.option(
    "--stats", "stats_path", type=click.Path(path_type=Path), help="Write merge statistics as JSON"
)
@click.pass_context
def merge(ctx, sbom_paths, output, names, stats_path):
    """Merge SBOMs from several scanners into one canonical SBOM."""
    logger = ctx.obj["logger"]
    out = get_output_manager_from_context(ctx)

    try:
        paths = list(sbom_paths)
        documents = [read_document_file(path) for path in paths]
        result = merge_documents(documents, source_names_for(paths, names))

        write_json(result.document, output)
        out.success(f"Merged SBOM written: {output}")

        if result.stats is None:
            out.info("Single SBOM given, written unchanged")
        else:
            overlap = result.stats.overlap
            out.success(
                f"{overlap.components.total} components ({overlap.components.shared} shared), "
                f"{overlap.vulnerabilities.total} vulnerabilities "
                f"({overlap.vulnerabilities.shared} shared)"
            )
            out.table(gap_table(result.stats))
            if stats_path:
                write_json(result.stats, stats_path)
                out.success(f"Merge statistics written: {stats_path}")

        logger.info(f"Merged {len(paths)} SBOM(s) into {output}")

    except SBOMGraphError as e:
        logger.error(f"Merge failed: {e}")
        out.error(f"Error: {e}")
        sys.exit(1)
