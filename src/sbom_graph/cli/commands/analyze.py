"""
Analyze command for SBOM graph CLI.
"""

import sys
from pathlib import Path

import click
from rich.table import Table

from ...engine.loader import read_document_file
from ...engine.pipeline import AnalysisTask
from ...shared.exceptions import ProcessingAbortedError, SBOMGraphError
from ...shared.models import SEVERITY_ORDER, EngineConfig, SBOMAnalysis
from ..output import CLIOutputManager
from ..utils import get_output_manager_from_context, source_names_for, write_json


def run_with_progress(task: AnalysisTask, output: CLIOutputManager) -> SBOMAnalysis:
    """Drive an AnalysisTask, rendering its progress events.

    Ctrl+C cancels the task at its next checkpoint; ``task.result()`` then
    raises ProcessingAbortedError.
    """
    try:
        output.follow_progress(task.events())
    except KeyboardInterrupt:
        output.interrupt_info("Interrupted, cancelling analysis...")
        task.cancel()
    return task.result()


def severity_table(analysis: SBOMAnalysis) -> Table:
    table = Table(title="Unique vulnerabilities")
    table.add_column("Severity")
    table.add_column("Count", justify="right")
    for severity in SEVERITY_ORDER:
        table.add_row(severity.value, str(len(analysis.statistics.vulnerabilities[severity])))
    return table


def component_table(analysis: SBOMAnalysis, top: int) -> Table:
    """Components ranked by transitive findings, then blast radius."""
    ranked = sorted(
        analysis.components.values(),
        key=lambda c: (-c.transitive_count, -c.dependents_count, c.bom_ref or ""),
    )
    table = Table(title=f"Top {top} components by inherited risk")
    table.add_column("Component")
    table.add_column("Version")
    table.add_column("Inherent", justify="right")
    table.add_column("Transitive", justify="right")
    table.add_column("Blast radius", justify="right")
    for enhanced in ranked[:top]:
        table.add_row(
            enhanced.component.name,
            enhanced.component.version or "-",
            str(enhanced.inherent_count),
            str(enhanced.transitive_count),
            str(enhanced.dependents_count),
        )
    return table


def source_table(analysis: SBOMAnalysis) -> Table | None:
    stats = analysis.multi_source_stats
    if stats is None:
        return None
    table = Table(title=f"Sources (trust score {stats.trust_score}%)")
    table.add_column("Rank", justify="right")
    table.add_column("Source")
    table.add_column("Components", justify="right")
    table.add_column("Vulnerabilities", justify="right")
    table.add_column("Unique", justify="right")
    table.add_column("Metadata")
    for source in sorted(stats.sources, key=lambda s: s.rank):
        table.add_row(
            str(source.rank),
            f"{source.name} ★" if source.is_best else source.name,
            str(source.components_found),
            str(source.vulnerabilities_found),
            str(source.unique_components + source.unique_vulnerabilities),
            f"{source.metadata_score}/100 ({source.metadata_grade})",
        )
    return table


@click.command()
@click.argument(
    "sbom_paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path)
)
@click.option("--name", "-n", "names", multiple=True, help="Source name per SBOM, in order")
@click.option(
    "--output", "-o", type=click.Path(path_type=Path), help="Write the full analysis as JSON"
)
@click.option("--top", default=10, show_default=True, help="Components to list in the summary")
@click.option(
    "--batch-size",
    default=EngineConfig.batch_size,
    show_default=True,
    help="Items processed between progress checkpoints",
)
@click.pass_context
def analyze(ctx, sbom_paths, names, output, top, batch_size):
    """Analyze one or more SBOMs; several SBOMs are merged first."""
    logger = ctx.obj["logger"]
    out = get_output_manager_from_context(ctx)

    try:
        paths = list(sbom_paths)
        documents = [read_document_file(path) for path in paths]
        config = EngineConfig(batch_size=batch_size)
        task = AnalysisTask(documents, source_names_for(paths, names), config)

        analysis = run_with_progress(task, out)

        if not analysis.components:
            out.warning("No components with a usable identifier were found")
        out.debug(f"Top-level components: {', '.join(analysis.top_level_refs) or 'none'}")
        out.success(
            f"Analyzed {len(analysis.components)} components from {len(paths)} SBOM(s), "
            f"{len(analysis.top_level_refs)} top-level"
        )
        sources = source_table(analysis)
        if sources is not None:
            out.table(sources)
        out.table(severity_table(analysis))
        out.table(component_table(analysis, top))

        if output:
            write_json(analysis, output)
            out.success(f"Analysis written: {output}")

        logger.info(f"Analysis completed for {len(paths)} SBOM(s)")

    except ProcessingAbortedError:
        out.interrupt_info("Analysis aborted")
        sys.exit(130)
    except SBOMGraphError as e:
        logger.error(f"Analysis failed: {e}")
        out.error(f"Error: {e}")
        sys.exit(1)
