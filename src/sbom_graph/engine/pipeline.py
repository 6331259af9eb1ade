"""
End-to-end analysis pipeline and its background task wrapper.

``analyze_documents`` is a plain synchronous function. ``AnalysisTask`` runs
it on a worker thread and turns checkpoints into channel events, so callers
choose between calling the engine directly (tests, scripts) and consuming
progress from another thread (CLI, services) without the engine changing.
"""

import logging
from collections.abc import Iterator, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from ..shared.cloning import deep_to_plain
from ..shared.exceptions import (
    ProcessingAbortedError,
    ProcessingError,
    SBOMGraphError,
    create_error_context,
    wrap_external_error,
)
from ..shared.logging import log_phase
from ..shared.models import EngineConfig, SBOMAnalysis
from ..shared.progress import (
    AbortedEvent,
    CancellationToken,
    ChannelEvent,
    Checkpoint,
    CompleteEvent,
    ErrorEvent,
    ProgressChannel,
)
from .blast_radius import calculate_blast_radius, calculate_dependents
from .graph import build_graph
from .loader import load_document
from .merger import merge_documents
from .propagation import VulnerabilityPropagator
from .vulnerabilities import build_vulnerability_index, document_statistics

logger = logging.getLogger(__name__)


def analyze_documents(
    documents: Sequence[Mapping[str, Any]],
    source_names: Sequence[str] | None = None,
    config: EngineConfig | None = None,
    checkpoint: Checkpoint | None = None,
) -> SBOMAnalysis:
    """Merge (when several), load and analyze SBOM documents.

    Args:
        documents: Raw CycloneDX documents
        source_names: Display names for merge statistics
        config: Engine configuration
        checkpoint: Progress/cancellation hook (a silent one when omitted)

    Returns:
        Complete analysis; nothing is returned for an aborted or failed pass

    Raises:
        ProcessingAbortedError: If cancelled at a checkpoint
        SBOMGraphError: On any other failure
    """
    config = config or EngineConfig()
    checkpoint = checkpoint or Checkpoint(interval=config.batch_size)
    try:
        return _run_pipeline(documents, source_names, config, checkpoint)
    except SBOMGraphError:
        raise
    except Exception as e:
        raise wrap_external_error(
            e, create_error_context(documents=len(documents))
        ) from e


def _run_pipeline(
    documents: Sequence[Mapping[str, Any]],
    source_names: Sequence[str] | None,
    config: EngineConfig,
    checkpoint: Checkpoint,
) -> SBOMAnalysis:
    checkpoint.step(0, "Starting analysis...")

    checkpoint.step(5, f"Merging {len(documents)} SBOMs...")
    with log_phase(logger, "Merge and load", logging.DEBUG):
        merged = merge_documents(documents, source_names, config)
        document = load_document(merged.document)

    checkpoint.step(10, "Analyzing licenses...")
    statistics = document_statistics(document.components, document.vulnerabilities)

    checkpoint.step(15, "Indexing vulnerabilities...")
    vuln_index = build_vulnerability_index(document.vulnerabilities, checkpoint, (15, 18))

    checkpoint.step(18, "Indexing components...")
    graph = build_graph(document, checkpoint, (18, 25))
    logger.info(
        f"Indexed {len(graph)} components, {len(document.vulnerabilities)} vulnerabilities "
        f"({graph.skipped_components} components skipped)"
    )

    checkpoint.step(25, "Identifying dependents...")
    dependents = calculate_dependents(graph.forward)
    with log_phase(logger, "Blast radius"):
        blast_radius = calculate_blast_radius(dependents, checkpoint, (25, 50))

    checkpoint.step(50, "Propagating vulnerabilities...")
    with log_phase(logger, "Propagation"):
        components = VulnerabilityPropagator(config.propagation_batch_size).propagate(
            graph,
            document.vulnerabilities,
            vuln_index=vuln_index,
            blast_radius=blast_radius,
            checkpoint=checkpoint,
            span=(50, 99),
        )

    checkpoint.step(100, "Ready")
    return SBOMAnalysis(
        document=document,
        statistics=statistics,
        components=components,
        dependency_graph=graph.forward,
        dependents_graph=dependents,
        blast_radius=blast_radius,
        top_level_refs=graph.top_level_refs,
        multi_source_stats=merged.stats,
    )


class AnalysisTask:
    """Runs ``analyze_documents`` on a worker thread.

    Progress arrives on a bounded channel ending with exactly one
    ``CompleteEvent``, ``ErrorEvent`` or ``AbortedEvent``. The result becomes
    visible only once the pass has fully completed.
    """

    def __init__(
        self,
        documents: Sequence[Mapping[str, Any]],
        source_names: Sequence[str] | None = None,
        config: EngineConfig | None = None,
    ):
        self.documents = list(documents)
        self.source_names = list(source_names) if source_names else None
        self.config = config or EngineConfig()
        self.token = CancellationToken()
        self.channel = ProgressChannel(self.config.progress_queue_size)
        self._future: Future[SBOMAnalysis] | None = None

    def start(self) -> "AnalysisTask":
        if self._future is not None:
            return self
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sbom-analysis")
        self._future = executor.submit(self._run)
        executor.shutdown(wait=False)
        return self

    def _run(self) -> SBOMAnalysis:
        checkpoint = Checkpoint(self.channel, self.token, self.config.batch_size)
        try:
            analysis = analyze_documents(
                self.documents, self.source_names, self.config, checkpoint
            )
            payload = deep_to_plain(analysis) if self.config.plain_results else analysis
        except ProcessingAbortedError as e:
            logger.info("Analysis aborted")
            self.channel.close(AbortedEvent(e.message))
            raise
        except SBOMGraphError as e:
            logger.error(f"Analysis failed: {e}")
            self.channel.close(ErrorEvent(str(e)))
            raise
        except Exception as e:
            error = wrap_external_error(e, create_error_context(stage="results"))
            logger.exception(f"Analysis failed: {error}")
            self.channel.close(ErrorEvent(str(error)))
            raise error from e

        self.channel.close(CompleteEvent(payload))
        return analysis

    def cancel(self) -> None:
        """Request cooperative cancellation at the next checkpoint."""
        self.token.cancel()

    def events(self) -> Iterator[ChannelEvent]:
        """Yield events until the terminal one, starting the task if needed."""
        self.start()
        yield from self.channel

    def result(self, timeout: float | None = None) -> SBOMAnalysis:
        """Wait for the analysis.

        Raises:
            ProcessingAbortedError: If the task was cancelled
            SBOMGraphError: If the pass failed
            TimeoutError: If ``timeout`` elapses first
        """
        future = self.start()._future
        if future is None:
            raise ProcessingError("Analysis task did not start")
        return future.result(timeout)

    @property
    def done(self) -> bool:
        return self._future is not None and self._future.done()
