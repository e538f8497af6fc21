"""Build orchestration: fan documents out and collect the manifest."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional

from docfence.config import BuildConfig
from docfence.errors import IOFailure
from docfence.ingesters import get_ingester
from docfence.linkers import CrossReferenceLinker
from docfence.models import (
    Diagnostic,
    DiagnosticKind,
    LinkKind,
    LinkStatus,
    SourceFile,
    Stage,
    ValidationStatus,
)
from docfence.pipeline import DocumentPipeline, DocumentReport
from docfence.protocols import PageRenderer
from docfence.storage import Manifest, OutputTree

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[DocumentReport], None]
DiscoverCallback = Callable[[int, int], None]


class Builder:
    """Builds every document of an input tree independently.

    Documents share nothing mutable: each run sees only immutable
    snapshots of the build's document and asset paths.
    """

    def __init__(
        self,
        config: BuildConfig,
        renderer: Optional[PageRenderer] = None,
        progress: Optional[ProgressCallback] = None,
        on_discover: Optional[DiscoverCallback] = None,
    ):
        self.config = config
        self.renderer = renderer
        self.progress = progress
        self.on_discover = on_discover

    def discover(self) -> tuple[list[SourceFile], dict[str, SourceFile]]:
        """Ingest the input tree into documents and assets.

        Raises:
            IOFailure: if no ingester can handle the input
        """
        source = self.config.input_dir
        ingester = get_ingester(source)
        if ingester is None:
            raise IOFailure(str(source), "not a folder or .zip file")

        documents: list[SourceFile] = []
        assets: dict[str, SourceFile] = {}
        for item in ingester.ingest(source):
            if item.is_asset:
                assets[item.path] = item
            else:
                documents.append(item)
        logger.debug(f"Ingested {len(documents)} documents, {len(assets)} assets ({ingester.source_type})")
        return documents, assets

    def build(self, cancel: Optional[threading.Event] = None) -> Manifest:
        """Run the full build.

        Args:
            cancel: Optional event; once set, documents still in flight are
                    cancelled and none of their output is written

        Returns:
            The manifest, also written to the output root when configured
        """
        documents, assets = self.discover()
        if self.on_discover is not None:
            self.on_discover(len(documents), len(assets))
        output = OutputTree(self.config.output_dir) if self.config.writes_output else None
        if output is not None:
            output.initialize()

        linker = CrossReferenceLinker(
            documents={doc.path: None for doc in documents},
            assets=frozenset(assets),
        )
        manifest = Manifest(source=str(self.config.input_dir))
        referenced: set[str] = set()

        with ThreadPoolExecutor(
            max_workers=self.config.jobs, thread_name_prefix="docfence-fragment"
        ) as fragment_pool, ThreadPoolExecutor(
            max_workers=self.config.jobs, thread_name_prefix="docfence-document"
        ) as document_pool:
            pipeline = DocumentPipeline(
                linker,
                renderer=self.renderer,
                fragment_executor=fragment_pool,
            )
            futures = [
                document_pool.submit(self._process, pipeline, doc, output, cancel)
                for doc in documents
            ]
            for future in as_completed(futures):
                report = future.result()
                referenced.update(self._referenced_assets(report))
                manifest.add(report.to_entry())
                self._log_report(report)
                if self.progress is not None:
                    self.progress(report)

        if output is not None:
            if self.config.copy_assets:
                for path in sorted(referenced):
                    try:
                        output.write_asset(path, assets[path].content)
                    except (OSError, ValueError) as e:
                        logger.warning(f"  Cannot copy asset {path}: {e}")
                        continue
                    manifest.assets.append(path)
            output.write_manifest(manifest)

        totals = manifest.totals()
        logger.info(
            f"Built {totals['documents']} documents: "
            f"{totals['fragments_validated']} fragments ok, "
            f"{totals['fragments_skipped']} skipped, "
            f"{totals['fragments_failed']} failed, "
            f"{totals['dangling_links']} dangling links"
        )
        return manifest

    def _process(
        self,
        pipeline: DocumentPipeline,
        source: SourceFile,
        output: Optional[OutputTree],
        cancel: Optional[threading.Event],
    ) -> DocumentReport:
        report = pipeline.run(source, cancel)
        if report.stage is not Stage.RENDERED:
            report.output = None
            return report
        if output is None:
            report.output = None
            return report
        if cancel is not None and cancel.is_set():
            return DocumentReport(path=source.path, stage=Stage.CANCELLED)

        try:
            output.write_page(report.output, report.page)
        except (OSError, ValueError) as e:
            report.stage = Stage.FAILED
            report.output = None
            report.diagnostics.append(
                Diagnostic(DiagnosticKind.IO_FAILURE, f"cannot write page: {e}", source.path, fatal=True)
            )
        return report

    @staticmethod
    def _referenced_assets(report: DocumentReport) -> set[str]:
        if report.stage is not Stage.RENDERED:
            return set()
        paths = set()
        for target in report.links.values():
            if target.kind is LinkKind.ASSET and target.status is LinkStatus.RESOLVED:
                path_part = target.reference.partition("#")[0]
                normalized = CrossReferenceLinker.normalize(path_part, report.path)
                if normalized is not None:
                    paths.add(normalized)
        return paths

    @staticmethod
    def _log_report(report: DocumentReport) -> None:
        for diagnostic in report.diagnostics:
            logger.warning(f"  {diagnostic}")
        if report.stage is Stage.RENDERED:
            logger.info(
                f"  {report.path}: {len(report.validations)} fragments, "
                f"{report.count(ValidationStatus.FAILED)} failed, {report.dangling_links} dangling links"
            )
        else:
            logger.info(f"  {report.path}: {report.stage.value}")
