"""Per-document pipeline: load, extract, validate, link, render."""

import logging
import threading
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Optional, Union

from docfence.errors import BuildCancelled, IOFailure, RenderError
from docfence.extractors import FenceExtractor
from docfence.linkers import CrossReferenceLinker
from docfence.models import (
    CodeFragment,
    Diagnostic,
    DiagnosticKind,
    Document,
    Image,
    Link,
    LinkTarget,
    SourceFile,
    Stage,
    ValidationResult,
    ValidationStatus,
)
from docfence.protocols import PageRenderer
from docfence.renderers import HtmlRenderer, page_path
from docfence.storage.manifest import ManifestEntry
from docfence.utils.binary import decode_document
from docfence.validators import SyntaxValidator

logger = logging.getLogger(__name__)


@dataclass
class DocumentReport:
    """Everything one document run produced.

    stage is the last stage reached; diagnostics accumulate across stages.
    """

    path: str
    stage: Stage = Stage.LOADED
    document: Optional[Document] = None
    validations: dict[CodeFragment, ValidationResult] = field(default_factory=dict)
    links: dict[Union[Link, Image], LinkTarget] = field(default_factory=dict)
    page: Optional[str] = None
    output: Optional[str] = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def count(self, status: ValidationStatus) -> int:
        return sum(1 for r in self.validations.values() if r.status is status)

    @property
    def dangling_links(self) -> int:
        return sum(1 for t in self.links.values() if t.is_dangling)

    def to_entry(self) -> ManifestEntry:
        return ManifestEntry(
            path=self.path,
            stage=self.stage,
            output=self.output,
            fragments_validated=self.count(ValidationStatus.OK),
            fragments_skipped=self.count(ValidationStatus.SKIPPED),
            fragments_failed=self.count(ValidationStatus.FAILED),
            dangling_links=self.dangling_links,
            malformed_fragments=sum(
                1 for d in self.diagnostics if d.kind is DiagnosticKind.MALFORMED_FRAGMENT
            ),
            diagnostics=list(self.diagnostics),
        )


class DocumentPipeline:
    """Runs one document through Loaded -> Extracted -> Validated -> Linked -> Rendered.

    The run is strictly linear with no retries. Each stage may attach
    non-fatal diagnostics; an IOFailure or RenderError ends the run in the
    FAILED stage, and a set cancel event ends it in CANCELLED with every
    partial result discarded.
    """

    def __init__(
        self,
        linker: CrossReferenceLinker,
        extractor: Optional[FenceExtractor] = None,
        validator: Optional[SyntaxValidator] = None,
        renderer: Optional[PageRenderer] = None,
        fragment_executor: Optional[Executor] = None,
    ):
        self.linker = linker
        self.extractor = extractor or FenceExtractor()
        self.validator = validator or SyntaxValidator()
        self.renderer = renderer or HtmlRenderer()
        self.fragment_executor = fragment_executor

    def run(
        self, source: SourceFile, cancel: Optional[threading.Event] = None
    ) -> DocumentReport:
        """Process one document. Never raises for per-document failures."""
        report = DocumentReport(path=source.path)
        try:
            self._run(source, report, cancel)
        except IOFailure as e:
            report.stage = Stage.FAILED
            report.diagnostics.append(
                Diagnostic(DiagnosticKind.IO_FAILURE, e.reason, source.path, fatal=True)
            )
        except RenderError as e:
            report.stage = Stage.FAILED
            report.page = None
            report.diagnostics.append(
                Diagnostic(DiagnosticKind.RENDER_ERROR, str(e), source.path, fatal=True)
            )
        except BuildCancelled:
            logger.debug(f"{source.path}: cancelled at {report.stage.value}")
            return DocumentReport(path=source.path, stage=Stage.CANCELLED)
        return report

    def _run(
        self,
        source: SourceFile,
        report: DocumentReport,
        cancel: Optional[threading.Event],
    ) -> None:
        def checkpoint(stage: Stage) -> None:
            if cancel is not None and cancel.is_set():
                raise BuildCancelled(source.path)
            report.stage = stage
            logger.debug(f"{source.path}: {stage.value}")

        if source.content is None:
            raise IOFailure(source.path, source.error or "unreadable")
        text = decode_document(source.path, source.content)
        checkpoint(Stage.LOADED)

        extraction = self.extractor.extract(text, source.path)
        document = extraction.document
        report.document = document
        report.diagnostics.extend(extraction.diagnostics)
        checkpoint(Stage.EXTRACTED)

        report.validations = self.validator.validate_all(
            document.fragments, self.fragment_executor
        )
        for fragment, result in report.validations.items():
            if result.status is ValidationStatus.FAILED:
                line = fragment.span.start_line + (result.line or 0)
                report.diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.PARSE_ERROR,
                        f"{fragment.language.value}: {result.reason}",
                        source.path,
                        line,
                    )
                )
        checkpoint(Stage.VALIDATED)

        report.links = self.linker.link(document)
        for block, target in report.links.items():
            if target.is_dangling:
                report.diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.DANGLING_LINK,
                        f"{target.kind.value} reference '{target.reference}' does not resolve",
                        source.path,
                        block.span.start_line,
                    )
                )
        checkpoint(Stage.LINKED)

        report.page = self.renderer.render(document, report.validations, report.links)
        report.output = page_path(source.path, self.renderer.page_suffix)
        checkpoint(Stage.RENDERED)
