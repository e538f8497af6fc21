import threading

import pytest

from docfence.linkers import CrossReferenceLinker
from docfence.models import DiagnosticKind, SourceFile, Stage, ValidationStatus
from docfence.pipeline import DocumentPipeline

from tests.conftest import BROKEN_CHAPTER, CLEAN_CHAPTER


@pytest.fixture
def pipeline():
    linker = CrossReferenceLinker(
        documents={"one.md": None, "two.md": None},
        assets=frozenset({"img/flow.png"}),
    )
    return DocumentPipeline(linker)


def source(path, text):
    return SourceFile(path=path, content=text.encode("utf-8"))


def test_clean_document_reaches_rendered(pipeline):
    report = pipeline.run(source("one.md", CLEAN_CHAPTER))

    assert report.stage is Stage.RENDERED
    assert report.diagnostics == []
    assert report.output == "one.html"
    assert report.page is not None
    assert len(report.validations) == len(report.document.fragments) == 3
    assert report.count(ValidationStatus.OK) == 2
    assert report.count(ValidationStatus.SKIPPED) == 1


def test_warnings_are_recorded_without_stopping(pipeline):
    report = pipeline.run(source("two.md", BROKEN_CHAPTER))

    assert report.stage is Stage.RENDERED
    kinds = sorted(d.kind.value for d in report.diagnostics)
    assert kinds == ["DanglingLink", "ParseError"]
    parse_error = next(d for d in report.diagnostics if d.kind is DiagnosticKind.PARSE_ERROR)
    assert parse_error.line == 6
    assert report.dangling_links == 1

    entry = report.to_entry()
    assert entry.fragments_failed == 1
    assert entry.fragments_validated == 0
    assert entry.dangling_links == 1
    assert entry.warning_count == 2


def test_malformed_fragment_still_renders(pipeline):
    report = pipeline.run(source("one.md", "# One\n\n```python\nx = 1\n"))

    assert report.stage is Stage.RENDERED
    assert [d.kind for d in report.diagnostics] == [DiagnosticKind.MALFORMED_FRAGMENT]
    assert report.to_entry().malformed_fragments == 1
    assert report.validations == {}


def test_unreadable_document_fails_alone(pipeline):
    report = pipeline.run(SourceFile(path="one.md", error="Permission denied"))

    assert report.stage is Stage.FAILED
    assert report.page is None
    assert len(report.diagnostics) == 1
    assert report.diagnostics[0].kind is DiagnosticKind.IO_FAILURE
    assert report.diagnostics[0].fatal
    assert "Permission denied" in report.diagnostics[0].message


@pytest.mark.parametrize("content", [b"# T\n\xff\xfe\xfa\n", b"\x00\x01\x02binary"])
def test_undecodable_document_is_io_failure(pipeline, content):
    report = pipeline.run(SourceFile(path="one.md", content=content))
    assert report.stage is Stage.FAILED
    assert report.diagnostics[0].kind is DiagnosticKind.IO_FAILURE


def test_cancelled_run_discards_partial_results(pipeline):
    cancel = threading.Event()
    cancel.set()
    report = pipeline.run(source("one.md", CLEAN_CHAPTER), cancel)

    assert report.stage is Stage.CANCELLED
    assert report.page is None
    assert report.document is None
    assert report.validations == {}
    assert report.diagnostics == []


def test_heading_link_is_checked(pipeline):
    report = pipeline.run(source("one.md", "## See [guide](missing.md)\n"))

    assert report.stage is Stage.RENDERED
    assert [d.kind for d in report.diagnostics] == [DiagnosticKind.DANGLING_LINK]
    assert report.dangling_links == 1


def test_fragment_in_list_item_is_validated(pipeline):
    text = "1. Run the tests:\n\n    ```python\n    def broken(:\n    ```\n"
    report = pipeline.run(source("one.md", text))

    assert report.count(ValidationStatus.FAILED) == 1
    assert [d.kind for d in report.diagnostics] == [DiagnosticKind.PARSE_ERROR]
