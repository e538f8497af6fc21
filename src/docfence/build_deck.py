"""Build Deck - a TUI for running docfence builds interactively."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.message import Message
from textual.widgets import (
    Button,
    DataTable,
    DirectoryTree,
    Footer,
    Header,
    Input,
    Label,
    Log,
    ProgressBar,
    Rule,
    Static,
)

from docfence.builder import Builder
from docfence.config import BuildConfig
from docfence.errors import IOFailure
from docfence.models import Stage, ValidationStatus
from docfence.pipeline import DocumentReport


@dataclass
class BuildStats:
    """Statistics tracked during a build."""

    documents_discovered: int = 0
    documents_processed: int = 0
    assets: int = 0
    fragments_ok: int = 0
    fragments_skipped: int = 0
    fragments_failed: int = 0
    dangling_links: int = 0
    failed_documents: int = 0
    current_document: str = ""
    status: str = "idle"
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def elapsed(self) -> str:
        if not self.start_time:
            return "00:00"
        end = self.end_time or datetime.now()
        minutes, seconds = divmod(int((end - self.start_time).total_seconds()), 60)
        return f"{minutes:02d}:{seconds:02d}"

    def record(self, report: DocumentReport) -> None:
        self.documents_processed += 1
        self.current_document = report.path
        self.fragments_ok += report.count(ValidationStatus.OK)
        self.fragments_skipped += report.count(ValidationStatus.SKIPPED)
        self.fragments_failed += report.count(ValidationStatus.FAILED)
        self.dangling_links += report.dangling_links
        if report.stage in (Stage.FAILED, Stage.CANCELLED):
            self.failed_documents += 1

    def copy(self) -> BuildStats:
        return replace(self)


class StatsPanel(Static):
    """Real-time statistics display."""

    def compose(self) -> ComposeResult:
        yield Static(id="stats-content")

    def on_mount(self) -> None:
        self.update_display(BuildStats())

    def update_display(self, stats: BuildStats) -> None:
        content = self.query_one("#stats-content", Static)
        status_color = {
            "idle": "dim",
            "loading": "yellow",
            "running": "green",
            "cancelling": "yellow",
            "complete": "cyan",
            "warnings": "magenta",
            "error": "red",
        }.get(stats.status, "white")

        content.update(f"""[b]STATUS[/b]  [{status_color}]{stats.status.upper()}[/]

[b]TIME[/b]    {stats.elapsed}

[b]DOCUMENTS[/b]
  Discovered  [cyan]{stats.documents_discovered:,}[/]
  Processed   [green]{stats.documents_processed:,}[/]
  Failed      [red]{stats.failed_documents:,}[/]
  Assets      [dim]{stats.assets:,}[/]

[b]FRAGMENTS[/b]
  Ok          [green]{stats.fragments_ok:,}[/]
  Skipped     [dim]{stats.fragments_skipped:,}[/]
  Failed      [red]{stats.fragments_failed:,}[/]

[b]LINKS[/b]
  Dangling    [yellow]{stats.dangling_links:,}[/]""")


class CurrentDocumentDisplay(Static):
    """Display for the most recently finished document."""

    def compose(self) -> ComposeResult:
        yield Static("[dim]Waiting for input...[/]", id="current-document-content")

    def update_document(self, path: str) -> None:
        content = self.query_one("#current-document-content", Static)
        if path:
            display = path if len(path) < 50 else "..." + path[-47:]
            content.update(f"[bold cyan]>[/] {display}")
        else:
            content.update("[dim]Waiting for input...[/]")


class DocumentLogTable(DataTable):
    """Live per-document results."""

    def on_mount(self) -> None:
        self.add_columns("Document", "Stage", "Fragments", "Failed", "Dangling")
        self.cursor_type = "row"

    def add_report(self, report: DocumentReport) -> None:
        stage_color = {
            Stage.RENDERED: "green",
            Stage.LINKED: "green",
            Stage.FAILED: "red",
            Stage.CANCELLED: "yellow",
        }.get(report.stage, "white")
        failed = report.count(ValidationStatus.FAILED)
        failed_str = f"[red]{failed}[/]" if failed else "[dim]0[/]"
        dangling_str = f"[yellow]{report.dangling_links}[/]" if report.dangling_links else "[dim]0[/]"
        name = report.path if len(report.path) <= 40 else "..." + report.path[-37:]
        self.add_row(
            name,
            f"[{stage_color}]{report.stage.value}[/]",
            str(len(report.validations)),
            failed_str,
            dangling_str,
        )
        self.scroll_end()


class BuildDeck(App):
    """The docfence Build Deck."""

    # Messages for thread-safe communication
    class StatsUpdated(Message):
        def __init__(self, stats: BuildStats) -> None:
            self.stats = stats
            super().__init__()

    class LogMessage(Message):
        def __init__(self, message: str) -> None:
            self.message = message
            super().__init__()

    class DocumentFinished(Message):
        def __init__(self, report: DocumentReport) -> None:
            self.report = report
            super().__init__()

    CSS = """
    #main-container {
        layout: horizontal;
        height: 100%;
    }

    #left-panel {
        width: 36;
        border-right: solid $primary-darken-2;
        padding: 1;
    }

    #center-panel {
        width: 1fr;
        padding: 1;
    }

    #right-panel {
        width: 30;
        border-left: solid $primary-darken-2;
        padding: 1;
    }

    StatsPanel {
        height: auto;
        padding: 1;
        border: round $primary;
        margin-bottom: 1;
    }

    CurrentDocumentDisplay {
        height: 3;
        padding: 0 1;
        border: round $secondary;
        margin-bottom: 1;
    }

    #action-buttons {
        layout: horizontal;
        height: 3;
        margin-bottom: 1;
    }

    #action-buttons Button {
        margin-right: 1;
    }

    DocumentLogTable {
        height: 1fr;
        border: round $primary-darken-1;
    }

    #progress-bar {
        width: 100%;
        margin-bottom: 1;
    }

    #log-panel {
        height: 12;
        border: round $primary-darken-2;
    }

    .section-title {
        text-style: bold;
        margin-bottom: 1;
    }

    DirectoryTree {
        height: 100%;
        border: round $primary-darken-1;
    }
    """

    BINDINGS = [
        Binding("b", "build", "Build", show=True),
        Binding("x", "cancel", "Cancel", show=True),
        Binding("c", "clear", "Clear", show=True),
        Binding("q", "quit", "Quit", show=True),
    ]

    TITLE = "docfence Build Deck"
    SUB_TITLE = "Chapter Build Console"

    def __init__(self, input_dir: str | None = None, output_dir: str | None = None):
        super().__init__()
        self._initial_input = input_dir or ""
        self._initial_output = output_dir or "site"
        self._cancel = threading.Event()

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Container(id="main-container"):
            with Vertical(id="left-panel"):
                yield Label("BUILD CONTROL", classes="section-title")
                yield StatsPanel()
                yield CurrentDocumentDisplay()
                yield Rule()
                yield Label("Input")
                yield Input(
                    value=self._initial_input,
                    placeholder="Folder or .zip of chapters...",
                    id="input-path",
                )
                yield Label("Output")
                yield Input(value=self._initial_output, id="output-path")
                with Horizontal(id="action-buttons"):
                    yield Button("BUILD", id="build-btn", variant="success")
                    yield Button("Cancel", id="cancel-btn", variant="error")
                    yield Button("Clear", id="clear-btn", variant="warning")

            with Vertical(id="center-panel"):
                yield Label("DOCUMENTS", classes="section-title")
                yield ProgressBar(id="progress-bar", show_eta=False)
                yield DocumentLogTable(id="document-log")
                yield Rule()
                yield Label("BUILD LOG", classes="section-title")
                yield Log(id="log-panel", highlight=True, auto_scroll=True)

            with Vertical(id="right-panel"):
                yield Label("FILE BROWSER", classes="section-title")
                yield DirectoryTree(Path.cwd(), id="dir-tree")

        yield Footer()

    def on_mount(self) -> None:
        self._log("Build Deck initialized")
        self._log("Choose an input folder and press BUILD")

    def _log(self, message: str) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.query_one("#log-panel", Log).write_line(f"[{timestamp}] {message}")

    def on_build_deck_stats_updated(self, event: StatsUpdated) -> None:
        """Handle stats update from worker thread."""
        stats = event.stats
        self.query_one(StatsPanel).update_display(stats)
        self.query_one(CurrentDocumentDisplay).update_document(stats.current_document)
        if stats.documents_discovered > 0:
            self.query_one("#progress-bar", ProgressBar).update(
                total=stats.documents_discovered, progress=stats.documents_processed
            )

    def on_build_deck_log_message(self, event: LogMessage) -> None:
        self._log(event.message)

    def on_build_deck_document_finished(self, event: DocumentFinished) -> None:
        self.query_one("#document-log", DocumentLogTable).add_report(event.report)

    def on_directory_tree_directory_selected(
        self, event: DirectoryTree.DirectorySelected
    ) -> None:
        self.query_one("#input-path", Input).value = str(event.path)

    def on_directory_tree_file_selected(self, event: DirectoryTree.FileSelected) -> None:
        if event.path.suffix.lower() == ".zip":
            self.query_one("#input-path", Input).value = str(event.path)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "build-btn":
            self.action_build()
        elif event.button.id == "cancel-btn":
            self.action_cancel()
        elif event.button.id == "clear-btn":
            self.action_clear()

    def action_clear(self) -> None:
        """Clear the log and reset stats."""
        self.query_one(StatsPanel).update_display(BuildStats())
        self.query_one(CurrentDocumentDisplay).update_document("")
        self.query_one("#document-log", DocumentLogTable).clear()
        self.query_one("#log-panel", Log).clear()
        self.query_one("#progress-bar", ProgressBar).update(total=None, progress=0)
        self._log("Cleared - ready for new build")

    def action_cancel(self) -> None:
        self._cancel.set()
        self._log("[yellow]Cancelling: documents in flight will be discarded[/]")

    def action_build(self) -> None:
        source = self.query_one("#input-path", Input).value.strip()
        output = self.query_one("#output-path", Input).value.strip()
        if not source:
            self._log("[red]ERROR: No input path specified[/]")
            return
        self._cancel = threading.Event()
        self.run_build(source, output or None)

    @work(exclusive=True, thread=True)
    def run_build(self, source: str, output: str | None) -> None:
        """Run the build in a background thread."""
        stats = BuildStats(status="loading", start_time=datetime.now())
        self.post_message(self.StatsUpdated(stats.copy()))
        self.post_message(self.LogMessage(f"Loading input: {source}"))

        source_path = Path(source)
        if not source_path.exists():
            stats.status = "error"
            self.post_message(self.StatsUpdated(stats.copy()))
            self.post_message(self.LogMessage(f"[red]ERROR: Path not found: {source}[/]"))
            return

        def discovered(documents: int, assets: int) -> None:
            stats.documents_discovered = documents
            stats.assets = assets
            stats.status = "running"
            self.post_message(self.StatsUpdated(stats.copy()))
            self.post_message(self.LogMessage(f"Found {documents} documents, {assets} assets"))

        def finished(report: DocumentReport) -> None:
            stats.record(report)
            if self._cancel.is_set():
                stats.status = "cancelling"
            self.post_message(self.StatsUpdated(stats.copy()))
            self.post_message(self.DocumentFinished(report))
            for diagnostic in report.diagnostics:
                self.post_message(self.LogMessage(f"[yellow]{diagnostic}[/]"))

        config = BuildConfig(input_dir=source_path, output_dir=Path(output) if output else None)
        builder = Builder(config, progress=finished, on_discover=discovered)
        try:
            manifest = builder.build(cancel=self._cancel)
        except IOFailure as e:
            stats.status = "error"
            self.post_message(self.StatsUpdated(stats.copy()))
            self.post_message(self.LogMessage(f"[red]ERROR: {e}[/]"))
            return

        stats.status = "warnings" if manifest.has_warnings else "complete"
        stats.current_document = ""
        stats.end_time = datetime.now()
        self.post_message(self.StatsUpdated(stats.copy()))
        target = output or "(check only)"
        self.post_message(
            self.LogMessage(
                f"[cyan]COMPLETE: {stats.documents_processed} documents, "
                f"{stats.fragments_failed} failed fragments -> {target}[/]"
            )
        )


def main(input_dir: str | None = None, output_dir: str | None = None) -> None:
    """Run the Build Deck TUI."""
    app = BuildDeck(input_dir, output_dir)
    app.run()


if __name__ == "__main__":
    main()
