"""Build manifest: per-document counts and diagnostics."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from docfence.models import Diagnostic, DiagnosticKind, Stage

MANIFEST_NAME = "manifest.json"
MANIFEST_VERSION = 1

# Diagnostics that make a strict build fail
WARNING_KINDS = {
    DiagnosticKind.PARSE_ERROR,
    DiagnosticKind.DANGLING_LINK,
    DiagnosticKind.MALFORMED_FRAGMENT,
    DiagnosticKind.IO_FAILURE,
    DiagnosticKind.RENDER_ERROR,
}


@dataclass
class ManifestEntry:
    """Summary of one document's build."""

    path: str
    stage: Stage
    output: Optional[str] = None
    fragments_validated: int = 0
    fragments_skipped: int = 0
    fragments_failed: int = 0
    dangling_links: int = 0
    malformed_fragments: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.kind in WARNING_KINDS)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "stage": self.stage.value,
            "output": self.output,
            "fragments_validated": self.fragments_validated,
            "fragments_skipped": self.fragments_skipped,
            "fragments_failed": self.fragments_failed,
            "dangling_links": self.dangling_links,
            "malformed_fragments": self.malformed_fragments,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ManifestEntry":
        return cls(
            path=data["path"],
            stage=Stage(data["stage"]),
            output=data.get("output"),
            fragments_validated=data.get("fragments_validated", 0),
            fragments_skipped=data.get("fragments_skipped", 0),
            fragments_failed=data.get("fragments_failed", 0),
            dangling_links=data.get("dangling_links", 0),
            malformed_fragments=data.get("malformed_fragments", 0),
            diagnostics=[Diagnostic.from_dict(d) for d in data.get("diagnostics", [])],
        )


@dataclass
class Manifest:
    """All document entries of one build, in source path order."""

    source: str
    entries: list[ManifestEntry] = field(default_factory=list)
    assets: list[str] = field(default_factory=list)

    def add(self, entry: ManifestEntry) -> None:
        self.entries.append(entry)
        self.entries.sort(key=lambda e: e.path)

    @property
    def has_warnings(self) -> bool:
        return any(entry.warning_count for entry in self.entries)

    def totals(self) -> dict[str, int]:
        """Sum the per-document counts."""
        keys = (
            "fragments_validated",
            "fragments_skipped",
            "fragments_failed",
            "dangling_links",
            "malformed_fragments",
        )
        totals = {key: sum(getattr(e, key) for e in self.entries) for key in keys}
        totals["documents"] = len(self.entries)
        totals["failed_documents"] = sum(
            1 for e in self.entries if e.stage in (Stage.FAILED, Stage.CANCELLED)
        )
        return totals

    def to_dict(self) -> dict:
        return {
            "version": MANIFEST_VERSION,
            "source": self.source,
            "totals": self.totals(),
            "documents": [e.to_dict() for e in self.entries],
            "assets": self.assets,
        }

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def load(cls, path: Path | str) -> "Manifest":
        """Read a manifest written by a previous build."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(
            source=data.get("source", ""),
            entries=[ManifestEntry.from_dict(d) for d in data.get("documents", [])],
            assets=list(data.get("assets", [])),
        )
