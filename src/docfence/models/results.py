"""Per-stage result and diagnostic models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from docfence.models.document import Language


class ValidationStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking one fragment against its language grammar."""

    status: ValidationStatus
    language: Language
    reason: Optional[str] = None
    line: Optional[int] = None  # relative to the fragment body

    @classmethod
    def ok(cls, language: Language) -> "ValidationResult":
        return cls(ValidationStatus.OK, language)

    @classmethod
    def skipped(cls, language: Language = Language.UNKNOWN) -> "ValidationResult":
        return cls(ValidationStatus.SKIPPED, language)

    @classmethod
    def failed(
        cls, language: Language, reason: str, line: Optional[int] = None
    ) -> "ValidationResult":
        return cls(ValidationStatus.FAILED, language, reason, line)


class LinkStatus(str, Enum):
    RESOLVED = "resolved"
    DANGLING = "dangling"
    EXTERNAL_UNCHECKED = "external-unchecked"


class LinkKind(str, Enum):
    ANCHOR = "anchor"
    DOCUMENT = "document"
    ASSET = "asset"
    EXTERNAL = "external"


@dataclass(frozen=True)
class LinkTarget:
    reference: str
    status: LinkStatus
    kind: LinkKind

    @property
    def is_dangling(self) -> bool:
        return self.status is LinkStatus.DANGLING


class DiagnosticKind(str, Enum):
    MALFORMED_FRAGMENT = "MalformedFragment"
    PARSE_ERROR = "ParseError"
    DANGLING_LINK = "DanglingLink"
    IO_FAILURE = "IOFailure"
    RENDER_ERROR = "RenderError"


@dataclass(frozen=True)
class Diagnostic:
    """A problem recorded against a document without stopping the build."""

    kind: DiagnosticKind
    message: str
    path: str
    line: Optional[int] = None
    fatal: bool = False

    def __str__(self) -> str:
        location = f"{self.path}:{self.line}" if self.line else self.path
        return f"{location}: {self.kind.value}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "path": self.path,
            "line": self.line,
            "fatal": self.fatal,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Diagnostic":
        return cls(
            kind=DiagnosticKind(data["kind"]),
            message=data["message"],
            path=data["path"],
            line=data.get("line"),
            fatal=data.get("fatal", False),
        )


class Stage(str, Enum):
    """Forward-only lifecycle of one document run."""

    LOADED = "loaded"
    EXTRACTED = "extracted"
    VALIDATED = "validated"
    LINKED = "linked"
    RENDERED = "rendered"
    FAILED = "failed"
    CANCELLED = "cancelled"
