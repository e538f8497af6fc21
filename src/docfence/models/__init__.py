"""Data models for docfence."""

from docfence.models.document import (
    Block,
    CodeFragment,
    Document,
    Heading,
    Image,
    Language,
    Link,
    Paragraph,
    SourceFile,
    SourceSpan,
)
from docfence.models.results import (
    Diagnostic,
    DiagnosticKind,
    LinkKind,
    LinkStatus,
    LinkTarget,
    Stage,
    ValidationResult,
    ValidationStatus,
)

__all__ = [
    "Block",
    "CodeFragment",
    "Diagnostic",
    "DiagnosticKind",
    "Document",
    "Heading",
    "Image",
    "Language",
    "Link",
    "LinkKind",
    "LinkStatus",
    "LinkTarget",
    "Paragraph",
    "SourceFile",
    "SourceSpan",
    "Stage",
    "ValidationResult",
    "ValidationStatus",
]
