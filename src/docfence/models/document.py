"""Core data models for documents and their blocks."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class Language(str, Enum):
    """Closed set of fragment languages the validator knows about."""

    PYTHON = "python"
    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    SOLIDITY = "solidity"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    SHELL = "shell"
    UNKNOWN = "unknown"

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> "Language":
        """Map a fence info-string tag onto a language, best effort."""
        if not tag:
            return cls.UNKNOWN
        return _ALIASES.get(tag.strip().lower(), cls.UNKNOWN)


_ALIASES = {
    "python": Language.PYTHON,
    "python3": Language.PYTHON,
    "py": Language.PYTHON,
    "json": Language.JSON,
    "yaml": Language.YAML,
    "yml": Language.YAML,
    "toml": Language.TOML,
    "solidity": Language.SOLIDITY,
    "sol": Language.SOLIDITY,
    "javascript": Language.JAVASCRIPT,
    "js": Language.JAVASCRIPT,
    "node": Language.JAVASCRIPT,
    "typescript": Language.TYPESCRIPT,
    "ts": Language.TYPESCRIPT,
    "shell": Language.SHELL,
    "sh": Language.SHELL,
    "bash": Language.SHELL,
    "zsh": Language.SHELL,
}


@dataclass(frozen=True)
class SourceSpan:
    """Inclusive, 1-based line range in the source document."""

    start_line: int
    end_line: int

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"line {self.start_line}"
        return f"lines {self.start_line}-{self.end_line}"


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    anchor: str
    span: SourceSpan


@dataclass(frozen=True)
class Paragraph:
    text: str
    span: SourceSpan


@dataclass(frozen=True)
class CodeFragment:
    """A fenced block of example code."""

    language: Language
    raw_language: str
    text: str
    span: SourceSpan
    ordinal: int


@dataclass(frozen=True)
class Image:
    alt: str
    target: str
    span: SourceSpan
    ordinal: int


@dataclass(frozen=True)
class Link:
    text: str
    target: str
    span: SourceSpan
    ordinal: int


Block = Union[Heading, Paragraph, CodeFragment, Image, Link]


@dataclass(frozen=True)
class Document:
    """An extracted document, identified by its source path."""

    path: str
    blocks: tuple[Block, ...] = ()

    @property
    def fragments(self) -> list[CodeFragment]:
        return [b for b in self.blocks if isinstance(b, CodeFragment)]

    @property
    def headings(self) -> list[Heading]:
        return [b for b in self.blocks if isinstance(b, Heading)]

    @property
    def links(self) -> list[Link]:
        return [b for b in self.blocks if isinstance(b, Link)]

    @property
    def images(self) -> list[Image]:
        return [b for b in self.blocks if isinstance(b, Image)]

    @property
    def anchors(self) -> frozenset[str]:
        return frozenset(h.anchor for h in self.headings)

    @property
    def title(self) -> str:
        """First heading's text, falling back to the file name."""
        for heading in self.headings:
            return heading.text
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class SourceFile:
    """A file yielded by an ingester: a document or an auxiliary asset.

    content is None when the file could not be read; error then says why.
    """

    path: str
    content: Optional[bytes] = field(default=None, repr=False)
    is_asset: bool = False
    error: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.content) if self.content is not None else 0
