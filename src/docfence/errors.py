"""Exception types raised inside the build pipeline."""

from typing import Optional


class DocfenceError(Exception):
    """Base class for all docfence errors."""


class MalformedFragment(DocfenceError):
    """A code fence was opened but never closed."""

    def __init__(self, path: str, line: int):
        self.path = path
        self.line = line
        super().__init__(f"unterminated code fence starting at line {line}")


class ParseError(DocfenceError):
    """A fragment does not parse under its declared language."""

    def __init__(self, reason: str, line: Optional[int] = None):
        self.reason = reason
        self.line = line
        super().__init__(reason if line is None else f"line {line}: {reason}")


class IOFailure(DocfenceError):
    """A document could not be read or decoded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class RenderError(DocfenceError):
    """The document handed to a renderer is structurally corrupt."""


class BuildCancelled(DocfenceError):
    """A document run was cancelled before it finished."""
