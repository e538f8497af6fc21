"""Protocol for per-language fragment grammars."""

from typing import Protocol, runtime_checkable

from docfence.models import Language


@runtime_checkable
class LanguageGrammar(Protocol):
    """Checks that a fragment's text is well formed for one language.

    check() returns None on success and raises docfence.errors.ParseError
    otherwise. Implementations must be pure: no state survives a call.
    """

    @property
    def language(self) -> Language:
        ...

    def check(self, text: str) -> None:
        ...
