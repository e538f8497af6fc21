"""Per-fragment syntax validation."""

import logging
from concurrent.futures import Executor
from typing import Iterable, Mapping, Optional

from docfence.errors import ParseError
from docfence.models import CodeFragment, Language, ValidationResult
from docfence.protocols import LanguageGrammar
from docfence.validators.grammars import GRAMMARS

logger = logging.getLogger(__name__)


class SyntaxValidator:
    """Validates code fragments against their declared language.

    Each fragment is checked independently: a failure in one never
    prevents its siblings from being checked. Fragments whose language is
    unknown or has no grammar are skipped, never failed.
    """

    def __init__(self, grammars: Optional[Mapping[Language, LanguageGrammar]] = None):
        self._grammars = dict(GRAMMARS if grammars is None else grammars)

    @property
    def languages(self) -> frozenset[Language]:
        """Languages this validator can actually parse."""
        return frozenset(self._grammars)

    def validate(self, fragment: CodeFragment) -> ValidationResult:
        """Check a single fragment.

        Args:
            fragment: The fragment to check

        Returns:
            OK, SKIPPED (unknown or unsupported language) or FAILED
        """
        if fragment.language is Language.UNKNOWN:
            return ValidationResult.skipped()

        grammar = self._grammars.get(fragment.language)
        if grammar is None:
            return ValidationResult.skipped(fragment.language)

        try:
            grammar.check(fragment.text)
        except ParseError as e:
            logger.debug(f"{fragment.language.value} fragment at {fragment.span}: {e}")
            return ValidationResult.failed(fragment.language, e.reason, e.line)
        return ValidationResult.ok(fragment.language)

    def validate_all(
        self,
        fragments: Iterable[CodeFragment],
        executor: Optional[Executor] = None,
    ) -> dict[CodeFragment, ValidationResult]:
        """Check every fragment, optionally fanning out over an executor.

        Returns:
            One result per fragment, in fragment order
        """
        fragments = list(fragments)
        if executor is None:
            results = [self.validate(f) for f in fragments]
        else:
            results = list(executor.map(self.validate, fragments))
        return dict(zip(fragments, results))
