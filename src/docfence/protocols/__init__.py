"""Protocol definitions for extensible components."""

from docfence.protocols.grammar import LanguageGrammar
from docfence.protocols.ingester import Ingester
from docfence.protocols.renderer import PageRenderer

__all__ = ["Ingester", "LanguageGrammar", "PageRenderer"]
