"""Fragment syntax validation for docfence."""

from docfence.validators.grammars import (
    GRAMMARS,
    CFamilyGrammar,
    JsonGrammar,
    PythonGrammar,
    ShellGrammar,
    TomlGrammar,
    YamlGrammar,
)
from docfence.validators.syntax_validator import SyntaxValidator

__all__ = [
    "GRAMMARS",
    "CFamilyGrammar",
    "JsonGrammar",
    "PythonGrammar",
    "ShellGrammar",
    "SyntaxValidator",
    "TomlGrammar",
    "YamlGrammar",
]
