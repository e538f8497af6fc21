"""Grammar checks, one variant per supported fragment language."""

import ast
import json
import re
import shlex
import tomllib
import warnings
from typing import Optional

import yaml

from docfence.errors import ParseError
from docfence.models import Language


class PythonGrammar:
    """Full parse with the interpreter's own parser."""

    language = Language.PYTHON

    def check(self, text: str) -> None:
        try:
            with warnings.catch_warnings():
                # Invalid escape sequences in examples are not our concern
                warnings.simplefilter("ignore", SyntaxWarning)
                ast.parse(text)
        except SyntaxError as e:
            raise ParseError(e.msg, e.lineno) from e
        except (ValueError, RecursionError, MemoryError) as e:
            raise ParseError(str(e) or type(e).__name__) from e


class JsonGrammar:
    language = Language.JSON

    def check(self, text: str) -> None:
        try:
            json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(e.msg, e.lineno) from e
        except RecursionError as e:
            raise ParseError("nesting too deep") from e


class YamlGrammar:
    language = Language.YAML

    def check(self, text: str) -> None:
        try:
            # Compose only: application tags such as !Ref have no constructor
            # but are well-formed, and multi-document streams are common
            for _ in yaml.compose_all(text, Loader=yaml.SafeLoader):
                pass
        except yaml.MarkedYAMLError as e:
            line = e.problem_mark.line + 1 if e.problem_mark is not None else None
            raise ParseError(e.problem or str(e), line) from e
        except yaml.YAMLError as e:
            raise ParseError(str(e)) from e


class TomlGrammar:
    language = Language.TOML

    def check(self, text: str) -> None:
        try:
            tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ParseError(str(e), getattr(e, "lineno", None)) from e


class CFamilyGrammar:
    """Tolerant structural check for brace-delimited languages.

    Skips string literals and comments, then requires brackets to balance
    and nest correctly. It does not attempt a full parse, so elided
    snippets (`...`) and partial contracts still pass. Languages with
    template literals (JavaScript, TypeScript) also have regex literals,
    which are skipped like strings.
    """

    PAIRS = {")": "(", "]": "[", "}": "{"}
    # A slash after one of these (or a keyword) starts a regex literal
    REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%>~^")
    REGEX_KEYWORDS = frozenset(
        {
            "return", "typeof", "case", "do", "else", "in", "of", "instanceof",
            "new", "delete", "void", "throw", "yield", "await",
        }
    )

    def __init__(self, language: Language, template_literals: bool = False):
        self.language = language
        self.template_literals = template_literals

    def check(self, text: str) -> None:
        stack: list[tuple[str, int]] = []
        line = 1
        i = 0
        n = len(text)
        quotes = "\"'`" if self.template_literals else "\"'"
        last = -1  # index of the last significant character

        while i < n:
            ch = text[i]
            nxt = text[i + 1] if i + 1 < n else ""

            if ch == "\n":
                line += 1
            elif ch == "/" and nxt == "/":
                end = text.find("\n", i)
                i = n if end == -1 else end
                continue
            elif ch == "/" and nxt == "*":
                end = text.find("*/", i + 2)
                if end == -1:
                    raise ParseError("unterminated block comment", line)
                line += text.count("\n", i, end)
                i = end + 2
                continue
            elif ch in quotes:
                i, line = self._skip_string(text, i, line)
                last = i - 1
                continue
            elif ch == "/" and self.template_literals and self._starts_regex(text, i, last):
                end = self._regex_end(text, i)
                if end is not None:
                    last = end
                    i = end + 1
                    continue
            elif ch in "([{":
                stack.append((ch, line))
            elif ch in self.PAIRS:
                if not stack:
                    raise ParseError(f"unmatched '{ch}'", line)
                opener, opened_at = stack.pop()
                if opener != self.PAIRS[ch]:
                    raise ParseError(
                        f"'{ch}' does not close '{opener}' opened on line {opened_at}",
                        line,
                    )
            if not ch.isspace():
                last = i
            i += 1

        if stack:
            opener, opened_at = stack[-1]
            raise ParseError(f"'{opener}' is never closed", opened_at)

    def _starts_regex(self, text: str, i: int, last: int) -> bool:
        if last < 0 or "\n" in text[last + 1 : i]:
            return True
        prev = text[last]
        if prev in self.REGEX_PRECEDERS:
            return True
        if prev.isalnum() or prev in "_$":
            start = last
            while start > 0 and (text[start - 1].isalnum() or text[start - 1] in "_$"):
                start -= 1
            return text[start : last + 1] in self.REGEX_KEYWORDS
        return False

    @staticmethod
    def _regex_end(text: str, start: int) -> Optional[int]:
        """Index of the last character of the regex literal at start.

        None when the line ends first, in which case the slash is division.
        """
        in_class = False
        i = start + 1
        while i < len(text):
            ch = text[i]
            if ch == "\n":
                return None
            if ch == "\\":
                i += 2
                continue
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                while i + 1 < len(text) and text[i + 1].isalpha():
                    i += 1
                return i
            i += 1
        return None

    @staticmethod
    def _skip_string(text: str, start: int, line: int) -> tuple[int, int]:
        """Return the index after the literal opened at start, and the line."""
        quote = text[start]
        i = start + 1
        while i < len(text):
            ch = text[i]
            if ch == "\\":
                if i + 1 < len(text) and text[i + 1] == "\n":
                    line += 1
                i += 2
                continue
            if ch == quote:
                return i + 1, line
            if ch == "\n":
                if quote != "`":
                    raise ParseError("unterminated string literal", line)
                line += 1
            i += 1
        raise ParseError("unterminated string literal", line)


class ShellGrammar:
    """Quoting check for shell snippets."""

    language = Language.SHELL

    HEREDOC_RE = re.compile(r"(?<!<)<<(?!<)-?\s*(['\"]?)(?P<tag>[A-Za-z_]\w*)\1")
    ARITHMETIC_RE = re.compile(r"\$?\(\(.*?\)\)")

    def check(self, text: str) -> None:
        # Line continuations join logical lines before tokenising
        logical = self._strip_heredocs(text).replace("\\\n", " ")
        try:
            shlex.split(logical, comments=True, posix=True)
        except ValueError as e:
            raise ParseError(str(e)) from e

    def _strip_heredocs(self, text: str) -> str:
        """Drop here-document bodies, which follow no quoting rules."""
        kept: list[str] = []
        terminator = None
        for line in text.split("\n"):
            if terminator is not None:
                if line.strip() == terminator:
                    terminator = None
                continue
            kept.append(line)
            match = self.HEREDOC_RE.search(self.ARITHMETIC_RE.sub("", line))
            if match is not None:
                terminator = match.group("tag")
        return "\n".join(kept)


GRAMMARS = {
    Language.PYTHON: PythonGrammar(),
    Language.JSON: JsonGrammar(),
    Language.YAML: YamlGrammar(),
    Language.TOML: TomlGrammar(),
    Language.SOLIDITY: CFamilyGrammar(Language.SOLIDITY),
    Language.JAVASCRIPT: CFamilyGrammar(Language.JAVASCRIPT, template_literals=True),
    Language.TYPESCRIPT: CFamilyGrammar(Language.TYPESCRIPT, template_literals=True),
    Language.SHELL: ShellGrammar(),
}
