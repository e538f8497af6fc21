from concurrent.futures import ThreadPoolExecutor

import pytest

from docfence.models import CodeFragment, Language, SourceSpan, ValidationStatus
from docfence.validators import SyntaxValidator

SOLIDITY_OK = """pragma solidity ^0.8.0;

contract Bank {
    mapping(address => uint) balances; // user balances {
    function withdraw() public {
        (bool ok, ) = msg.sender.call{value: balances[msg.sender]}("");
        require(ok, "transfer failed: don't retry }");
        /* reset ( */
        balances[msg.sender] = 0;
    }
    // ...
}
"""


def fragment(language, text, ordinal=0):
    return CodeFragment(language, language.value, text, SourceSpan(1, 3), ordinal)


@pytest.fixture
def validator():
    return SyntaxValidator()


@pytest.mark.parametrize(
    "language,text",
    [
        (Language.PYTHON, "def f(x):\n    return x * 2\n"),
        (Language.JSON, '{"a": [1, 2, {"b": null}]}'),
        (Language.YAML, "a: 1\n---\nb: [1, 2]\n"),
        (Language.YAML, "Bucket: !Ref MyBucket\nArn: !GetAtt Role.Arn\nsecret: !vault |\n  abc\n"),
        (Language.TOML, '[tool]\nname = "x"\n'),
        (Language.SOLIDITY, SOLIDITY_OK),
        (Language.JAVASCRIPT, "const s = `line one\n${value}\n`;\nfoo(s, [1, 2]);\n"),
        (Language.TYPESCRIPT, "function f(a: number): string[] {\n  return [];\n}\n"),
        (Language.JAVASCRIPT, "const t = s.replace(/'/g, \"\");\n"),
        (Language.JAVASCRIPT, "const ok = /[/\"(]+/i.test(x) && (a / b) > 1;\n"),
        (Language.TYPESCRIPT, "function f(s: string) {\n  return /\\)/.test(s);\n}\n"),
        (Language.SHELL, 'forge test --match "test_withdraw" \\\n  -vvv  # don\'t skip\n'),
        (Language.SHELL, "cat <<EOF\nit's fine\nEOF\necho \"done\"\n"),
        (Language.SHELL, "echo $((1 << 2))\ncat <<< \"word\"\n"),
    ],
)
def test_valid_fragments_pass(validator, language, text):
    result = validator.validate(fragment(language, text))
    assert result.status is ValidationStatus.OK
    assert result.language is language


@pytest.mark.parametrize(
    "language,text,line",
    [
        (Language.PYTHON, "x = 1\ndef broken(:\n    pass\n", 2),
        (Language.JSON, '{\n  "a": 1,\n}', None),
        (Language.YAML, "a: b: c\n", 1),
        (Language.TOML, "a = \n", None),
        (Language.SOLIDITY, "contract A {\n    function f() public {\n}\n", 1),
        (Language.SOLIDITY, "foo(\n]", 2),
        (Language.SOLIDITY, 'string s = "never closed;\n', 1),
        (Language.JAVASCRIPT, "/* open comment\nlet x;\n", 1),
        (Language.SHELL, 'echo "unterminated\n', None),
        (Language.SHELL, 'echo $((1 << 2))\necho "never closed\n', None),
        (Language.SHELL, 'cat <<< word\necho "never closed\n', None),
    ],
)
def test_invalid_fragments_fail_with_reason(validator, language, text, line):
    result = validator.validate(fragment(language, text))
    assert result.status is ValidationStatus.FAILED
    assert result.reason
    if line is not None:
        assert result.line == line


@pytest.mark.parametrize(
    "text",
    ["", "def broken(:", "{{{{", "pragma solidity ^0.8.0; contract {", '"unterminated'],
)
def test_unknown_language_is_always_skipped(validator, text):
    result = validator.validate(fragment(Language.UNKNOWN, text))
    assert result.status is ValidationStatus.SKIPPED


def test_language_without_grammar_is_skipped():
    validator = SyntaxValidator(grammars={})
    result = validator.validate(fragment(Language.PYTHON, "def broken(:"))
    assert result.status is ValidationStatus.SKIPPED
    assert result.language is Language.PYTHON


def test_heredoc_bodies_are_not_tokenised(validator):
    text = "cat <<EOF > notes.txt\nit's fine\nEOF\necho done\n"
    assert validator.validate(fragment(Language.SHELL, text)).status is ValidationStatus.OK


def test_javascript_single_line_string_cannot_span_lines(validator):
    result = validator.validate(fragment(Language.JAVASCRIPT, "let s = 'a\nb';"))
    assert result.status is ValidationStatus.FAILED


def test_one_failure_does_not_affect_siblings(validator):
    fragments = [
        fragment(Language.PYTHON, "x = 1", 0),
        fragment(Language.PYTHON, "def broken(:", 1),
        fragment(Language.JSON, "[1, 2]", 2),
        fragment(Language.UNKNOWN, "???", 3),
    ]
    results = validator.validate_all(fragments)

    assert len(results) == len(fragments)
    assert [results[f].status for f in fragments] == [
        ValidationStatus.OK,
        ValidationStatus.FAILED,
        ValidationStatus.OK,
        ValidationStatus.SKIPPED,
    ]


def test_validate_all_with_executor_matches_sequential(validator):
    fragments = [fragment(Language.PYTHON, f"x{i} = {i}" if i % 3 else "(", i) for i in range(30)]
    with ThreadPoolExecutor(max_workers=4) as pool:
        parallel = validator.validate_all(fragments, pool)
    assert parallel == validator.validate_all(fragments)
    assert len(parallel) == 30
