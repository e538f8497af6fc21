from docfence.extractors import FenceExtractor
from docfence.models import (
    CodeFragment,
    DiagnosticKind,
    Heading,
    Image,
    Language,
    Link,
    Paragraph,
    SourceSpan,
)

SAMPLE = """# Title

Intro with [a link](#usage) and `code [x](y)`.

```python
print("hi")
```

## Usage

![diagram](img/flow.png)
"""


def extract(text, path="doc.md"):
    return FenceExtractor().extract(text, path)


def test_blocks_in_document_order():
    extraction = extract(SAMPLE)

    assert extraction.diagnostics == []
    assert extraction.document.path == "doc.md"
    assert extraction.document.blocks == (
        Heading(1, "Title", "title", SourceSpan(1, 1)),
        Paragraph("Intro with [a link](#usage) and `code [x](y)`.", SourceSpan(3, 3)),
        Link("a link", "#usage", SourceSpan(3, 3), 0),
        CodeFragment(Language.PYTHON, "python", 'print("hi")', SourceSpan(5, 7), 0),
        Heading(2, "Usage", "usage", SourceSpan(9, 9)),
        Image("diagram", "img/flow.png", SourceSpan(11, 11), 0),
    )


def test_extraction_is_idempotent():
    first = extract(SAMPLE).document
    second = extract(SAMPLE).document
    assert first == second
    assert first.blocks == second.blocks


def test_missing_tag_is_unknown_language():
    fragment = extract("```\nanything at all\n```\n").document.fragments[0]
    assert fragment.language is Language.UNKNOWN
    assert fragment.raw_language == ""


def test_unrecognised_tag_is_unknown_but_kept():
    fragment = extract("```brainfuck extra words\n+++\n```\n").document.fragments[0]
    assert fragment.language is Language.UNKNOWN
    assert fragment.raw_language == "brainfuck"


def test_tag_aliases_and_attribute_syntax():
    text = "```py\nx = 1\n```\n\n```{.sol}\ncontract A {}\n```\n\n```YAML\na: 1\n```\n"
    languages = [f.language for f in extract(text).document.fragments]
    assert languages == [Language.PYTHON, Language.SOLIDITY, Language.YAML]


def test_unterminated_fence_yields_one_malformed_fragment():
    text = "# Intro\n\nSome prose.\n\n```js\nlet x = 1;\n"
    extraction = extract(text)

    assert len(extraction.diagnostics) == 1
    diagnostic = extraction.diagnostics[0]
    assert diagnostic.kind is DiagnosticKind.MALFORMED_FRAGMENT
    assert diagnostic.line == 5
    assert "line 5" in diagnostic.message
    assert extraction.document.fragments == []
    assert [type(b) for b in extraction.document.blocks] == [Heading, Paragraph]


def test_unterminated_fence_keeps_earlier_fragments():
    text = "```python\nx = 1\n```\n\n```python\ny = 2\n"
    extraction = extract(text)

    assert len(extraction.document.fragments) == 1
    assert extraction.document.fragments[0].text == "x = 1"
    assert [d.line for d in extraction.diagnostics] == [5]


def test_closing_fence_must_match_character_and_length():
    text = "````markdown\n```\ninner\n```\n````\n\n~~~\n```\n~~~\n"
    fragments = extract(text).document.fragments

    assert [f.text for f in fragments] == ["```\ninner\n```", "```"]


def test_indented_fence_strips_indent_from_body():
    text = "  ```python\n  if x:\n      pass\n  ```\n"
    fragment = extract(text).document.fragments[0]
    assert fragment.text == "if x:\n    pass"


def test_duplicate_headings_get_distinct_anchors():
    document = extract("## Foo\n\n## Foo\n\n# Foo #\n").document
    assert [h.anchor for h in document.headings] == ["foo", "foo-1", "foo-2"]
    assert document.headings[2].text == "Foo"


def test_hash_without_space_is_not_a_heading():
    document = extract("#hashtag\n").document
    assert document.headings == []
    assert isinstance(document.blocks[0], Paragraph)


def test_inline_links_and_images_follow_their_paragraph():
    text = "First [one](a.md) line\nsecond ![pic](p.png) and [two](#b).\n\nNext."
    blocks = extract(text).document.blocks

    assert isinstance(blocks[0], Paragraph)
    assert blocks[0].span == SourceSpan(1, 2)
    assert blocks[1] == Link("one", "a.md", SourceSpan(1, 1), 0)
    assert blocks[2] == Image("pic", "p.png", SourceSpan(2, 2), 0)
    assert blocks[3] == Link("two", "#b", SourceSpan(2, 2), 1)
    assert isinstance(blocks[4], Paragraph)


def test_identical_links_stay_distinct():
    document = extract("[x](#a) [x](#a)\n").document
    assert len(document.links) == 2
    assert len(set(document.links)) == 2


def test_fence_inside_code_is_not_reopened():
    text = "```python\ns = '''\n~~~\n'''\n```\nAfter.\n"
    document = extract(text).document
    assert len(document.fragments) == 1
    assert isinstance(document.blocks[-1], Paragraph)


def test_title_falls_back_to_file_name():
    assert extract("just text\n", "chapters/intro.md").document.title == "intro.md"
    assert extract(SAMPLE).document.title == "Title"


def test_fence_inside_list_item_is_extracted():
    text = "1. Run the tests:\n\n    ```python\n    def broken(:\n    ```\n\n2. Done.\n"
    document = extract(text).document

    assert len(document.fragments) == 1
    fragment = document.fragments[0]
    assert fragment.language is Language.PYTHON
    assert fragment.text == "def broken(:"
    assert fragment.span == SourceSpan(3, 5)
    assert isinstance(document.blocks[-1], Paragraph)


def test_fence_inside_nested_list_item():
    text = "- Setup\n   - Install:\n\n        ```sh\n        pip install docfence\n        ```\n"
    fragments = extract(text).document.fragments
    assert [f.text for f in fragments] == ["pip install docfence"]


def test_four_space_fence_outside_a_list_is_not_a_fragment():
    document = extract("Prose.\n\n    ```python\n    x = 1\n    ```\n").document
    assert document.fragments == []


def test_heading_links_follow_their_heading():
    blocks = extract("## See [guide](missing.md) and ![icon](i.png)\n").document.blocks

    assert blocks[0] == Heading(
        2, "See [guide](missing.md) and ![icon](i.png)", "see-guide-and-icon", SourceSpan(1, 1)
    )
    assert blocks[1] == Link("guide", "missing.md", SourceSpan(1, 1), 0)
    assert blocks[2] == Image("icon", "i.png", SourceSpan(1, 1), 0)
