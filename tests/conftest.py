"""Shared fixtures for docfence tests."""

from pathlib import Path
from typing import Callable

import pytest

CLEAN_CHAPTER = """# Chapter One

Read the [setup notes](two.md#setup) first, then the [overview](#overview).

![Flow diagram](img/flow.png)

## Overview

```python
def withdraw(amount):
    return amount
```

```solidity
contract Vault {
    function withdraw() public {}
}
```

```text
free-form output, never parsed
```
"""

BROKEN_CHAPTER = """# Chapter Two

## Setup

```python
def broken(:
    pass
```

See [nowhere](#nowhere) and [the guide](https://example.com/guide).
"""


@pytest.fixture
def write_tree() -> Callable[[Path, dict], Path]:
    """Write {relative path: str | bytes} below root and return root."""

    def _write(root: Path, files: dict) -> Path:
        for relative, content in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def book(tmp_path: Path, write_tree) -> Path:
    """A two-chapter book: one clean chapter, one with a bad fragment and a dangling link."""
    return write_tree(
        tmp_path / "book",
        {
            "one.md": CLEAN_CHAPTER,
            "two.md": BROKEN_CHAPTER,
            "img/flow.png": b"\x89PNG\r\n\x1a\n\x00\x00",
            "img/unused.png": b"\x89PNG\r\n\x1a\n\x00\x01",
        },
    )


@pytest.fixture
def clean_book(tmp_path: Path, write_tree) -> Path:
    return write_tree(
        tmp_path / "clean",
        {
            "one.md": CLEAN_CHAPTER,
            "two.md": "# Two\n\n## Setup\n\nNothing to see.\n",
            "img/flow.png": b"\x89PNG\r\n\x1a\n\x00\x00",
        },
    )
