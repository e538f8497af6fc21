from docfence.cli import EXIT_BAD_INPUT, EXIT_OK, EXIT_WARNINGS, main
from docfence.storage import MANIFEST_NAME


def test_default_mode_exits_zero_despite_warnings(book, tmp_path):
    out = tmp_path / "site"
    assert main(["build", "--input", str(book), "--output", str(out)]) == EXIT_OK
    assert (out / MANIFEST_NAME).exists()


def test_strict_mode_fails_on_warnings(book, tmp_path):
    out = tmp_path / "site"
    code = main(["build", "--input", str(book), "--output", str(out), "--strict"])
    assert code == EXIT_WARNINGS
    # The manifest is still written for inspection
    assert (out / MANIFEST_NAME).exists()


def test_strict_mode_passes_clean_book(clean_book, tmp_path):
    out = tmp_path / "site"
    code = main(["build", "-i", str(clean_book), "-o", str(out), "--strict", "-j", "1"])
    assert code == EXIT_OK


def test_check_command(book, clean_book, tmp_path):
    assert main(["check", "--input", str(book), "--strict"]) == EXIT_WARNINGS
    assert main(["check", "--input", str(clean_book), "--strict"]) == EXIT_OK
    assert main(["check", "--input", str(book)]) == EXIT_OK


def test_missing_input(tmp_path):
    code = main(["build", "--input", str(tmp_path / "nope"), "--output", str(tmp_path / "out")])
    assert code == EXIT_BAD_INPUT


def test_info(book, tmp_path, capsys):
    out = tmp_path / "site"
    main(["build", "--input", str(book), "--output", str(out)])
    capsys.readouterr()

    assert main(["info", str(out)]) == EXIT_OK
    printed = capsys.readouterr().out
    assert "Documents:" in printed
    assert "two.md" in printed
    assert "fragments_failed: 1" in printed

    assert main(["info", str(tmp_path / "missing.json")]) == EXIT_BAD_INPUT
