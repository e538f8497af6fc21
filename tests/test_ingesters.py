import zipfile

from docfence.ingesters import FolderIngester, ZipIngester, get_ingester


def test_folder_ingester_classifies_and_skips(tmp_path, write_tree):
    root = write_tree(
        tmp_path / "book",
        {
            "b.md": "# B",
            "a/intro.markdown": "# Intro",
            "a/img/x.png": b"\x89PNG",
            ".git/config.md": "hidden",
            "node_modules/pkg/readme.md": "vendored",
            "notes.xyz": "ignored",
        },
    )
    files = list(FolderIngester().ingest(root))

    assert [(f.path, f.is_asset) for f in files] == [
        ("b.md", False),
        ("a/intro.markdown", False),
        ("a/img/x.png", True),
    ]
    assert files[0].content == b"# B"
    assert files[0].size_bytes == 3


def test_zip_ingester(tmp_path):
    archive = tmp_path / "book.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("one.md", "# One")
        zf.writestr("img/a.png", b"\x89PNG")
        zf.writestr("__MACOSX/.one.md", "junk")

    files = list(ZipIngester().ingest(archive))
    assert [(f.path, f.is_asset) for f in files] == [("img/a.png", True), ("one.md", False)]


def test_get_ingester(tmp_path):
    archive = tmp_path / "book.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("one.md", "# One")

    assert get_ingester(tmp_path).source_type == "folder"
    assert get_ingester(archive).source_type == "zip"
    assert get_ingester(tmp_path / "missing.zip") is None


def test_folder_ingester_keeps_chapter_folders_with_build_like_names(tmp_path, write_tree):
    root = write_tree(
        tmp_path / "book",
        {"site/index.md": "# Site", "env/setup.md": "# Env", "dist/notes.md": "# Dist"},
    )
    paths = [f.path for f in FolderIngester().ingest(root)]
    assert paths == ["dist/notes.md", "env/setup.md", "site/index.md"]
