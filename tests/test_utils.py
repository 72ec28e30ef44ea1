from datetime import datetime
from pathlib import Path

import pytest

from easypages import utils
from easypages.errors import BuildError


def test_derive_title_capitalizes_first_character_only():
    assert utils.derive_title("hello.md") == "Hello"
    assert utils.derive_title("pages/blog/my-first-post.md") == "My-first-post"
    assert utils.derive_title("already-Mixed_Case.MD") == "Already-Mixed_Case"
    assert utils.derive_title("v1.2.notes.md") == "V1.2.notes"
    assert utils.derive_title(Path("dir") / "note") == "Note"


def test_derive_title_non_ascii_and_edge_cases():
    assert utils.derive_title("élan.md") == "Élan"
    assert utils.derive_title("ßtraße.md") == "SStraße"
    assert utils.derive_title("123-start.md") == "123-start"
    assert utils.derive_title(".md") == ""


def test_derive_title_is_pure():
    first = utils.derive_title("note.md")
    second = utils.derive_title("note.md")
    assert first == second == "Note"
    assert utils.derive_title("note.md") == utils.derive_title("Note.md")


def test_is_markdown_is_case_insensitive():
    assert utils.is_markdown(Path("page.md"))
    assert utils.is_markdown("PAGE.MD")
    assert utils.is_markdown("a/b/c.Md")
    assert not utils.is_markdown("page.markdown")
    assert not utils.is_markdown("style.css")
    assert not utils.is_markdown("md")


def test_format_timestamp():
    assert utils.format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02 03:04:05"


def test_is_within(tmp_path):
    inner = tmp_path / "a" / "b"
    assert utils.is_within(inner, tmp_path)
    assert utils.is_within(tmp_path, tmp_path)
    assert not utils.is_within(tmp_path, inner)


def test_iter_source_files_lists_files_only(tmp_path):
    (tmp_path / "sub" / "deeper").mkdir(parents=True)
    (tmp_path / "a.md").write_text("a", encoding="utf-8")
    (tmp_path / "sub" / "b.css").write_text("b", encoding="utf-8")
    (tmp_path / "sub" / "deeper" / "c.png").write_bytes(b"\x89PNG")

    files = utils.iter_source_files(tmp_path)
    names = sorted(p.relative_to(tmp_path).as_posix() for p in files)
    assert names == ["a.md", "sub/b.css", "sub/deeper/c.png"]


def test_iter_source_files_skips_excluded_directory(tmp_path):
    output = tmp_path / "dist"
    output.mkdir()
    (output / "Old.html").write_text("old", encoding="utf-8")
    (tmp_path / "a.md").write_text("a", encoding="utf-8")

    files = utils.iter_source_files(tmp_path, exclude=[output])
    assert [p.name for p in files] == ["a.md"]


def test_iter_source_files_ignores_exclusions_outside_root(tmp_path):
    source = tmp_path / "pages"
    source.mkdir()
    (source / "a.md").write_text("a", encoding="utf-8")
    files = utils.iter_source_files(source, exclude=[tmp_path / "dist"])
    assert [p.name for p in files] == ["a.md"]


def test_iter_source_files_missing_root(tmp_path):
    with pytest.raises(BuildError) as excinfo:
        utils.iter_source_files(tmp_path / "missing")
    assert excinfo.value.source_path == tmp_path / "missing"


def test_iter_source_files_root_is_a_file(tmp_path):
    target = tmp_path / "file.md"
    target.write_text("x", encoding="utf-8")
    with pytest.raises(BuildError):
        utils.iter_source_files(target)
