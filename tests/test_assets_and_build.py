import re
from datetime import datetime
from pathlib import Path

import pytest

from easypages.assets import AssetPipeline
from easypages.build import BuildError, BuildResult, build_site, rebuild_site, render_pages
from easypages.config import Config
from easypages.templates import load_layout

LAYOUT = "<html><body>{{.Content}} by {{.Author}} at {{.GeneratedAt}}</body></html>"
TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")


def create_project(tmp_path: Path, layout: str = LAYOUT) -> Config:
    pages = tmp_path / "pages"
    pages.mkdir()
    layout_file = tmp_path / "layout.html"
    layout_file.write_text(layout, encoding="utf-8")
    return Config(
        pages_dir=pages,
        output_dir=tmp_path / "dist",
        layout_file=layout_file,
        author="Ada",
    )


def test_end_to_end_build(tmp_path):
    config = create_project(tmp_path)
    (config.pages_dir / "hello.md").write_text("# Hi\n- a\n- b", encoding="utf-8")
    css = b"body { color: red; }\r\n\x00binary-safe"
    (config.pages_dir / "style.css").write_bytes(css)

    result = build_site(config)

    assert isinstance(result, BuildResult)
    assert result.ok
    html = (tmp_path / "dist" / "Hello.html").read_text(encoding="utf-8")
    assert re.search(r"<h1>Hi</h1>", html)
    assert "<ul>" in html
    assert html.count("<li>") == 2
    assert "by Ada at" in html
    assert TIMESTAMP_RE.search(html)
    assert (tmp_path / "dist" / "style.css").read_bytes() == css
    assert result.pages == [tmp_path / "dist" / "Hello.html"]
    assert result.assets == [tmp_path / "dist" / "style.css"]


def test_empty_source_directory(tmp_path):
    config = create_project(tmp_path)
    result = build_site(config)
    assert result.pages == []
    assert result.assets == []
    assert result.failures == []
    assert list(config.output_dir.iterdir()) == []


def test_title_collision_overwrites(tmp_path):
    config = create_project(tmp_path)
    (config.pages_dir / "note.md").write_text("lower", encoding="utf-8")
    (config.pages_dir / "Note.md").write_text("upper", encoding="utf-8")

    result = build_site(config)

    outputs = list(config.output_dir.iterdir())
    assert [p.name for p in outputs] == ["Note.html"]
    assert len(result.pages) == 2
    html = outputs[0].read_text(encoding="utf-8")
    assert ("lower" in html) != ("upper" in html)


def test_pages_in_subdirectories_are_written_flat(tmp_path):
    config = create_project(tmp_path)
    (config.pages_dir / "blog" / "2024").mkdir(parents=True)
    (config.pages_dir / "blog" / "2024" / "post.MD").write_text("# Post", encoding="utf-8")

    build_site(config)

    assert (config.output_dir / "Post.html").exists()
    assert not (config.output_dir / "blog").exists()


def test_asset_copy_preserves_relative_paths(tmp_path):
    config = create_project(tmp_path)
    image = config.pages_dir / "assets" / "img" / "a.png"
    image.parent.mkdir(parents=True)
    payload = bytes(range(256))
    image.write_bytes(payload)
    (config.pages_dir / "assets" / "readme.md").write_text("# Readme", encoding="utf-8")

    result = AssetPipeline(config.pages_dir, config.output_dir).run()

    copied = config.output_dir / "assets" / "img" / "a.png"
    assert copied.read_bytes() == payload
    assert result.assets == [copied]
    # markdown is never copied as an asset
    assert not (config.output_dir / "assets" / "readme.md").exists()


def test_asset_pipeline_missing_source_is_fatal(tmp_path):
    with pytest.raises(BuildError):
        AssetPipeline(tmp_path / "missing", tmp_path / "out").run()


def test_unreadable_page_is_skipped(tmp_path, capsys):
    config = create_project(tmp_path)
    (config.pages_dir / "broken.md").write_bytes(b"\xff\xfe\xfa not utf-8")
    (config.pages_dir / "good.md").write_text("fine", encoding="utf-8")

    result = build_site(config)

    assert (config.output_dir / "Good.html").exists()
    assert not (config.output_dir / "Broken.html").exists()
    assert [(f.path.name, f.stage) for f in result.failures] == [("broken.md", "read")]
    assert "Skipped" in capsys.readouterr().err


def test_render_failure_is_skipped_and_assets_still_copied(tmp_path):
    config = create_project(tmp_path, layout="{{ content }}{{ missing_field }}")
    (config.pages_dir / "a.md").write_text("a", encoding="utf-8")
    (config.pages_dir / "b.md").write_text("b", encoding="utf-8")
    (config.pages_dir / "logo.svg").write_text("<svg/>", encoding="utf-8")

    result = build_site(config)

    assert result.pages == []
    assert sorted(f.path.name for f in result.failures) == ["a.md", "b.md"]
    assert all(f.stage == "render" for f in result.failures)
    assert "Undefined variable" in result.failures[0].message
    assert (config.output_dir / "logo.svg").read_text(encoding="utf-8") == "<svg/>"


def test_unwritable_output_file_is_skipped(tmp_path):
    config = create_project(tmp_path)
    (config.pages_dir / "hello.md").write_text("hi", encoding="utf-8")
    (config.pages_dir / "other.md").write_text("other", encoding="utf-8")
    (config.output_dir / "Hello.html").mkdir(parents=True)

    result = build_site(config)

    assert [f.stage for f in result.failures] == ["write"]
    assert result.failures[0].path == config.output_dir / "Hello.html"
    assert (config.output_dir / "Other.html").exists()


def test_asset_destination_directory_failure_is_skipped(tmp_path):
    config = create_project(tmp_path)
    (config.pages_dir / "img").mkdir()
    (config.pages_dir / "img" / "a.png").write_bytes(b"png")
    (config.pages_dir / "top.txt").write_text("top", encoding="utf-8")
    config.output_dir.mkdir()
    # a file where the asset subdirectory should go
    (config.output_dir / "img").write_text("in the way", encoding="utf-8")

    result = build_site(config)

    assert [f.stage for f in result.failures] == ["mkdir"]
    assert (config.output_dir / "top.txt").read_text(encoding="utf-8") == "top"


def test_missing_layout_is_fatal(tmp_path):
    config = create_project(tmp_path)
    config.layout_file.unlink()
    with pytest.raises(BuildError) as excinfo:
        build_site(config)
    assert excinfo.value.source_path == config.layout_file


def test_missing_source_directory_is_fatal(tmp_path):
    config = create_project(tmp_path)
    config.pages_dir.rmdir()
    with pytest.raises(BuildError) as excinfo:
        build_site(config)
    assert excinfo.value.source_path == config.pages_dir


def test_uncreatable_output_directory_is_fatal(tmp_path):
    config = create_project(tmp_path)
    config.output_dir.write_text("not a directory", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(config)
    assert "Cannot create output directory" in excinfo.value.message


def test_output_nested_in_source_is_not_rebuilt_from(tmp_path):
    config = create_project(tmp_path)
    nested = Config(
        pages_dir=config.pages_dir,
        output_dir=config.pages_dir / "dist",
        layout_file=config.layout_file,
        author="Ada",
    )
    (nested.pages_dir / "index.md").write_text("# Home", encoding="utf-8")
    (nested.pages_dir / "site.css").write_text("x", encoding="utf-8")

    build_site(nested)
    result = build_site(nested)

    assert not (nested.output_dir / "dist").exists()
    assert sorted(p.name for p in result.assets) == ["site.css"]


def test_render_pages_uses_clock(tmp_path):
    config = create_project(tmp_path, layout="{{ generated_at }}")
    config.output_dir.mkdir()
    (config.pages_dir / "a.md").write_text("a", encoding="utf-8")

    result = render_pages(
        config, load_layout(config.layout_file), clock=lambda: datetime(2020, 1, 1, 0, 0, 0)
    )

    assert result.assets == []
    assert (config.output_dir / "A.html").read_text(encoding="utf-8") == "2020-01-01 00:00:00"


def test_build_logs_progress(tmp_path, capsys):
    config = create_project(tmp_path)
    (config.pages_dir / "hello.md").write_text("hi", encoding="utf-8")
    (config.pages_dir / "a.txt").write_text("a", encoding="utf-8")

    result = build_site(config)

    out = capsys.readouterr().out
    assert "Processing" in out and "hello.md" in out
    assert "Copied" in out
    assert result.summary().startswith("Built 1 pages and copied 1 files")


def test_rebuild_site_reports_layout_error_and_copies_assets(tmp_path, capsys):
    config = create_project(tmp_path)
    (config.pages_dir / "index.md").write_text("# Home", encoding="utf-8")
    (config.pages_dir / "site.css").write_text("x", encoding="utf-8")
    config.layout_file.unlink()

    result = rebuild_site(config)

    assert result.pages == []
    assert [p.name for p in result.assets] == ["site.css"]
    assert [(f.path, f.stage) for f in result.failures] == [(config.layout_file, "pages")]
    assert "Cannot read layout file" in capsys.readouterr().err


def test_rebuild_site_missing_source_directory_is_fatal(tmp_path):
    config = create_project(tmp_path)
    config.pages_dir.rmdir()
    with pytest.raises(BuildError):
        rebuild_site(config)


def test_page_written_under_its_output_name(tmp_path):
    config = create_project(tmp_path, layout="{{ title }}")
    (config.pages_dir / "über.notes.md").write_text("x", encoding="utf-8")

    result = build_site(config)

    assert [p.name for p in result.pages] == ["Über.notes.html"]
    assert (config.output_dir / "Über.notes.html").read_text(encoding="utf-8") == "Über.notes"
