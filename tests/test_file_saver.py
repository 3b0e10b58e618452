import os

import pytest

from coursemirror.file_saver import (
    archive_relpath,
    has_cached_copy,
    save_page,
    save_stream,
    url_to_filepath,
)
from coursemirror.url_resolver import LinkKind


def test_page_gets_html_suffix(tmp_path):
    out = str(tmp_path)
    path = url_to_filepath("https://site/cs3214/fall2023/faq", out)
    assert path == os.path.join(out, "cs3214", "fall2023", "faq.html")


def test_file_keeps_its_extension(tmp_path):
    out = str(tmp_path)
    path = url_to_filepath("https://site/course/slides.pdf", out)
    assert path == os.path.join(out, "course", "slides.pdf")


def test_explicit_kind_overrides_classification(tmp_path):
    out = str(tmp_path)
    assert url_to_filepath("https://site/course/slides.pdf", out, LinkKind.PAGE).endswith("slides.pdf.html")


def test_path_is_unquoted_and_cannot_escape_output(tmp_path):
    out = str(tmp_path)
    assert url_to_filepath("https://site/course/my%20notes", out) == os.path.join(out, "course", "my notes.html")
    assert url_to_filepath("https://site/course/../../etc/passwd", out) == os.path.join(
        out, "course", "etc", "passwd.html"
    )


def test_site_root_maps_to_index(tmp_path):
    assert url_to_filepath("https://site", str(tmp_path)) == os.path.join(str(tmp_path), "index.html")


def test_mapping_is_deterministic(tmp_path):
    url = "https://site/course/lectures/week1"
    assert url_to_filepath(url, str(tmp_path)) == url_to_filepath(url, str(tmp_path))


def test_archive_relpath_uses_forward_slashes(tmp_path):
    out = str(tmp_path)
    path = url_to_filepath("https://site/course/slides.pdf", out)
    assert archive_relpath(path, out) == "course/slides.pdf"


def test_has_cached_copy(tmp_path):
    out = str(tmp_path)
    assert not has_cached_copy("https://site/course/faq", out)
    assert not has_cached_copy("https://site/course/slides.pdf", out)

    (tmp_path / "course").mkdir()
    (tmp_path / "course" / "faq.html").write_text("<html></html>")
    (tmp_path / "course" / "slides.pdf").write_bytes(b"%PDF")

    assert has_cached_copy("https://site/course/faq", out)
    assert has_cached_copy("https://site/course/slides.pdf", out)


def test_save_page_creates_directories(tmp_path):
    path = str(tmp_path / "a" / "b" / "page.html")
    assert save_page(path, "<p>hi</p>") == 9
    assert (tmp_path / "a" / "b" / "page.html").read_text(encoding="utf-8") == "<p>hi</p>"


def test_save_stream_writes_all_chunks(tmp_path):
    path = str(tmp_path / "course" / "data.bin")
    assert save_stream(path, [b"abc", b"", b"def"]) == 6
    assert (tmp_path / "course" / "data.bin").read_bytes() == b"abcdef"
    assert not os.path.exists(path + ".part")


def test_save_stream_leaves_nothing_behind_on_error(tmp_path):
    path = str(tmp_path / "course" / "data.bin")

    def chunks():
        yield b"partial"
        raise ConnectionError("connection reset")

    with pytest.raises(ConnectionError):
        save_stream(path, chunks())

    assert not os.path.exists(path)
    assert not os.path.exists(path + ".part")
