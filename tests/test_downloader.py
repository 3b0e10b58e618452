import os

import pytest
import requests

from coursemirror.downloader import DownloadQueue
from coursemirror.errors import MappingCollisionError
from coursemirror.recorder import MappingRecorder

from conftest import FakeSession

SLIDES = "https://site/course/slides.pdf"


def make_queue(config, files):
    recorder = MappingRecorder()
    session = FakeSession(files)
    return DownloadQueue(config, recorder, session=session), recorder, session


def test_download_writes_file_and_records_mapping(config):
    queue, recorder, _ = make_queue(config, {SLIDES: b"%PDF-1.7"})

    future = queue.submit(SLIDES)
    results = queue.join()
    queue.shutdown()

    assert future.result().status == "downloaded"
    assert [r.url for r in results] == [SLIDES]
    assert results[0].size == 8
    with open(os.path.join(config.output_folder, "course", "slides.pdf"), "rb") as f:
        assert f.read() == b"%PDF-1.7"
    assert recorder.snapshot() == {"course/slides.pdf": SLIDES}


def test_http_error_is_reported_not_raised(config):
    queue, recorder, _ = make_queue(config, {SLIDES: (404, b"not found")})

    queue.submit(SLIDES)
    [result] = queue.join()
    queue.shutdown()

    assert not result.ok
    assert result.error.reason == "HTTP 404"
    assert not os.path.exists(os.path.join(config.output_folder, "course", "slides.pdf"))
    assert len(recorder) == 0


def test_broken_stream_leaves_no_file_and_no_mapping(config):
    chunks = [b"partial", requests.exceptions.ChunkedEncodingError("connection broken")]
    queue, recorder, _ = make_queue(config, {SLIDES: chunks})

    queue.submit(SLIDES)
    [result] = queue.join()
    queue.shutdown()

    assert result.status == "failed"
    target = os.path.join(config.output_folder, "course", "slides.pdf")
    assert not os.path.exists(target)
    assert not os.path.exists(target + ".part")
    assert len(recorder) == 0


def test_cached_file_is_not_fetched_but_still_mapped(config):
    config.use_cache = True
    target_dir = os.path.join(config.output_folder, "course")
    os.makedirs(target_dir)
    with open(os.path.join(target_dir, "slides.pdf"), "wb") as f:
        f.write(b"old")

    queue, recorder, session = make_queue(config, {SLIDES: b"new"})
    queue.submit(SLIDES)
    [result] = queue.join()
    queue.shutdown()

    assert result.status == "cached"
    assert session.requested == []
    assert recorder.snapshot() == {"course/slides.pdf": SLIDES}
    with open(os.path.join(target_dir, "slides.pdf"), "rb") as f:
        assert f.read() == b"old"


def test_cache_disabled_downloads_again(config):
    target_dir = os.path.join(config.output_folder, "course")
    os.makedirs(target_dir)
    with open(os.path.join(target_dir, "slides.pdf"), "wb") as f:
        f.write(b"old")

    queue, _, session = make_queue(config, {SLIDES: b"new"})
    queue.submit(SLIDES)
    queue.join()
    queue.shutdown()

    assert session.requested == [SLIDES]
    with open(os.path.join(target_dir, "slides.pdf"), "rb") as f:
        assert f.read() == b"new"


def test_many_downloads_all_complete_before_join_returns(config):
    files = {f"https://site/course/files/f{i}.txt": str(i).encode() for i in range(20)}
    queue, recorder, _ = make_queue(config, files)

    for url in files:
        queue.submit(url)
    results = queue.join()
    queue.shutdown()

    assert len(results) == 20
    assert all(r.ok for r in results)
    assert len(recorder) == 20


def test_collision_is_detected_before_anything_is_written(config):
    queue, recorder, session = make_queue(config, {SLIDES: b"%PDF"})
    recorder.reserve("course/slides.pdf", "https://site/other/slides.pdf")

    queue.submit(SLIDES)
    with pytest.raises(MappingCollisionError):
        queue.join()
    queue.shutdown()

    assert session.requested == []
    assert not os.path.exists(os.path.join(config.output_folder, "course", "slides.pdf"))
    assert recorder.snapshot() == {"course/slides.pdf": "https://site/other/slides.pdf"}


def test_worker_collision_is_visible_before_join(config):
    queue, recorder, _ = make_queue(config, {SLIDES: b"%PDF"})
    recorder.reserve("course/slides.pdf", "https://site/other/slides.pdf")

    queue.check_collision()
    future = queue.submit(SLIDES)
    with pytest.raises(MappingCollisionError):
        future.result()

    with pytest.raises(MappingCollisionError) as excinfo:
        queue.check_collision()
    assert excinfo.value.new_url == SLIDES
    queue.shutdown()


def test_failed_download_gives_its_path_back(config):
    queue, recorder, _ = make_queue(config, {SLIDES: (500, b"")})

    queue.submit(SLIDES)
    [result] = queue.join()
    queue.shutdown()

    assert not result.ok
    # The path is free again for a later run or another writer
    recorder.reserve("course/slides.pdf", SLIDES)
