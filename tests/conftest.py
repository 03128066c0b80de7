"""
Test configuration and shared fixtures.
"""

import io
import os
import stat
import sys
import threading
import time
from pathlib import Path

import pytest

from clip_extractor.exceptions import OperationCancelledError
from clip_extractor.infrastructure.interfaces import ObjectStore, Transcoder
from clip_extractor.infrastructure.temp_files import TempFileStream


class FakeObjectStore(ObjectStore):
    """In-memory object store that records every call."""

    def __init__(
        self,
        name: str = "movie.mp4",
        contents: bytes = b"0123456789abcdefghij",
        locator: str = "https://example.com/clip",
        fetch_error: Exception | None = None,
        store_error: Exception | None = None,
    ):
        self.name = name
        self.contents = contents
        self.locator = locator
        self.fetch_error = fetch_error
        self.store_error = store_error
        self.fetch_ids: list[str] = []
        self.store_calls: list[tuple[str, str]] = []
        self.stored_contents: bytes | None = None
        self.source_stream: io.BytesIO | None = None
        self.tokens: list = []

    def fetch(self, source_id, token=None):
        self.fetch_ids.append(source_id)
        self.tokens.append(token)
        if self.fetch_error is not None:
            raise self.fetch_error
        self.source_stream = io.BytesIO(self.contents)
        return self.name, self.source_stream

    def store(self, name, parent, data, token=None):
        self.store_calls.append((name, parent))
        self.tokens.append(token)
        if self.store_error is not None:
            raise self.store_error
        self.stored_contents = data.read()
        return self.locator


class FakeTranscoder(Transcoder):
    """Writes fixed clip bytes to a temp file instead of running ffmpeg."""

    def __init__(
        self,
        output_dir: Path,
        contents: bytes = b"clip contents",
        error: Exception | None = None,
    ):
        self.output_dir = output_dir
        self.contents = contents
        self.error = error
        self.calls: list[tuple[Path, object, object]] = []
        self.input_contents: bytes | None = None
        self.streams: list[TempFileStream] = []
        self.tokens: list = []

    def clip(self, path, start, end, token=None):
        self.calls.append((Path(path), start, end))
        self.tokens.append(token)
        self.input_contents = Path(path).read_bytes()
        if self.error is not None:
            raise self.error
        output = self.output_dir / f"clip-{len(self.calls)}{Path(path).suffix}"
        output.write_bytes(self.contents)
        stream = TempFileStream(output)
        self.streams.append(stream)
        return stream


class BlockingTranscoder(Transcoder):
    """Waits for its cancellation token instead of producing a clip."""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self.started = threading.Event()
        self.reason: str | None = None

    def clip(self, path, start, end, token=None):
        self.started.set()
        deadline = time.monotonic() + self.timeout
        while time.monotonic() < deadline:
            try:
                token.raise_if_cancelled("transcoding")
            except OperationCancelledError as e:
                self.reason = e.reason
                raise
            time.sleep(0.01)
        raise AssertionError("token never fired")


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "staging"
    directory.mkdir()
    return directory


@pytest.fixture
def clip_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "clips"
    directory.mkdir()
    return directory


FAKE_FFMPEG = """#!{python}
import json
import sys
import time

args = sys.argv[1:]
with open({log!r}, "w") as f:
    json.dump(args, f)

mode = {mode!r}
if mode == "fail":
    sys.stderr.write("movie.mp4: Invalid data found when processing input\\n")
    sys.exit(1)
if mode == "hang":
    time.sleep(60)
with open(args[-1], "wb") as f:
    f.write(b"clip bytes")
"""


@pytest.fixture
def fake_ffmpeg(tmp_path: Path):
    """
    Returns a factory that writes an executable stand-in for ffmpeg.

    The script records its argv as JSON in the returned log path and then
    either writes a clip ("ok"), exits 1 with a diagnostic ("fail"), or
    sleeps ("hang").
    """

    def make(mode: str = "ok") -> tuple[str, Path]:
        log = tmp_path / f"ffmpeg-{mode}-args.json"
        script = tmp_path / f"ffmpeg-{mode}"
        script.write_text(
            FAKE_FFMPEG.format(python=sys.executable, log=str(log), mode=mode)
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP)
        return str(script), log

    if os.name == "nt":
        pytest.skip("Fake ffmpeg script needs a POSIX shebang")
    return make
