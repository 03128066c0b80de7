"""Tests for clip_extractor.infrastructure.temp_files."""

import io
from pathlib import Path

import pytest

from clip_extractor.domain import CancellationToken
from clip_extractor.exceptions import OperationCancelledError, StagingFailedError
from clip_extractor.infrastructure.temp_files import (
    StagedFile,
    TempFileStream,
    extension_of,
    stage_source,
)


class BrokenStream(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        raise OSError("connection reset by peer")


class TestExtensionOf:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("movie.mp4", ".mp4"),
            ("archive.tar.gz", ".gz"),
            ("no extension", ""),
            ("dir.d/clip", ""),
            ("videos/movie.MKV", ".MKV"),
            (".mp4", ".mp4"),
            ("videos/.mov", ".mov"),
        ],
    )
    def test_extension(self, name: str, expected: str) -> None:
        assert extension_of(name) == expected


class TestStageSource:
    def test_copies_stream_and_keeps_extension(self, staging_dir: Path) -> None:
        contents = b"x" * (3 * 1024 * 1024 + 17)
        staged = stage_source("movie.mp4", io.BytesIO(contents), str(staging_dir))

        assert staged.path.parent == staging_dir
        assert staged.path.name.startswith("download-")
        assert staged.path.suffix == ".mp4"
        assert staged.path.read_bytes() == contents

        staged.release()
        assert not staged.path.exists()

    def test_name_that_is_only_an_extension(self, staging_dir: Path) -> None:
        with stage_source(".mp4", io.BytesIO(b"data"), str(staging_dir)) as staged:
            assert staged.path.suffix == ".mp4"
            assert staged.path.name.startswith("download-")

    def test_copies_with_token(self, staging_dir: Path) -> None:
        staged = stage_source(
            "song.flac", io.BytesIO(b"abc"), str(staging_dir), CancellationToken()
        )
        assert staged.path.read_bytes() == b"abc"
        staged.release()

    def test_unique_names(self, staging_dir: Path) -> None:
        first = stage_source("movie.mp4", io.BytesIO(b"1"), str(staging_dir))
        second = stage_source("movie.mp4", io.BytesIO(b"2"), str(staging_dir))
        assert first.path != second.path
        first.release()
        assert second.path.read_bytes() == b"2"
        second.release()

    def test_read_error_raises_and_cleans_up(self, staging_dir: Path) -> None:
        with pytest.raises(StagingFailedError) as excinfo:
            stage_source("movie.mp4", BrokenStream(), str(staging_dir))
        assert isinstance(excinfo.value.cause, OSError)
        assert list(staging_dir.iterdir()) == []

    def test_missing_temp_dir_raises(self, tmp_path: Path) -> None:
        with pytest.raises(StagingFailedError):
            stage_source("movie.mp4", io.BytesIO(b"x"), str(tmp_path / "missing"))

    def test_cancelled_token_cleans_up(self, staging_dir: Path) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            stage_source("movie.mp4", io.BytesIO(b"x"), str(staging_dir), token)
        assert list(staging_dir.iterdir()) == []


class TestStagedFile:
    def test_release_twice_is_harmless(self, tmp_path: Path) -> None:
        path = tmp_path / "staged.mp4"
        path.write_bytes(b"x")
        staged = StagedFile(path)

        staged.release()
        staged.release()

        assert staged.released
        assert not path.exists()

    def test_release_of_missing_file_is_logged_not_raised(self, tmp_path: Path) -> None:
        staged = StagedFile(tmp_path / "gone.mp4")
        staged.release()
        assert staged.released

    def test_context_manager_releases_on_error(self, tmp_path: Path) -> None:
        path = tmp_path / "staged.mp4"
        path.write_bytes(b"x")
        with pytest.raises(RuntimeError):
            with StagedFile(path):
                raise RuntimeError("boom")
        assert not path.exists()

    def test_release_does_not_touch_other_files(self, tmp_path: Path) -> None:
        first = tmp_path / "a.mp4"
        second = tmp_path / "b.mp4"
        first.write_bytes(b"a")
        second.write_bytes(b"b")
        staged = StagedFile(first)
        staged.release()
        staged.release()
        assert second.read_bytes() == b"b"


class TestTempFileStream:
    def test_read_then_close_deletes(self, tmp_path: Path) -> None:
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"clip contents")
        stream = TempFileStream(path)

        assert stream.read() == b"clip contents"
        assert path.exists()
        stream.close()

        assert stream.closed
        assert not path.exists()

    def test_close_after_partial_read(self, tmp_path: Path) -> None:
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"clip contents")
        with TempFileStream(path) as stream:
            assert stream.read(4) == b"clip"
        assert not path.exists()

    def test_double_close_is_harmless(self, tmp_path: Path) -> None:
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"x")
        stream = TempFileStream(path)
        stream.close()
        stream.close()
        assert not path.exists()

    def test_close_when_file_already_removed(self, tmp_path: Path) -> None:
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"x")
        stream = TempFileStream(path)
        path.unlink()
        stream.close()
        assert stream.closed

    def test_seek_and_tell(self, tmp_path: Path) -> None:
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"0123456789")
        with TempFileStream(path) as stream:
            assert stream.seek(0, io.SEEK_END) == 10
            assert stream.tell() == 10
            stream.seek(5)
            assert stream.read() == b"56789"
