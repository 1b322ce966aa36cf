"""Unit tests for the FFmpeg HLS transcoder."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from contest_media.infrastructure.transcoder import (
    FFmpegHLSTranscoder,
    TranscodeError,
    TranscodeParams,
)

RUN = "contest_media.infrastructure.transcoder.ffmpeg_hls.subprocess.run"


@pytest.fixture
def transcoder():
    return FFmpegHLSTranscoder(ffmpeg_path="/usr/bin/ffmpeg", timeout_seconds=60)


def _fake_ffmpeg(segments: int = 2):
    """Return a subprocess.run stand-in that writes HLS output."""

    def run(cmd, **kwargs):
        master = Path(cmd[-1])
        pattern = cmd[cmd.index("-hls_segment_filename") + 1]
        for index in range(segments):
            Path(pattern % index).write_bytes(b"ts")
        master.write_text("#EXTM3U\n")
        return subprocess.CompletedProcess(cmd, 0, b"", b"")

    return run


class TestBuildCommand:
    """Tests for the ffmpeg argument vector."""

    def test_default_parameters(self, transcoder, tmp_path):
        cmd = transcoder.build_command(
            tmp_path / "in.mp4", tmp_path / "hls", TranscodeParams()
        )

        assert cmd == [
            "/usr/bin/ffmpeg",
            "-i",
            str(tmp_path / "in.mp4"),
            "-c:v",
            "libx264",
            "-c:a",
            "aac",
            "-hls_time",
            "10",
            "-hls_playlist_type",
            "vod",
            "-hls_segment_filename",
            str(tmp_path / "hls" / "segment_%03d.ts"),
            "-hls_list_size",
            "0",
            "-f",
            "hls",
            "-y",
            str(tmp_path / "hls" / "master.m3u8"),
        ]

    def test_custom_parameters(self, transcoder, tmp_path):
        params = TranscodeParams(segment_seconds=4, master_playlist_name="index.m3u8")

        cmd = transcoder.build_command(tmp_path / "in.mov", tmp_path, params)

        assert cmd[cmd.index("-hls_time") + 1] == "4"
        assert cmd[-1].endswith("index.m3u8")


class TestTranscodeToHls:
    """Tests for running the transcode."""

    async def test_success_returns_sorted_files(self, transcoder, tmp_path):
        output = tmp_path / "hls"
        with patch(RUN, side_effect=_fake_ffmpeg(segments=3)) as run:
            result = await transcoder.transcode_to_hls(tmp_path / "in.mp4", output)

        assert result.master_playlist == output / "master.m3u8"
        assert [p.name for p in result.files] == [
            "master.m3u8",
            "segment_000.ts",
            "segment_001.ts",
            "segment_002.ts",
        ]
        kwargs = run.call_args.kwargs
        assert kwargs["check"] is True
        assert kwargs["capture_output"] is True
        assert kwargs["timeout"] == 60

    async def test_nonzero_exit_keeps_stderr(self, transcoder, tmp_path):
        error = subprocess.CalledProcessError(
            1, ["ffmpeg"], stderr=b"in.mp4: Invalid data found when processing input\n"
        )
        with patch(RUN, side_effect=error), pytest.raises(TranscodeError) as exc_info:
            await transcoder.transcode_to_hls(tmp_path / "in.mp4", tmp_path / "hls")

        assert exc_info.value.returncode == 1
        assert exc_info.value.detail == "in.mp4: Invalid data found when processing input\n"

    async def test_timeout(self, transcoder, tmp_path):
        with (
            patch(RUN, side_effect=subprocess.TimeoutExpired(["ffmpeg"], 60)),
            pytest.raises(TranscodeError, match="timed out"),
        ):
            await transcoder.transcode_to_hls(tmp_path / "in.mp4", tmp_path / "hls")

    async def test_missing_executable(self, transcoder, tmp_path):
        with (
            patch(RUN, side_effect=FileNotFoundError("ffmpeg")),
            pytest.raises(TranscodeError, match="not found"),
        ):
            await transcoder.transcode_to_hls(tmp_path / "in.mp4", tmp_path / "hls")

    async def test_missing_master_playlist(self, transcoder, tmp_path):
        completed = subprocess.CompletedProcess(["ffmpeg"], 0, b"", b"")
        with patch(RUN, return_value=completed), pytest.raises(TranscodeError) as exc_info:
            await transcoder.transcode_to_hls(tmp_path / "in.mp4", tmp_path / "hls")

        assert "master.m3u8" in exc_info.value.detail


class TestTranscodeError:
    """Tests for TranscodeError detail."""

    def test_detail_prefers_stderr(self):
        assert TranscodeError("failed", stderr="boom").detail == "boom"

    def test_detail_falls_back_to_message(self):
        assert TranscodeError("failed", stderr="  \n").detail == "failed"
