"""FFmpeg implementation of HLS transcoding."""

import asyncio
import subprocess
from pathlib import Path

from contest_media.commons.telemetry import get_logger, timed
from contest_media.infrastructure.transcoder.base import (
    TranscodeError,
    TranscoderBase,
    TranscodeParams,
    TranscodeResult,
)


class FFmpegHLSTranscoder(TranscoderBase):
    """FFmpeg-based single-rendition HLS transcoder.

    Requires ffmpeg to be installed and available in PATH (or configured
    explicitly).
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        timeout_seconds: float | None = 3600,
        default_params: TranscodeParams | None = None,
    ) -> None:
        """Initialize the transcoder.

        Args:
            ffmpeg_path: Path to ffmpeg executable.
            timeout_seconds: Kill ffmpeg after this long. None disables.
            default_params: Parameters used when a call passes none.
        """
        self._ffmpeg = ffmpeg_path
        self._timeout = timeout_seconds
        self._default_params = default_params or TranscodeParams()
        self._logger = get_logger(__name__)

    def build_command(
        self,
        input_path: Path,
        output_dir: Path,
        params: TranscodeParams,
    ) -> list[str]:
        """Build the ffmpeg argument vector for an HLS transcode."""
        return [
            self._ffmpeg,
            "-i",
            str(input_path),
            "-c:v",
            params.video_codec,
            "-c:a",
            params.audio_codec,
            "-hls_time",
            str(params.segment_seconds),
            "-hls_playlist_type",
            params.playlist_type,
            "-hls_segment_filename",
            str(output_dir / params.segment_filename_pattern),
            "-hls_list_size",
            str(params.list_size),
            "-f",
            "hls",
            "-y",
            str(output_dir / params.master_playlist_name),
        ]

    @timed
    async def transcode_to_hls(
        self,
        input_path: Path,
        output_dir: Path,
        params: TranscodeParams | None = None,
    ) -> TranscodeResult:
        """Transcode a video into an HLS playlist with segments."""
        params = params or self._default_params
        output_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(input_path, output_dir, params)

        self._logger.info(
            "Starting HLS transcode",
            extra={"input": str(input_path), "output_dir": str(output_dir)},
        )

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: subprocess.run(
                    cmd,
                    capture_output=True,
                    check=True,
                    timeout=self._timeout,
                ),
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
            raise TranscodeError(
                f"ffmpeg exited with status {e.returncode}",
                stderr=stderr,
                returncode=e.returncode,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise TranscodeError(
                f"ffmpeg timed out after {self._timeout} seconds"
            ) from e
        except FileNotFoundError as e:
            raise TranscodeError(f"ffmpeg executable not found: {self._ffmpeg}") from e

        master = output_dir / params.master_playlist_name
        if not master.is_file():
            raise TranscodeError(
                f"ffmpeg produced no {params.master_playlist_name}"
            )

        files = sorted(p for p in output_dir.iterdir() if p.is_file())
        return TranscodeResult(output_dir=output_dir, master_playlist=master, files=files)
