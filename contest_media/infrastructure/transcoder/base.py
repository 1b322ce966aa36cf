"""Abstract base class for HLS transcoding."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


class TranscodeError(Exception):
    """Raised when the transcoder cannot produce an HLS rendition."""

    def __init__(
        self,
        message: str,
        stderr: str = "",
        returncode: int | None = None,
    ) -> None:
        self.message = message
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(message)

    @property
    def detail(self) -> str:
        """Transcoder stderr verbatim, falling back to the message."""
        return self.stderr if self.stderr.strip() else self.message


@dataclass
class TranscodeParams:
    """Encoding parameters for one HLS rendition."""

    video_codec: str = "libx264"
    audio_codec: str = "aac"
    segment_seconds: int = 10
    playlist_type: str = "vod"
    list_size: int = 0
    master_playlist_name: str = "master.m3u8"
    segment_filename_pattern: str = "segment_%03d.ts"


@dataclass
class TranscodeResult:
    """Files produced by a transcode."""

    output_dir: Path
    master_playlist: Path
    files: list[Path] = field(default_factory=list)


class TranscoderBase(ABC):
    """Abstract base class for turning a video file into an HLS tree.

    Implementations should handle:
    - FFmpeg (subprocess)
    """

    @abstractmethod
    async def transcode_to_hls(
        self,
        input_path: Path,
        output_dir: Path,
        params: TranscodeParams | None = None,
    ) -> TranscodeResult:
        """Transcode a video into an HLS playlist with segments.

        Args:
            input_path: Source video file.
            output_dir: Directory receiving the playlist and segments.
            params: Encoding parameters. Defaults apply when omitted.

        Returns:
            The produced files.

        Raises:
            TranscodeError: If the transcoder fails or times out.
        """
