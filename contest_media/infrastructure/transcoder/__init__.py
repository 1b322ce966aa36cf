"""HLS transcoding services."""

from contest_media.infrastructure.transcoder.base import (
    TranscodeError,
    TranscoderBase,
    TranscodeParams,
    TranscodeResult,
)
from contest_media.infrastructure.transcoder.ffmpeg_hls import FFmpegHLSTranscoder

__all__ = [
    # Base
    "TranscoderBase",
    "TranscodeParams",
    "TranscodeResult",
    "TranscodeError",
    # Implementations
    "FFmpegHLSTranscoder",
]
