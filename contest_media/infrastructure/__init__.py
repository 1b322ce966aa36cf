"""Infrastructure layer - external service implementations."""

from contest_media.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from contest_media.infrastructure.progress import (
    InMemoryProgressStore,
    ProgressStoreBase,
    ProgressSweeper,
)
from contest_media.infrastructure.transcoder import (
    FFmpegHLSTranscoder,
    TranscodeError,
    TranscoderBase,
    TranscodeParams,
    TranscodeResult,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    "get_factory",
    "reset_factory",
    # Progress
    "ProgressStoreBase",
    "InMemoryProgressStore",
    "ProgressSweeper",
    # Transcoder
    "TranscoderBase",
    "TranscodeParams",
    "TranscodeResult",
    "TranscodeError",
    "FFmpegHLSTranscoder",
]
