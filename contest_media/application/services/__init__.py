"""Application services."""

from contest_media.application.services.conversion import (
    ConversionReporter,
    ConversionService,
    content_type_for,
)
from contest_media.application.services.playback import PlaybackService, SegmentStream
from contest_media.application.services.playlist import (
    playlist_directory,
    rewrite_playlist,
)
from contest_media.application.services.submissions import SubmissionStore
from contest_media.application.services.upload import UploadService

__all__ = [
    "SubmissionStore",
    "UploadService",
    "ConversionService",
    "ConversionReporter",
    "content_type_for",
    "PlaybackService",
    "SegmentStream",
    "rewrite_playlist",
    "playlist_directory",
]
