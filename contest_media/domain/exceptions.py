"""Domain exceptions for the contest media pipeline."""


class DomainException(Exception):
    """Base exception for domain errors."""


class SubmissionNotFoundException(DomainException):
    """Raised when a requested submission is not found."""

    def __init__(self, reference: int | str) -> None:
        self.reference = reference
        super().__init__(f"Submission not found: {reference}")


class SubmissionAlreadyConvertedException(DomainException):
    """Raised when a conversion is requested for a submission that has HLS."""

    def __init__(self, submission_id: int) -> None:
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} is already converted to HLS")


class RawAssetMissingException(DomainException):
    """Raised when a submission has no raw upload to transcode or sign."""

    def __init__(self, submission_id: int) -> None:
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} has no raw video")


class PlaylistNotAvailableException(DomainException):
    """Raised when playback is requested before HLS conversion."""

    def __init__(self, submission_id: int) -> None:
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} has no HLS playlist")


class ConversionInProgressException(DomainException):
    """Raised when a conversion for the same submission is already running."""

    def __init__(self, submission_id: int) -> None:
        self.submission_id = submission_id
        super().__init__(f"Conversion already in progress for submission {submission_id}")


class UploadValidationError(DomainException):
    """Raised when an upload is rejected before any side effect."""

    def __init__(self, reason: str, field: str | None = None) -> None:
        self.reason = reason
        self.field = field
        super().__init__(reason)


class StorageObjectNotFoundException(DomainException):
    """Raised when an expected object is missing from storage."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Object not found in storage: {key}")


class StorageOperationError(DomainException):
    """Raised when the object store fails an operation."""

    def __init__(self, operation: str, key: str, reason: str) -> None:
        self.operation = operation
        self.key = key
        self.reason = reason
        super().__init__(f"Storage {operation} failed for {key}: {reason}")


class TranscodeFailedError(DomainException):
    """Raised when the transcoder exits unsuccessfully."""

    def __init__(self, submission_id: int, detail: str) -> None:
        self.submission_id = submission_id
        self.detail = detail
        super().__init__(f"Transcoding failed for submission {submission_id}: {detail}")


class ConversionFailedError(DomainException):
    """Raised when the HLS pipeline fails outside the transcoder."""

    def __init__(self, submission_id: int, phase: str, reason: str) -> None:
        self.submission_id = submission_id
        self.phase = phase
        self.reason = reason
        super().__init__(
            f"Conversion failed for submission {submission_id} at {phase}: {reason}"
        )


class InvalidSegmentKeyException(DomainException):
    """Raised when a proxied key lies outside the HLS namespace."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Key is not an HLS object: {key}")
