"""
hive-chat error types.

Every error carries a stable ``code`` so callers (and the CLI) can branch on
the kind of failure without string matching.
"""

from typing import Any, Optional


class HiveChatError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class HttpError(HiveChatError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__("http_error", message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code


class CaptureError(HiveChatError):
    def __init__(self, message: str, code: str = "capture_error"):
        super().__init__(code, message)


class PermissionDeniedError(CaptureError):
    def __init__(self, message: str = "Microphone access denied. Please allow microphone access and try again."):
        super().__init__(message, code="permission_denied")


class DeviceNotFoundError(CaptureError):
    def __init__(self, message: str = "No microphone found. Please connect a microphone and try again."):
        super().__init__(message, code="device_not_found")


class FormatUnsupportedError(CaptureError):
    def __init__(self, message: str = "Audio recording is not supported on this platform."):
        super().__init__(message, code="format_unsupported")


class SizeLimitExceededError(HiveChatError):
    def __init__(self, size: int, limit: int):
        super().__init__(
            "size_limit_exceeded",
            f"File size must be less than {limit // (1024 * 1024)}MB",
            {"size": size, "limit": limit},
        )


class BlobStoreError(HiveChatError):
    def __init__(self, message: str, code: str = "blob_store_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class UploadFailedError(BlobStoreError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code="upload_failed", details=details)


class SendFailedError(HiveChatError):
    def __init__(self, message: str):
        super().__init__("send_failed", message)


class ComposerError(HiveChatError):
    def __init__(self, message: str, code: str = "composer_error"):
        super().__init__(code, message)


class ComposerBusyError(ComposerError):
    def __init__(self, message: str = "A send is already in progress."):
        super().__init__(message, code="composer_busy")


class EmptyDraftError(ComposerError):
    def __init__(self, message: str = "Nothing to send."):
        super().__init__(message, code="empty_draft")


class LocationError(HiveChatError):
    def __init__(self, message: str):
        super().__init__("location_unavailable", message)


class UnsupportedAttachmentError(HiveChatError):
    def __init__(self, message: str = "This file format is no longer supported. Please ask the sender to resend the file."):
        super().__init__("unsupported_attachment", message)
