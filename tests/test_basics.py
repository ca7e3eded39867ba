"""Basic unit tests for the hive-chat package."""

from hive_chat import (
    AsyncHiveChat,
    HiveChat,
    HiveChatError,
    CaptureError,
    PermissionDeniedError,
    DeviceNotFoundError,
    FormatUnsupportedError,
    SizeLimitExceededError,
    UploadFailedError,
    SendFailedError,
    ComposerBusyError,
    __version__,
)
from hive_chat.errors import BlobStoreError, ComposerError, EmptyDraftError


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert HiveChat is not None
    assert AsyncHiveChat is not None


def test_error_hierarchy():
    assert issubclass(PermissionDeniedError, CaptureError)
    assert issubclass(DeviceNotFoundError, CaptureError)
    assert issubclass(FormatUnsupportedError, CaptureError)
    assert issubclass(CaptureError, HiveChatError)
    assert issubclass(UploadFailedError, BlobStoreError)
    assert issubclass(ComposerBusyError, ComposerError)
    assert issubclass(EmptyDraftError, ComposerError)
    assert issubclass(SendFailedError, HiveChatError)
    assert issubclass(SizeLimitExceededError, HiveChatError)


def test_error_attributes():
    err = HiveChatError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    size_err = SizeLimitExceededError(size=11 * 1024 * 1024, limit=10 * 1024 * 1024)
    assert size_err.code == "size_limit_exceeded"
    assert size_err.details == {"size": 11 * 1024 * 1024, "limit": 10 * 1024 * 1024}
    assert "10MB" in str(size_err)


def test_capture_error_codes():
    assert PermissionDeniedError().code == "permission_denied"
    assert DeviceNotFoundError().code == "device_not_found"
    assert FormatUnsupportedError().code == "format_unsupported"
    assert CaptureError("boom").code == "capture_error"
