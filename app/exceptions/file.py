"""File upload exceptions."""

from .base import BaseAppException


class UnsupportedFileTypeError(BaseAppException):
    """Raised when the sniffed content type is not an allowed image type."""

    def __init__(self, message: str = "unsupported_image_file"):
        super().__init__(message=message, status_code=400, error_code="UNSUPPORTED_FILE_TYPE")


class FileSizeLimitError(BaseAppException):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, message: str = "file_size_limit"):
        super().__init__(message=message, status_code=400, error_code="FILE_SIZE_LIMIT")


class FileStorageError(BaseAppException):
    """Raised when an upload cannot be written to disk or recorded."""

    def __init__(self, message: str = "internal_server_error"):
        super().__init__(message=message, status_code=500, error_code="FILE_STORAGE_ERROR")
