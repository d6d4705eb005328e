from __future__ import annotations


class FileManagerError(Exception):
    status_code = 500
    public_message = 'Operation failed'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class InvalidRoot(FileManagerError):
    status_code = 400
    public_message = 'invalid root'


class PathEscape(FileManagerError):
    status_code = 403
    public_message = 'path escapes root'


class NotFound(FileManagerError):
    status_code = 404
    public_message = 'not found'


class StorageIOError(FileManagerError):
    """Underlying filesystem failure. The detail is logged, never shown to clients."""

    status_code = 500
    public_message = 'Filesystem operation failed'

    def __init__(self, message: str | None = None, *, cause: OSError | None = None):
        super().__init__(message)
        self.cause = cause

    @property
    def detail(self) -> str:
        if self.cause is not None and self.cause.strerror:
            return self.cause.strerror
        return self.public_message
