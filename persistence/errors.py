import errno
from enum import IntEnum

class ErrorCode(IntEnum):
    OK = 0
    FAILED = 1
    INVALID_NAME = 2
    INVALID_DATA = 3
    CYCLIC_LINK = 4
    ENCODE_FAILED = 5
    CANT_CREATE = 6
    CANT_WRITE = 7
    FILE_NOT_FOUND = 8
    NO_PERMISSION = 9
    OUT_OF_SPACE = 10

    @classmethod
    def from_os_error(cls, error: OSError) -> "ErrorCode":
        return {
            errno.ENOENT: cls.FILE_NOT_FOUND,
            errno.ENOTDIR: cls.FILE_NOT_FOUND,
            errno.EACCES: cls.NO_PERMISSION,
            errno.EPERM: cls.NO_PERMISSION,
            errno.EROFS: cls.NO_PERMISSION,
            errno.ENOSPC: cls.OUT_OF_SPACE,
        }.get(error.errno, cls.CANT_WRITE)

# ----------------------------------------------------------------------------------------

class SaveError(Exception):
    """Base class for failures of a single save step."""

    step = "save"

    def __init__(self, message: str, code: ErrorCode = ErrorCode.FAILED) -> None:
        super().__init__(message)
        self.code = code

class InvalidSourcePath(SaveError):
    step = "resolve"

    def __init__(self, message: str = "Source path is empty.") -> None:
        super().__init__(message, ErrorCode.INVALID_DATA)

class InvalidSceneName(SaveError):
    step = "resolve"

    def __init__(self, message: str = "Scene name is empty.") -> None:
        super().__init__(message, ErrorCode.INVALID_NAME)

class DirectoryCreateFailed(SaveError):
    step = "directory"

class PackFailed(SaveError):
    step = "pack"

class WriteFailed(SaveError):
    step = "write"
