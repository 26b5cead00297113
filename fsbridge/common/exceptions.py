"""Exceptions raised by the workspace bridge."""

import errno


class WorkspaceError(Exception):
    """Base exception for workspace bridge errors."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.original_error:
            return f"{base_msg} (Caused by: {type(self.original_error).__name__}: {str(self.original_error)})"
        return base_msg


class NotConfiguredError(WorkspaceError):
    """A path operation was attempted before a workspace root was set."""

    def __init__(self, message: str = "workingDir is not set"):
        super().__init__(message)


# inotify reports ENOSPC for the per-user watch limit and EMFILE for the
# instance limit; both mean the OS ran out of watch descriptors.
RESOURCE_EXHAUSTION_ERRNOS = {errno.ENOSPC, errno.EMFILE}


class WatchSetupError(WorkspaceError):
    """Opening a directory watch failed."""

    def __init__(self, path: str, original_error: OSError):
        super().__init__(f"Could not watch {path}", original_error)
        self.path = path
        self.errno = original_error.errno

    @property
    def code(self) -> str | None:
        if self.errno is None:
            return None
        return errno.errorcode.get(self.errno)

    @property
    def is_resource_exhausted(self) -> bool:
        if self.errno in RESOURCE_EXHAUSTION_ERRNOS:
            return True
        # Older watchdog releases raise a bare OSError with only the message
        return "limit reached" in str(self.original_error)
