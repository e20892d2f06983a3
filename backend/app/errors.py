from fastapi import status

class BaseAppException(Exception):
    def __init__(self, code: str, message: str, http_status: int):
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)

class NotFoundError(BaseAppException):
    def __init__(self, code: str, message: str):
        super().__init__(code, message, status.HTTP_404_NOT_FOUND)

class ValidationAppError(BaseAppException):
    def __init__(self, code: str, message: str):
        super().__init__(code, message, status.HTTP_400_BAD_REQUEST)


# --- Layout engine taxonomy (recoverable validation failures) ---

class LayoutError(ValidationAppError):
    code = "LAYOUT_ERROR"

    def __init__(self, message: str):
        super().__init__(self.code, message)

class InvalidFormatError(LayoutError):
    """Malformed clock-time or date string."""
    code = "INVALID_FORMAT"

class InvalidGranularityError(LayoutError):
    """Zoom granularity outside the supported set."""
    code = "INVALID_GRANULARITY"

class OutOfRangeError(LayoutError):
    """Minutes outside [0, 1439] or a date span outside [1, 14]."""
    code = "OUT_OF_RANGE"

class InvalidGestureError(LayoutError):
    """Gesture not allowed for the task shape, or used after it ended."""
    code = "INVALID_GESTURE"
