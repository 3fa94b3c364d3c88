import enum


class ErrorKind(str, enum.Enum):
    NO_HAND_DETECTED = "no_hand_detected"
    TOO_FEW_FRAMES = "too_few_frames"
    MISSING_NAME = "missing_name"
    MALFORMED_INPUT = "malformed_input"
    MALFORMED_TEMPLATE = "malformed_template"
    STORAGE_FAILURE = "storage_failure"


class GestureError(Exception):
    """Base error of the matching core. `kind` tells callers what went wrong."""
    kind = ErrorKind.MALFORMED_INPUT

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)
        self.message = message or self.kind.value


class MalformedInputError(GestureError):
    kind = ErrorKind.MALFORMED_INPUT


class MalformedTemplateError(GestureError):
    kind = ErrorKind.MALFORMED_TEMPLATE


class TooFewFramesError(GestureError):
    kind = ErrorKind.TOO_FEW_FRAMES


class MissingNameError(GestureError):
    kind = ErrorKind.MISSING_NAME


class StorageFailureError(GestureError):
    kind = ErrorKind.STORAGE_FAILURE
