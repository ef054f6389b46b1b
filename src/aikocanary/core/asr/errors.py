"""Exceptions raised by the transcription service."""

from typing import Optional


class TranscriptionError(Exception):
    """Base class for every failed transcription request.

    ``str(error)`` is the user-facing message and is shown verbatim.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingInterpreterError(TranscriptionError):
    def __init__(self, path):
        super().__init__(f"Python not found at {path}.")
        self.path = path


class MissingModelError(TranscriptionError):
    def __init__(self, path):
        super().__init__(f"Model not found at {path}.")
        self.path = path


class ProcessFailedError(TranscriptionError):
    """The canary process exited with a non-zero status."""

    def __init__(self, stderr: str, returncode: Optional[int] = None):
        super().__init__(stderr if stderr.strip() else "Unknown error.")
        self.stderr = stderr
        self.returncode = returncode


class EmptyOutputError(TranscriptionError):
    """The canary process succeeded but wrote nothing to stdout."""

    def __init__(self, stderr: str):
        super().__init__(stderr if stderr.strip() else "Unknown error.")
        self.stderr = stderr


class InvalidOutputError(TranscriptionError):
    def __init__(self):
        super().__init__("Transcription output was not recognized.")
