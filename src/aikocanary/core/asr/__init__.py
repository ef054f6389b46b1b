from .duration import probe_duration_seconds
from .environment import CanaryEnvironment
from .errors import (
    EmptyOutputError,
    InvalidOutputError,
    MissingInterpreterError,
    MissingModelError,
    ProcessFailedError,
    TranscriptionError,
)
from .transcriber import (
    InvocationParameters,
    TranscriptionConfig,
    TranscriptionService,
    build_command,
    derive_parameters,
    estimate_max_generation_delta,
    parse_transcription,
)
from .transcription_worker import TranscriptionWorkerThread

__all__ = [
    "CanaryEnvironment",
    "EmptyOutputError",
    "InvalidOutputError",
    "InvocationParameters",
    "MissingInterpreterError",
    "MissingModelError",
    "ProcessFailedError",
    "TranscriptionConfig",
    "TranscriptionError",
    "TranscriptionService",
    "TranscriptionWorkerThread",
    "build_command",
    "derive_parameters",
    "estimate_max_generation_delta",
    "parse_transcription",
    "probe_duration_seconds",
]
