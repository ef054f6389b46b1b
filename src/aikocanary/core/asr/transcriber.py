"""
Transcription service driving the external canary-mlx command line tool.

Resolves the interpreter and model, derives chunking and generation bounds
from the input duration, runs exactly one child process at a time and parses
the transcript from its output. The blocking call is meant to run off the UI
thread; ``cancel()`` may be called from any thread.
"""

import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ...utils.logger import get_logger
from ..settings.config import (
    AUTO_CHUNK_DURATION_SECONDS,
    AUTO_CHUNK_THRESHOLD_SECONDS,
    AUTO_OVERLAP_SECONDS,
    CLI_ENTRYPOINT,
    CLI_MODULE,
    MAX_MAX_GENERATION_DELTA,
    MIN_MAX_GENERATION_DELTA,
    PROCESS_STOP_TIMEOUT_SECONDS,
    TOKENS_PER_SECOND_ESTIMATE,
)
from .duration import probe_duration_seconds
from .environment import CanaryEnvironment
from .errors import (
    EmptyOutputError,
    MissingInterpreterError,
    MissingModelError,
    ProcessFailedError,
)

logger = get_logger(__name__)


class TranscriptionConfig(BaseModel):
    """Parameters of a single transcription request. Immutable."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    source_lang: str = "en"
    target_lang: str = "en"
    task: str = "transcribe"
    pnc: bool = True
    model_path: Optional[Path] = None
    python_path: Optional[Path] = None
    canary_root: Optional[Path] = None
    prompt_text: Optional[str] = None
    chunk_duration: Optional[float] = Field(default=None, gt=0)
    overlap_duration: Optional[float] = Field(default=None, ge=0)
    max_generation_delta: Optional[int] = Field(default=None, gt=0)
    max_new_tokens: Optional[int] = Field(default=None, gt=0)


@dataclass(frozen=True)
class InvocationParameters:
    duration_seconds: Optional[float] = None
    chunk_duration: Optional[float] = None
    overlap_duration: Optional[float] = None
    max_generation_delta: Optional[int] = None
    max_new_tokens: Optional[int] = None


def estimate_max_generation_delta(duration_seconds: float) -> int:
    estimate = int(round(duration_seconds * TOKENS_PER_SECOND_ESTIMATE))
    return min(MAX_MAX_GENERATION_DELTA, max(MIN_MAX_GENERATION_DELTA, estimate))


def derive_parameters(
    config: TranscriptionConfig, duration_seconds: Optional[float]
) -> InvocationParameters:
    """
    Fill in the chunking and generation bounds the caller left unset.

    Recordings longer than the chunking threshold are processed in
    overlapping windows. The generation bound is only derived when neither
    ``max_generation_delta`` nor ``max_new_tokens`` was given, and falls back
    to the floor when no duration is known.
    """
    chunk_duration = config.chunk_duration
    overlap_duration = config.overlap_duration
    max_generation_delta = config.max_generation_delta

    if (
        chunk_duration is None
        and duration_seconds is not None
        and duration_seconds > AUTO_CHUNK_THRESHOLD_SECONDS
    ):
        chunk_duration = AUTO_CHUNK_DURATION_SECONDS
        overlap_duration = AUTO_OVERLAP_SECONDS

    if max_generation_delta is None and config.max_new_tokens is None:
        if duration_seconds is not None:
            basis = chunk_duration if chunk_duration is not None else duration_seconds
            max_generation_delta = estimate_max_generation_delta(basis)
        else:
            max_generation_delta = MIN_MAX_GENERATION_DELTA

    return InvocationParameters(
        duration_seconds=duration_seconds,
        chunk_duration=chunk_duration,
        overlap_duration=overlap_duration,
        max_generation_delta=max_generation_delta,
        max_new_tokens=config.max_new_tokens,
    )


def build_command(
    python_path: Path,
    model_path: Path,
    config: TranscriptionConfig,
    params: InvocationParameters,
    file_path: Path,
) -> List[str]:
    cmd = [
        str(python_path),
        "-m",
        CLI_MODULE,
        CLI_ENTRYPOINT,
        "--model",
        str(model_path),
        "--source-lang",
        config.source_lang,
        "--target-lang",
        config.target_lang,
        "--task",
        config.task,
        "--pnc" if config.pnc else "--no-pnc",
    ]
    if params.chunk_duration is not None:
        cmd.extend(["--chunk-duration", str(float(params.chunk_duration))])
        if params.overlap_duration is not None:
            cmd.extend(["--overlap-duration", str(float(params.overlap_duration))])
    if params.max_generation_delta is not None:
        cmd.extend(["--max-generation-delta", str(params.max_generation_delta)])
    if params.max_new_tokens is not None:
        cmd.extend(["--max-new-tokens", str(params.max_new_tokens)])
    cmd.append(str(file_path))
    return cmd


def parse_transcription(output: str) -> str:
    """
    Extract the transcript from the tool's stdout.

    The tool prints progress lines followed by one result line, usually of
    the form ``label: text``. The last non-blank line wins; anything up to
    its first colon is dropped.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        return output.strip()

    last = lines[-1]
    _, separator, text = last.partition(":")
    if separator:
        return text.strip()
    return last.strip()


@dataclass
class _Request:
    process: Optional[subprocess.Popen] = None
    cancelled: bool = False


class TranscriptionService:
    """
    Runs canary-mlx transcriptions, one child process at a time.

    Example:
        service = TranscriptionService()
        text = service.transcribe("meeting.wav", TranscriptionConfig())
    """

    def __init__(
        self,
        environment: Optional[CanaryEnvironment] = None,
        duration_probe: Optional[Callable[[Path], Optional[float]]] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        self._environment = environment or CanaryEnvironment()
        self._probe_duration = duration_probe or probe_duration_seconds
        self._popen = popen
        # Guards _request and each request's process/cancelled fields.
        # _launch_lock serializes process replacement.
        self._lock = threading.Lock()
        self._launch_lock = threading.Lock()
        self._request: Optional[_Request] = None

    @property
    def environment(self) -> CanaryEnvironment:
        return self._environment

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._request is not None and self._request.process is not None

    def transcribe(
        self, file_path, config: Optional[TranscriptionConfig] = None
    ) -> str:
        """
        Transcribe a media file with the external tool.

        Blocks until the child process exits. A previous request still owned
        by this service is cancelled first; its process is terminated before
        the new one is launched.

        Args:
            file_path: Audio or video file to transcribe
            config: Request parameters; defaults are used when omitted

        Returns:
            The transcript, or an empty string if the request was cancelled.

        Raises:
            MissingInterpreterError: The interpreter does not exist.
            MissingModelError: The model does not exist.
            ProcessFailedError: The tool exited with a non-zero status.
            EmptyOutputError: The tool produced no output.
        """
        config = config or TranscriptionConfig()
        file_path = Path(file_path).absolute()

        request, previous = self._begin()
        try:
            python_path = self._environment.resolve_interpreter_path(config.python_path)
            model_path = self._environment.resolve_model_path(config.model_path)
            if not python_path.exists():
                raise MissingInterpreterError(python_path)
            if not model_path.exists():
                raise MissingModelError(model_path)

            duration = self._measure_duration(file_path)
            params = derive_parameters(config, duration)
            cmd = build_command(
                python_path.absolute(), model_path.absolute(), config, params, file_path
            )
            cwd = self._environment.resolve_tool_root(config.canary_root)

            logger.info(
                f"Transcribing {file_path.name}: duration={duration}, "
                f"chunk={params.chunk_duration}, "
                f"max_generation_delta={params.max_generation_delta}"
            )
            logger.debug(f"Running {' '.join(cmd)} (cwd={cwd or Path.cwd()})")

            if not self._launch(request, previous, cmd, cwd):
                logger.info("Transcription cancelled before launch")
                return ""

            try:
                stdout, stderr = request.process.communicate()
            except BaseException:
                with self._lock:
                    self._terminate(request)
                raise
        finally:
            self._release(request)

        return self._classify(request, stdout or "", stderr or "")

    def cancel(self) -> None:
        """Cancel the current request, if any. Safe to call repeatedly."""
        with self._lock:
            request, self._request = self._request, None
            if request is None:
                return
            self._terminate(request)
        logger.info("Transcription cancelled")

    def _begin(self) -> Tuple[_Request, Optional[_Request]]:
        request = _Request()
        with self._lock:
            previous, self._request = self._request, request
            if previous is not None:
                self._terminate(previous)
        return request, previous

    def _measure_duration(self, file_path: Path) -> Optional[float]:
        try:
            return self._probe_duration(file_path)
        except Exception as e:
            logger.warning(f"Duration probe failed for {file_path}: {e}")
            return None

    def _launch(
        self,
        request: _Request,
        previous: Optional[_Request],
        cmd: List[str],
        cwd: Optional[Path],
    ) -> bool:
        """Start the child for ``request``. Returns False if it was cancelled first."""
        with self._launch_lock:
            if previous is not None and previous.process is not None:
                logger.info("Stopping previous transcription process")
                self._wait_stopped(previous.process)

            with self._lock:
                if request.cancelled:
                    return False
                try:
                    request.process = self._popen(
                        cmd,
                        cwd=str(cwd) if cwd is not None else None,
                        stdin=subprocess.DEVNULL,
                        stdout=subprocess.PIPE,
                        stderr=subprocess.PIPE,
                        text=True,
                        encoding="utf-8",
                        errors="replace",
                    )
                except OSError as e:
                    raise ProcessFailedError(f"Failed to launch {cmd[0]}: {e}") from e
        return True

    def _release(self, request: _Request) -> None:
        with self._lock:
            if self._request is request:
                self._request = None

    @staticmethod
    def _terminate(request: _Request) -> None:
        """Mark ``request`` cancelled and signal its process. Call with the lock held."""
        request.cancelled = True
        process = request.process
        if process is None or process.poll() is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            # Exited between poll() and terminate()
            pass

    @staticmethod
    def _wait_stopped(process: subprocess.Popen) -> None:
        try:
            process.wait(timeout=PROCESS_STOP_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            logger.warning("Previous process ignored SIGTERM, killing it")
            process.kill()
            process.wait()

    @staticmethod
    def _classify(request: _Request, stdout: str, stderr: str) -> str:
        returncode = request.process.returncode
        if request.cancelled:
            logger.debug(f"Process ended after cancellation (exit code {returncode})")
            return ""

        if returncode != 0:
            logger.error(f"Transcription process failed with exit code {returncode}")
            raise ProcessFailedError(stderr, returncode)

        if not stdout.strip():
            logger.warning("Transcription process produced no output")
            raise EmptyOutputError(stderr)

        return parse_transcription(stdout)
