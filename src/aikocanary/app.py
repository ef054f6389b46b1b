"""Application runtime: the recording and transcription session."""

from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QObject, Signal, Slot

from aikocanary.core.asr import TranscriptionService, TranscriptionWorkerThread
from aikocanary.core.audio import AudioRecorder
from aikocanary.core.settings import Settings, get_settings
from aikocanary.utils.logger import get_logger

logger = get_logger(__name__)

NO_AUDIO_MESSAGE = "No audio file available to transcribe."


class AppStage(Enum):
    IDLE = auto()
    RECORDING = auto()
    TRANSCRIBING = auto()
    RESULT = auto()


class AikoCanaryApp(QObject):
    """
    Drives one session: record or import audio, transcribe it, show the result.

    Starting a new transcription always cancels the one in flight. Results of
    cancelled workers are dropped.
    """

    stage_changed = Signal(object)  # AppStage
    transcript_ready = Signal(str)
    error_occurred = Signal(str)
    audio_level = Signal(float)

    def __init__(
        self,
        settings: Optional[Settings] = None,
        service: Optional[TranscriptionService] = None,
        recorder: Optional[AudioRecorder] = None,
        parent=None,
    ):
        super().__init__(parent)

        self._settings = settings or get_settings()
        self._service = service or TranscriptionService()
        self._recorder = recorder or AudioRecorder(
            sample_rate=self._settings.sample_rate,
            device=self._settings.input_device,
            on_audio_level=self.audio_level.emit,
        )

        self._stage = AppStage.IDLE
        self._transcript = ""
        self._recording_started_at: Optional[datetime] = None
        self._worker: Optional[TranscriptionWorkerThread] = None
        # Cancelled workers whose threads have not exited yet
        self._retired_workers: List[TranscriptionWorkerThread] = []

    @property
    def stage(self) -> AppStage:
        return self._stage

    @property
    def transcript(self) -> str:
        return self._transcript

    @property
    def recording_started_at(self) -> Optional[datetime]:
        return self._recording_started_at

    @property
    def settings(self) -> Settings:
        return self._settings

    def _set_stage(self, stage: AppStage) -> None:
        if stage == self._stage:
            return
        logger.debug(f"Stage {self._stage.name} -> {stage.name}")
        self._stage = stage
        self.stage_changed.emit(stage)

    def _show_error(self, message: str) -> None:
        logger.error(message)
        self.error_occurred.emit(message)

    def start_recording(self) -> bool:
        if self._recorder.start():
            self._recording_started_at = datetime.now()
            self._set_stage(AppStage.RECORDING)
            logger.info("Recording started")
            return True

        error_msg = self._recorder.last_error or "Failed to start recording"
        self._show_error(f"Failed to start recording: {error_msg}")
        return False

    def discard_recording(self) -> None:
        self._recorder.discard()
        self._recording_started_at = None
        self._set_stage(AppStage.IDLE)

    def transcribe_recording(self) -> None:
        path = self._recorder.stop()
        self._recording_started_at = None
        self.start_transcription(path)

    def start_transcription(self, file_path: Optional[Path]) -> None:
        if file_path is None:
            self._set_stage(AppStage.IDLE)
            self._show_error(NO_AUDIO_MESSAGE)
            return

        self._cancel_worker()
        self._set_stage(AppStage.TRANSCRIBING)

        settings = self._settings
        worker = TranscriptionWorkerThread(
            service=self._service,
            file_path=Path(file_path),
            config=settings.to_transcription_config(),
            style=settings.formatting_style,
            paragraph_sentence_count=settings.paragraph_sentence_count,
            wrap_width=settings.wrap_width,
        )
        worker.finished.connect(self._on_worker_finished)
        worker.error.connect(self._on_worker_error)
        worker.cancelled.connect(self._on_worker_cancelled)
        self._worker = worker
        worker.start()

    def stop_transcription(self) -> None:
        self._cancel_worker()
        self._set_stage(AppStage.IDLE)

    def reset_session(self) -> None:
        self._cancel_worker()
        self._transcript = ""
        self._set_stage(AppStage.IDLE)

    def shutdown(self, timeout_ms: int = 5000) -> None:
        """Cancel any transcription and wait for worker threads to exit."""
        current = self._worker
        self._cancel_worker()
        if self._recorder.is_recording:
            self._recorder.discard()
        for worker in [current, *self._retired_workers]:
            if worker is not None:
                worker.wait(timeout_ms)
        self._retired_workers.clear()

    def _cancel_worker(self) -> None:
        self._retired_workers = [w for w in self._retired_workers if w.isRunning()]
        worker = self._worker
        self._worker = None
        if worker is not None and worker.isRunning():
            logger.info("Cancelling running transcription")
            worker.cancel()
            self._retired_workers.append(worker)
        self._service.cancel()

    @Slot(str, str)
    def _on_worker_finished(self, formatted: str, raw: str) -> None:
        if self.sender() is not self._worker:
            return
        self._transcript = formatted
        self._set_stage(AppStage.RESULT)
        self.transcript_ready.emit(formatted)

    @Slot(str)
    def _on_worker_error(self, message: str) -> None:
        if self.sender() is not self._worker:
            return
        self._set_stage(AppStage.IDLE)
        self._show_error(message)

    @Slot()
    def _on_worker_cancelled(self) -> None:
        logger.debug("Transcription worker stopped after cancellation")
