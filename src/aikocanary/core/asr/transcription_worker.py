import time
from pathlib import Path

from PySide6.QtCore import QThread, Signal

from ...utils.logger import get_logger
from ..formatting import FormattingStyle, format_text
from .errors import TranscriptionError
from .transcriber import TranscriptionConfig, TranscriptionService

logger = get_logger(__name__)


class TranscriptionWorkerThread(QThread):
    """
    Background thread for one transcription request.

    Runs the blocking canary process wait off the UI thread, then applies
    the display formatting to the transcript.

    Signals:
        finished: Emitted on success (formatted_text, raw_text)
        error: Emitted when the request fails (error_message)
        cancelled: Emitted instead of finished/error after cancel()
    """

    finished = Signal(str, str)
    error = Signal(str)
    cancelled = Signal()

    def __init__(
        self,
        service: TranscriptionService,
        file_path: Path,
        config: TranscriptionConfig,
        style: FormattingStyle = FormattingStyle.SENTENCE_PER_LINE,
        paragraph_sentence_count: int = 3,
        wrap_width: int = 80,
        parent=None,
    ):
        super().__init__(parent)
        self._service = service
        self._file_path = Path(file_path)
        self._config = config
        self._style = style
        self._paragraph_sentence_count = paragraph_sentence_count
        self._wrap_width = wrap_width

    @property
    def file_path(self) -> Path:
        return self._file_path

    def cancel(self) -> None:
        self.requestInterruption()
        self._service.cancel()

    def run(self):
        start_time = time.time()
        logger.info(f"Background transcription started: {self._file_path.name}")

        try:
            raw_text = self._service.transcribe(self._file_path, self._config)
        except TranscriptionError as e:
            if self.isInterruptionRequested():
                self.cancelled.emit()
                return
            logger.warning(f"Transcription failed: {e}")
            self.error.emit(str(e))
            return
        except Exception as e:
            logger.exception(f"Background transcription error: {e}")
            self.error.emit(str(e))
            return

        if self.isInterruptionRequested():
            logger.info("Transcription result discarded after cancellation")
            self.cancelled.emit()
            return

        formatted = format_text(
            raw_text,
            style=self._style,
            paragraph_sentence_count=self._paragraph_sentence_count,
            wrap_width=self._wrap_width,
        )

        duration = time.time() - start_time
        logger.info(
            f"Transcription completed in {duration:.2f}s: "
            f"'{raw_text[:50]}{'...' if len(raw_text) > 50 else ''}'"
        )
        self.finished.emit(formatted, raw_text)
