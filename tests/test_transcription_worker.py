"""Tests for the background transcription thread."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from aikocanary.core.asr import (
    ProcessFailedError,
    TranscriptionConfig,
    TranscriptionService,
    TranscriptionWorkerThread,
)
from aikocanary.core.formatting import FormattingStyle

pytestmark = pytest.mark.usefixtures("cleanup_qt_objects")


@pytest.fixture
def service():
    return MagicMock(spec=TranscriptionService)


def make_worker(service, **kwargs):
    return TranscriptionWorkerThread(
        service=service,
        file_path=Path("/audio/clip.wav"),
        config=TranscriptionConfig(source_lang="de"),
        **kwargs,
    )


def test_finished_carries_formatted_and_raw(qtbot, service):
    service.transcribe.return_value = "One. Two."
    worker = make_worker(service)

    with qtbot.waitSignal(worker.finished, timeout=5000) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args == ["One.\nTwo.", "One. Two."]
    path, config = service.transcribe.call_args.args
    assert path == Path("/audio/clip.wav")
    assert config.source_lang == "de"


def test_formatting_options_applied(qtbot, service):
    service.transcribe.return_value = "A. B. C."
    worker = make_worker(
        service, style=FormattingStyle.PARAGRAPHS, paragraph_sentence_count=2
    )

    with qtbot.waitSignal(worker.finished, timeout=5000) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args[0] == "A. B.\n\nC."


def test_transcription_error_emits_message(qtbot, service):
    service.transcribe.side_effect = ProcessFailedError("Model load failed", 1)
    worker = make_worker(service)

    with qtbot.waitSignal(worker.error, timeout=5000) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args == ["Model load failed"]


def test_unexpected_error_emits_message(qtbot, service):
    service.transcribe.side_effect = RuntimeError("disk on fire")
    worker = make_worker(service)

    with qtbot.waitSignal(worker.error, timeout=5000) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args == ["disk on fire"]


def test_cancel_stops_service(service):
    worker = make_worker(service)
    worker.cancel()
    service.cancel.assert_called_once()


def test_result_after_cancel_is_dropped(qtbot, service):
    worker = make_worker(service)

    def cancelled_mid_run(*args):
        worker.requestInterruption()
        return ""

    service.transcribe.side_effect = cancelled_mid_run
    finished = []
    worker.finished.connect(lambda *args: finished.append(args))

    with qtbot.waitSignal(worker.cancelled, timeout=5000):
        worker.start()
    worker.wait()

    assert finished == []


def test_error_after_cancel_reported_as_cancelled(qtbot, service):
    worker = make_worker(service)

    def cancelled_then_failed(*args):
        worker.requestInterruption()
        raise ProcessFailedError("terminated")

    service.transcribe.side_effect = cancelled_then_failed
    errors = []
    worker.error.connect(errors.append)

    with qtbot.waitSignal(worker.cancelled, timeout=5000):
        worker.start()
    worker.wait()

    assert errors == []
