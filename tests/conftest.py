"""
Shared pytest fixtures.

Keeps settings out of the user's config directory and provides fake canary
tool installations for the transcription tests.
"""
import os
import stat
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
from PySide6.QtCore import QCoreApplication
from scipy.io import wavfile

from aikocanary.core.asr import CanaryEnvironment

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path):
    """Redirect settings persistence to a temporary directory."""
    import aikocanary.core.settings.settings as settings_module

    config_dir = tmp_path / "config"
    config_dir.mkdir()
    settings_module._settings_instance = None
    with patch.object(settings_module, "get_config_dir", return_value=config_dir):
        yield config_dir
    settings_module._settings_instance = None


@pytest.fixture
def cleanup_qt_objects(qtbot):
    """Flush pending Qt events so queued worker signals do not leak into the next test."""
    yield
    app = QCoreApplication.instance()
    if app:
        app.processEvents()


def write_wav(path: Path, seconds: float, sample_rate: int = 16000) -> Path:
    samples = np.zeros(int(seconds * sample_rate), dtype=np.int16)
    wavfile.write(path, sample_rate, samples)
    return path


class FakeCanaryInstall:
    """A ~/canary-mlx layout with a shell script standing in for the interpreter."""

    def __init__(self, root: Path):
        self.home = root / "home"
        self.canary_home = self.home / "canary-mlx"
        self.python = self.canary_home / ".venv" / "bin" / "python"
        self.model = self.canary_home / "canary-1b-v2-mlx"
        self.audio = write_wav(root / "clip.wav", 1.0)

        self.python.parent.mkdir(parents=True)
        self.model.mkdir(parents=True)
        self.python.touch()

    def environment(self) -> CanaryEnvironment:
        return CanaryEnvironment(env={}, home=self.home)

    def write_interpreter(self, body: str, path: Path = None) -> Path:
        path = path or self.python
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path


@pytest.fixture
def wav_factory(tmp_path):
    def make(seconds: float, name: str = "audio.wav", sample_rate: int = 16000) -> Path:
        return write_wav(tmp_path / name, seconds, sample_rate)

    return make


@pytest.fixture
def canary_install(tmp_path):
    return FakeCanaryInstall(tmp_path)
