import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
from scipy.io import wavfile

from ...utils.logger import get_logger
from ..settings.config import RECORDING_CHANNELS, RECORDING_SAMPLE_RATE

logger = get_logger(__name__)


@dataclass
class AudioDevice:
    name: str
    index: int
    channels: int
    default_sample_rate: float


class AudioRecorder:
    """
    Records microphone input into a 16-bit PCM WAV file.

    ``stop()`` returns the path of the finished file, which is what the
    transcription service consumes.
    """

    def __init__(
        self,
        sample_rate: int = RECORDING_SAMPLE_RATE,
        channels: int = RECORDING_CHANNELS,
        device: Optional[str] = None,
        output_dir: Optional[Path] = None,
        on_audio_level: Optional[Callable[[float], None]] = None,
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self.output_dir = output_dir
        self.on_audio_level = on_audio_level

        self._stream = None
        self._audio_buffer: List[np.ndarray] = []
        self._is_recording = False
        self._recording_path: Optional[Path] = None
        self._last_error: Optional[str] = None

    @property
    def is_recording(self) -> bool:
        return self._is_recording

    @property
    def recording_path(self) -> Optional[Path]:
        return self._recording_path

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def start(self) -> bool:
        if self._is_recording:
            return True

        self._audio_buffer = []
        self._last_error = None
        self._recording_path = None

        # PortAudio is loaded on first use
        try:
            import sounddevice as sd
        except OSError as e:
            self._last_error = f"Audio backend unavailable: {e}"
            return False

        try:
            self._stream = sd.InputStream(
                samplerate=float(self.sample_rate),
                channels=self.channels,
                dtype="int16",
                device=self._get_device_index(),
                callback=self._audio_callback,
            )
            self._stream.start()
            self._is_recording = True
            return True

        except sd.PortAudioError as e:
            self._last_error = f"Audio device error: {e}"
            self._is_recording = False
            return False
        except Exception as e:
            self._last_error = f"Failed to start recording: {e}"
            self._is_recording = False
            return False

    def stop(self) -> Optional[Path]:
        if not self._is_recording:
            return None

        self._is_recording = False

        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None

        if not self._audio_buffer:
            logger.warning("No audio captured")
            return None

        audio_data = np.concatenate(self._audio_buffer, axis=0)
        self._audio_buffer = []
        self._recording_path = self._write_wav(audio_data)
        return self._recording_path

    def discard(self) -> None:
        """Stop recording and delete the recorded file."""
        path = self.stop() or self._recording_path
        if path is not None:
            path.unlink(missing_ok=True)
            logger.debug(f"Discarded recording {path}")
        self._recording_path = None

    def _write_wav(self, audio_data: np.ndarray) -> Path:
        output_dir = self.output_dir or Path(tempfile.gettempdir())
        path = output_dir / f"recording-{uuid.uuid4()}.wav"

        if audio_data.dtype != np.int16:
            audio_data = np.clip(audio_data, -1.0, 1.0)
            audio_data = (audio_data * 32767).astype(np.int16)
        if audio_data.ndim > 1 and audio_data.shape[1] == 1:
            audio_data = audio_data[:, 0]

        wavfile.write(path, self.sample_rate, audio_data)
        logger.info(
            f"Saved recording {path.name}: {len(audio_data) / self.sample_rate:.2f}s"
        )
        return path

    def _audio_callback(self, indata: np.ndarray, frames: int, time, status) -> None:
        if self._is_recording:
            self._audio_buffer.append(indata.copy())

            if self.on_audio_level is not None:
                level = np.abs(indata.astype(np.float32)).mean() / 32768.0
                self.on_audio_level(min(1.0, level * 10))

    def _get_device_index(self) -> Optional[int]:
        if self.device is None:
            return None

        for device in self.list_devices():
            if device.name == self.device:
                return device.index

        return None

    @staticmethod
    def list_devices() -> List[AudioDevice]:
        import sounddevice as sd

        devices = []

        for i, device in enumerate(sd.query_devices()):
            if device["max_input_channels"] > 0:
                devices.append(
                    AudioDevice(
                        name=device["name"],
                        index=i,
                        channels=device["max_input_channels"],
                        default_sample_rate=device["default_samplerate"],
                    )
                )

        return devices
