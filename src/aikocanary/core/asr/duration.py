"""Best-effort measurement of media duration."""

import json
import math
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from scipy.io import wavfile

from ...utils.logger import get_logger

logger = get_logger(__name__)

FFPROBE_TIMEOUT_SECONDS = 30


def probe_duration_seconds(path) -> Optional[float]:
    """
    Measure the playable length of an audio or video file.

    WAV files are read directly; anything else goes through ffprobe when it
    is installed. Never raises: any failure is logged and reported as None.

    Args:
        path: Path to the media file

    Returns:
        Duration in seconds, or None if it could not be determined.
    """
    path = Path(path)
    if not path.is_file():
        logger.debug(f"Cannot probe duration, file not found: {path}")
        return None

    seconds = None
    if path.suffix.lower() in (".wav", ".wave"):
        seconds = _wav_duration(path)
    if seconds is None:
        seconds = _ffprobe_duration(path)

    if seconds is None or not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


def _wav_duration(path: Path) -> Optional[float]:
    try:
        rate, data = wavfile.read(path, mmap=True)
    except (ValueError, OSError) as e:
        logger.debug(f"Could not read WAV header of {path}: {e}")
        return None
    if rate <= 0:
        return None
    return len(data) / float(rate)


def _ffprobe_duration(path: Path) -> Optional[float]:
    ffprobe = shutil.which("ffprobe")
    if ffprobe is None:
        logger.debug("ffprobe not found on PATH, duration unavailable")
        return None

    cmd = [
        ffprobe,
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "json",
        str(path),
    ]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            check=True,
            timeout=FFPROBE_TIMEOUT_SECONDS,
        )
        data = json.loads(result.stdout)
        duration = data.get("format", {}).get("duration")
        return float(duration) if duration is not None else None
    except (
        subprocess.CalledProcessError,
        subprocess.TimeoutExpired,
        json.JSONDecodeError,
        OSError,
        ValueError,
        TypeError,
        AttributeError,
    ) as e:
        logger.debug(f"ffprobe could not determine duration of {path}: {e}")
        return None
