"""
Settings management with JSON persistence.

Handles loading, saving, and validating application settings.
Uses platformdirs for cross-platform directory resolution.
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from platformdirs import user_config_path
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...utils.logger import get_logger
from ..formatting import FormattingStyle
from .config import RECORDING_SAMPLE_RATE

if TYPE_CHECKING:
    from ..asr.transcriber import TranscriptionConfig

logger = get_logger(__name__)

APP_NAME = "aikocanary"


def get_config_dir() -> Path:
    return user_config_path(APP_NAME, appauthor=False, ensure_exists=True)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


class Settings(BaseModel):
    model_config = ConfigDict(validate_assignment=False, protected_namespaces=())

    formatting_style: FormattingStyle = FormattingStyle.SENTENCE_PER_LINE
    paragraph_sentence_count: int = Field(default=3, ge=2, le=6)
    wrap_width: int = Field(default=80, ge=60, le=140)
    prompt_text: str = ""

    source_lang: str = "en"
    target_lang: str = "en"
    task: str = "transcribe"
    pnc: bool = True

    model_path: Optional[str] = None
    python_path: Optional[str] = None
    canary_root: Optional[str] = None

    sample_rate: int = Field(default=RECORDING_SAMPLE_RATE, ge=8000, le=192000)
    input_device: Optional[str] = None

    @field_validator("source_lang", "target_lang", "task")
    @classmethod
    def not_empty(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("must be a non-empty string")
        return v

    @classmethod
    def load(cls) -> "Settings":
        config_file = get_config_dir() / "settings.json"

        if not config_file.exists():
            return cls()

        try:
            with open(config_file, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings: {e}. Using defaults.", exc_info=True)
            return cls()

        if not isinstance(data, dict):
            logger.warning("Settings file is not a JSON object. Using defaults.")
            return cls()

        # Filter to valid keys only
        valid_keys = cls.model_fields.keys()
        filtered_data = {k: v for k, v in data.items() if k in valid_keys}

        return cls._load_with_fallbacks(filtered_data)

    @classmethod
    def _load_with_fallbacks(cls, data: dict) -> "Settings":
        """Load settings with field-level fallback to defaults on validation errors."""
        defaults = cls()
        result_data = {}

        for field_name in cls.model_fields:
            if field_name not in data:
                continue
            try:
                validated = cls.model_validate(
                    {**defaults.model_dump(), field_name: data[field_name]}
                )
                result_data[field_name] = getattr(validated, field_name)
            except ValidationError:
                logger.warning(
                    f"Invalid {field_name} {data[field_name]!r}, resetting to "
                    f"{getattr(defaults, field_name)!r}"
                )

        return cls(**result_data)

    def save(self) -> None:
        config_file = get_config_dir() / "settings.json"

        data = self.model_dump(mode="json")

        with open(config_file, "w") as f:
            json.dump(data, f, indent=2)

    def reset_to_defaults(self) -> None:
        default = Settings()
        for key in type(self).model_fields:
            setattr(self, key, getattr(default, key))

    def to_transcription_config(self) -> "TranscriptionConfig":
        from ..asr.transcriber import TranscriptionConfig

        return TranscriptionConfig(
            source_lang=self.source_lang,
            target_lang=self.target_lang,
            task=self.task,
            pnc=self.pnc,
            model_path=_blank_to_none(self.model_path),
            python_path=_blank_to_none(self.python_path),
            canary_root=_blank_to_none(self.canary_root),
            prompt_text=_blank_to_none(self.prompt_text),
        )


_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings.load()
    return _settings_instance
