#!/usr/bin/env python3
"""
Voice Trainer Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

CONFIGURATION HIERARCHY:
    1. Environment variables (highest priority)
    2. .env file in config/ directory
    3. Defaults defined in this file (lowest priority)

WHAT GOES WHERE:
    - .env / Environment variables: Machine-specific paths and tool locations
    - config/train_config.json: Per-voice dataset, training and export settings

Usage:
    from piper_voice.config import settings

    dataset_dir = settings.DATASET_DIR
    whisper_model = settings.WHISPER_MODEL
"""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# Directory paths for default resolution
_PACKAGE_DIR = Path(__file__).resolve().parent
_TRAINER_DIR = _PACKAGE_DIR.parent.parent
_PROJECT_ROOT = _TRAINER_DIR.parent


class VoiceSettings(BaseSettings):
    """
    Voice trainer settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """

    # =========================================================================
    # DIRECTORY PATHS
    # =========================================================================
    # Root directory for everything the pipeline produces
    DATA_DIR: Path = _PROJECT_ROOT / "data"

    # Downloaded source recordings
    RAW_AUDIO_DIR: Path = _PROJECT_ROOT / "data" / "raw"

    # LJSpeech-style dataset (wavs/ + metadata.csv)
    DATASET_DIR: Path = _PROJECT_ROOT / "data" / "dataset"

    # piper_train working directory (config.json, dataset.jsonl, lightning_logs/)
    TRAINING_DIR: Path = _PROJECT_ROOT / "data" / "training"

    # Exported .onnx / .onnx.json voices
    EXPORT_DIR: Path = _PROJECT_ROOT / "data" / "voices"

    @field_validator(
        "DATA_DIR", "RAW_AUDIO_DIR", "DATASET_DIR", "TRAINING_DIR", "EXPORT_DIR",
        mode="before",
    )
    @classmethod
    def parse_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects and expand user (~)."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v.expanduser()

    @property
    def wavs_dir(self) -> Path:
        """Directory holding the dataset clips."""
        return self.DATASET_DIR / "wavs"

    @property
    def metadata_csv(self) -> Path:
        """Pipe-delimited transcript file of the dataset."""
        return self.DATASET_DIR / "metadata.csv"

    # =========================================================================
    # AUDIO SETTINGS
    # =========================================================================
    # Piper "medium" and "high" voices are trained at 22050 Hz
    SAMPLE_RATE: int = 22050

    # Nominal clip length in seconds
    CLIP_SECONDS: float = 10.0

    # =========================================================================
    # TRANSCRIPTION SETTINGS
    # =========================================================================
    # Whisper checkpoint name (tiny, base, small, medium, large-v3, ...)
    WHISPER_MODEL: str = "base"

    # Spoken language of the recording
    LANGUAGE: str = "en"

    # =========================================================================
    # TOOL LOCATIONS
    # =========================================================================
    # Interpreter of the environment where piper_train is installed
    PYTHON_EXECUTABLE: str = sys.executable

    # Piper inference binary used for sample synthesis
    PIPER_EXECUTABLE: str = "piper"

    # =========================================================================
    # PYDANTIC SETTINGS CONFIG
    # =========================================================================
    model_config = {
        "env_file": str(_PROJECT_ROOT / "config" / ".env"),
        "env_file_encoding": "utf-8",
        # Allow extra fields to be ignored (forward compatibility)
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> VoiceSettings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once and reused.
    """
    return VoiceSettings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    The next call to get_settings() will create a new VoiceSettings
    instance from the current environment.
    """
    get_settings.cache_clear()


# Primary settings object
settings = get_settings()
