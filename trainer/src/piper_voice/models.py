#!/usr/bin/env python3
"""
Pydantic models for the voice training pipeline.

Covers the dataset records (clips, transcripts, checkpoints) and the
JSON pipeline configuration consumed by the training and export scripts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from piper_voice.config import get_settings


# =============================================================================
# Dataset Records
# =============================================================================


class ClipInfo(BaseModel):
    """A clip written to the dataset's wavs/ directory."""

    clip_id: str
    path: Path
    duration_seconds: float


class TranscriptEntry(BaseModel):
    """
    One row of metadata.csv.

    Attributes:
        clip_id: Clip filename without the .wav extension.
        text: Transcript of the clip, free of the '|' delimiter.
    """

    clip_id: str
    text: str


class Checkpoint(BaseModel):
    """A Lightning checkpoint named epoch=<E>-step=<S>[-v<N>].ckpt."""

    path: Path
    epoch: int
    step: int
    version: int = 0

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.epoch, self.step, self.version)


# =============================================================================
# Pipeline Configuration
# =============================================================================


class AudioConfig(BaseModel):
    """Silence removal, segmentation and output format of the clips."""

    sample_rate: int = Field(default_factory=lambda: get_settings().SAMPLE_RATE, gt=0)
    clip_seconds: float = Field(default_factory=lambda: get_settings().CLIP_SECONDS, gt=0)
    min_clip_seconds: float = Field(default=1.0, ge=0)
    silence_top_db: int = 40
    min_silence_seconds: float = Field(default=0.5, ge=0)
    keep_silence_seconds: float = Field(default=0.1, ge=0)
    denoise: bool = False
    noise_reduction: float = Field(default=0.8, ge=0, le=1)
    normalize: bool = True


class TranscriptionConfig(BaseModel):
    """Whisper settings used to transcribe the clips."""

    whisper_model: str = Field(default_factory=lambda: get_settings().WHISPER_MODEL)
    language: Optional[str] = Field(default_factory=lambda: get_settings().LANGUAGE)
    fp16: bool = False
    min_text_length: int = Field(default=3, ge=0)


class TrainingConfig(BaseModel):
    """Flags passed to piper_train."""

    quality: Literal["x-low", "medium", "high"] = "medium"
    batch_size: int = Field(default=32, gt=0)
    max_epochs: int = Field(default=6000, gt=0)
    checkpoint_epochs: int = Field(default=1, gt=0)
    precision: str = "32"
    validation_split: float = Field(default=0.0, ge=0, lt=1)
    num_test_examples: int = Field(default=0, ge=0)
    accelerator: Literal["auto", "gpu", "cpu"] = "auto"
    devices: int = Field(default=1, gt=0)
    espeak_language: str = "en-us"
    base_checkpoint: Optional[Path] = None


class ExportConfig(BaseModel):
    """Destination of the exported ONNX voice."""

    output_dir: Path = Field(default_factory=lambda: get_settings().EXPORT_DIR)
    voice_name: str = "en_US-custom-medium"


class PipelineConfig(BaseModel):
    """Top-level configuration for building one Piper voice."""

    dataset_dir: Path = Field(default_factory=lambda: get_settings().DATASET_DIR)
    training_dir: Path = Field(default_factory=lambda: get_settings().TRAINING_DIR)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    training: TrainingConfig = Field(default_factory=TrainingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    @property
    def wavs_dir(self) -> Path:
        return self.dataset_dir / "wavs"

    @property
    def metadata_csv(self) -> Path:
        return self.dataset_dir / "metadata.csv"


def load_config(config_path: str | Path | None) -> PipelineConfig:
    """
    Load the pipeline configuration from a JSON file.

    Args:
        config_path: Path to the JSON configuration file, or None to use
            defaults derived from the environment settings.

    Returns:
        Validated PipelineConfig.

    Raises:
        FileNotFoundError: If config_path does not exist.
    """
    if config_path is None:
        return PipelineConfig()

    with open(config_path, "r") as f:
        config_dict: dict[str, Any] = json.load(f)
    return PipelineConfig.model_validate(config_dict)
