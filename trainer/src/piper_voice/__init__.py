"""
Build a custom Piper TTS voice from a single recording.

Usage:
    from piper_voice import find_latest_checkpoint, load_config

    config = load_config("config/train_config.json")
    latest = find_latest_checkpoint(config.training_dir)
"""

from piper_voice.checkpoints import find_latest_checkpoint, list_checkpoints
from piper_voice.errors import (
    CheckpointNotFoundError,
    CommandError,
    DatasetError,
    MissingToolError,
    VoiceTrainerError,
)
from piper_voice.models import PipelineConfig, load_config

__version__ = "0.1.0"

__all__ = [
    "CheckpointNotFoundError",
    "CommandError",
    "DatasetError",
    "MissingToolError",
    "PipelineConfig",
    "VoiceTrainerError",
    "find_latest_checkpoint",
    "list_checkpoints",
    "load_config",
]
