#!/usr/bin/env python3
"""Exception types raised by the voice training pipeline."""

from __future__ import annotations


class VoiceTrainerError(RuntimeError):
    """Base class for pipeline errors reported to the user by the scripts."""


class CheckpointNotFoundError(VoiceTrainerError, FileNotFoundError):
    """Raised when no training checkpoint matches the epoch/step pattern."""


class CommandError(VoiceTrainerError):
    """Raised when an external tool fails or exits with a non-zero status."""


class MissingToolError(VoiceTrainerError):
    """Raised when a required executable or Python module is unavailable."""


class DatasetError(VoiceTrainerError):
    """Raised when the dataset is empty or cannot be used for training."""
