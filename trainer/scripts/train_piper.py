#!/usr/bin/env python3
"""
Fine-tune a Piper voice on the prepared dataset.

This script handles the complete training process:
1. Validate metadata.csv against the clips
2. Phonemize the dataset with piper_train.preprocess
3. Resume from the newest checkpoint (or the pretrained base checkpoint)
4. Run piper_train until max_epochs

Usage (from trainer/ directory):
    python scripts/train_piper.py --config ../config/train_config.json
    python scripts/train_piper.py --config ../config/train_config.json --skip-preprocess
    python scripts/train_piper.py --config ../config/train_config.json --dry-run

File structure:
    config/
    └── train_config.json           # Pipeline configuration
    data/
    ├── dataset/
    │   ├── metadata.csv            # clip_id|text
    │   └── wavs/                   # Clips referenced in metadata.csv
    └── training/
        ├── config.json             # Written by piper_train.preprocess
        ├── dataset.jsonl
        └── lightning_logs/         # Checkpoints written during training
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from piper_voice.commands import CommandRunner, run_command
from piper_voice.config import settings
from piper_voice.errors import DatasetError, VoiceTrainerError
from piper_voice.models import PipelineConfig, TranscriptEntry, load_config
from piper_voice.piper import (
    build_preprocess_command,
    build_train_command,
    detect_accelerator,
    print_gpu_info,
    resolve_resume_checkpoint,
)
from piper_voice.transcription import validate_metadata

# Training thresholds
MIN_TRAINING_SAMPLES_WARNING = 50  # Warn if fewer training clips

# Display
PRINT_SEPARATOR_WIDTH = 60


def validate_dataset(config: PipelineConfig) -> list[TranscriptEntry]:
    """
    Check that the dataset has usable clip/transcript pairs.

    Returns:
        Valid metadata entries.

    Raises:
        FileNotFoundError: If metadata.csv does not exist.
        DatasetError: If no entry is usable.
    """
    metadata_csv = config.metadata_csv
    if not metadata_csv.is_file():
        raise FileNotFoundError(f"Metadata file not found: {metadata_csv}")

    valid_entries, errors = validate_metadata(
        metadata_csv, config.wavs_dir, config.transcription.min_text_length
    )
    if errors:
        print(f"Note: Skipped {len(errors)} invalid metadata rows")
    if not valid_entries:
        raise DatasetError(f"No valid clips found in {config.wavs_dir}")

    print(f"Dataset: {len(valid_entries)} clips ({metadata_csv})")
    if len(valid_entries) < MIN_TRAINING_SAMPLES_WARNING:
        print("⚠️  Warning: Very few training clips. Results may be poor.")
    return valid_entries


def run_training(
    config: PipelineConfig,
    *,
    python: str,
    skip_preprocess: bool = False,
    dry_run: bool = False,
    runner: CommandRunner | None = None,
) -> list[str]:
    """
    Preprocess the dataset and launch piper_train.

    Args:
        config: Pipeline configuration.
        python: Interpreter with piper_train installed.
        skip_preprocess: Reuse an existing dataset.jsonl/config.json.
        dry_run: Print the commands without running them.
        runner: Replacement for subprocess.run (used by tests).

    Returns:
        The training command line.
    """
    validate_dataset(config)

    training_dir = config.training_dir
    training_dir.mkdir(parents=True, exist_ok=True)

    preprocess = build_preprocess_command(
        python, config.dataset_dir, training_dir, config.training, config.audio
    )
    if skip_preprocess:
        print("Skipping preprocessing")
    elif dry_run:
        print(f"[dry-run] {' '.join(preprocess)}")
    else:
        print("\nPhonemizing dataset...")
        run_command(preprocess, runner=runner)

    resume_from = resolve_resume_checkpoint(training_dir, config.training.base_checkpoint)
    if resume_from is None:
        print("No checkpoint found, training from scratch")
    else:
        print(f"Resuming from: {resume_from}")

    accelerator = detect_accelerator(config.training.accelerator)
    command = build_train_command(
        python, training_dir, config.training, accelerator, resume_from
    )

    if dry_run:
        print(f"[dry-run] {' '.join(command)}")
        return command

    print("\nStarting training...")
    print(f"Output directory: {training_dir}")
    print(f"Training for up to {config.training.max_epochs} epochs")
    print("-" * PRINT_SEPARATOR_WIDTH)
    run_command(command, runner=runner)
    return command


def main() -> None:
    """
    Main entry point for Piper fine-tuning.

    Parses command-line arguments, loads configuration and runs the
    preprocessing and training commands.
    """
    parser = argparse.ArgumentParser(description="Fine-tune a Piper voice")
    parser.add_argument("--config", default=None, help="Pipeline config JSON")
    parser.add_argument(
        "--python", default=settings.PYTHON_EXECUTABLE, help="Interpreter with piper_train"
    )
    parser.add_argument(
        "--skip-preprocess", action="store_true", help="Reuse existing preprocessed dataset"
    )
    parser.add_argument("--dry-run", action="store_true", help="Print commands only")
    args = parser.parse_args()

    print("=" * PRINT_SEPARATOR_WIDTH)
    print("Piper Voice Fine-Tuning")
    print("=" * PRINT_SEPARATOR_WIDTH)

    try:
        config = load_config(args.config)
        if not args.dry_run:
            print_gpu_info()
            print("=" * PRINT_SEPARATOR_WIDTH)
        run_training(
            config,
            python=args.python,
            skip_preprocess=args.skip_preprocess,
            dry_run=args.dry_run,
        )
    except (VoiceTrainerError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.dry_run:
        print("\n" + "=" * PRINT_SEPARATOR_WIDTH)
        print("Training finished!")
        print("Export with: python scripts/export_onnx.py --config <config>")
        print("=" * PRINT_SEPARATOR_WIDTH)


if __name__ == "__main__":
    main()
