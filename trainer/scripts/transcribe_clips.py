#!/usr/bin/env python3
"""
Transcribe dataset clips with Whisper and write metadata.csv.

Every clip in <dataset>/wavs is transcribed; the result is written as
pipe-delimited 'clip_id|text' rows and validated against the clips.

Usage (from trainer/ directory):
    python scripts/transcribe_clips.py
    python scripts/transcribe_clips.py --dataset-dir ../data/dataset --model medium.en
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from piper_voice.errors import DatasetError, VoiceTrainerError
from piper_voice.models import TranscriptionConfig, load_config
from piper_voice.transcription import (
    clips_in_directory,
    transcribe_clips,
    validate_metadata,
    write_metadata,
)

# Number of validation errors printed before summarizing
MAX_ERRORS_SHOWN = 10


def transcribe_dataset(dataset_dir: Path, config: TranscriptionConfig) -> Path:
    """
    Transcribe all clips of a dataset and write its metadata.csv.

    Returns:
        Path to the written metadata file.

    Raises:
        DatasetError: If the dataset has no clips or no usable transcripts.
    """
    wavs_dir = dataset_dir / "wavs"
    clips = clips_in_directory(wavs_dir)
    if not clips:
        raise DatasetError(f"No clips found in {wavs_dir}")

    print(f"Transcribing {len(clips)} clips from {wavs_dir}")
    entries = transcribe_clips(clips, config)
    if not entries:
        raise DatasetError("Whisper produced no usable transcripts")

    metadata_file = write_metadata(entries, dataset_dir / "metadata.csv")

    valid_entries, errors = validate_metadata(metadata_file, wavs_dir, config.min_text_length)
    if errors:
        print(f"\n⚠️  Found {len(errors)} errors:")
        for e in errors[:MAX_ERRORS_SHOWN]:
            print(f"  - {e}")
        if len(errors) > MAX_ERRORS_SHOWN:
            print(f"  ... and {len(errors) - MAX_ERRORS_SHOWN} more")

    print(f"\n✓ Valid entries: {len(valid_entries)}")
    print(f"Metadata: {metadata_file}")
    return metadata_file


def main() -> None:
    """Parse arguments and transcribe the dataset."""
    parser = argparse.ArgumentParser(description="Transcribe clips with Whisper")
    parser.add_argument("--dataset-dir", default=None, help="Dataset directory (default: from config)")
    parser.add_argument("--config", default=None, help="Pipeline config JSON")
    parser.add_argument("--model", default=None, help="Whisper model name")
    parser.add_argument("--language", default=None, help="Spoken language code")
    parser.add_argument("--fp16", action="store_true", help="Use half-precision inference")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
        overrides: dict[str, Any] = {}
        if args.model:
            overrides["whisper_model"] = args.model
        if args.language:
            overrides["language"] = args.language
        if args.fp16:
            overrides["fp16"] = True
        transcription = TranscriptionConfig.model_validate(
            {**config.transcription.model_dump(), **overrides}
        )

        dataset_dir = Path(args.dataset_dir) if args.dataset_dir else config.dataset_dir
        transcribe_dataset(dataset_dir, transcription)
    except (VoiceTrainerError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
