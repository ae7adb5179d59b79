#!/usr/bin/env python3
"""
Turn a source recording into Piper training clips.

Removes long silences, optionally denoises, normalizes, resamples and
cuts the recording into fixed-length clips written as 16-bit PCM mono
WAV files into the dataset's wavs/ directory.

Usage (from trainer/ directory):
    python scripts/preprocess_audio.py ../data/raw/source.wav
    python scripts/preprocess_audio.py source.wav -o ../data/dataset --clip-seconds 8
    python scripts/preprocess_audio.py source.wav --config ../config/train_config.json --denoise

File structure:
    data/
    ├── raw/
    │   └── source.wav              # Output of download_audio.py
    └── dataset/
        ├── wavs/                   # Clips written by this script
        └── metadata.csv            # Written by transcribe_clips.py
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from piper_voice.audio import DEFAULT_CLIP_PREFIX, process_recording
from piper_voice.errors import VoiceTrainerError
from piper_voice.models import AudioConfig, ClipInfo, load_config


def preprocess_audio(
    input_file: str | Path,
    dataset_dir: str | Path,
    config: AudioConfig,
    prefix: str = DEFAULT_CLIP_PREFIX,
) -> list[ClipInfo]:
    """
    Preprocess a recording into dataset clips.

    Args:
        input_file: Path to the source recording (WAV, MP3, etc.).
        dataset_dir: Dataset root; clips go to dataset_dir/wavs.
        config: Audio processing settings.
        prefix: Clip filename prefix.

    Returns:
        Written clips.

    Raises:
        FileNotFoundError: If input_file does not exist.
    """
    input_path = Path(input_file)
    if not input_path.is_file():
        raise FileNotFoundError(f"Audio file not found: {input_path}")

    wavs_dir = Path(dataset_dir) / "wavs"
    return process_recording(input_path, wavs_dir, config, prefix)


def main() -> None:
    """
    Command-line interface for audio preprocessing.

    Parses arguments, applies overrides to the configured audio settings
    and writes the clips.
    """
    parser = argparse.ArgumentParser(description="Split a recording into training clips")
    parser.add_argument("input", help="Source recording")
    parser.add_argument(
        "-o", "--dataset-dir", default=None, help="Dataset directory (default: from config)"
    )
    parser.add_argument("--config", default=None, help="Pipeline config JSON")
    parser.add_argument("--sr", type=int, default=None, help="Target sample rate (22050 for Piper)")
    parser.add_argument("--clip-seconds", type=float, default=None, help="Clip length in seconds")
    parser.add_argument("--prefix", default=DEFAULT_CLIP_PREFIX, help="Clip filename prefix")
    parser.add_argument("--denoise", action="store_true", help="Apply spectral noise reduction")
    parser.add_argument(
        "--no-normalize", action="store_true", help="Skip normalization"
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config)
        overrides: dict[str, Any] = {}
        if args.sr is not None:
            overrides["sample_rate"] = args.sr
        if args.clip_seconds is not None:
            overrides["clip_seconds"] = args.clip_seconds
        if args.denoise:
            overrides["denoise"] = True
        if args.no_normalize:
            overrides["normalize"] = False
        audio_config = AudioConfig.model_validate(
            {**config.audio.model_dump(), **overrides}
        )

        dataset_dir = Path(args.dataset_dir) if args.dataset_dir else config.dataset_dir
        preprocess_audio(args.input, dataset_dir, audio_config, args.prefix)
    except (VoiceTrainerError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
