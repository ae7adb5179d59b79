#!/usr/bin/env python3
"""
Download the audio track of a video or podcast page with yt-dlp.

Usage (from trainer/ directory):
    python scripts/download_audio.py "https://www.youtube.com/watch?v=..."
    python scripts/download_audio.py URL -o ../data/raw --name interview --format flac
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from piper_voice.config import settings
from piper_voice.download import DEFAULT_AUDIO_FORMAT, DEFAULT_SOURCE_NAME, download_audio
from piper_voice.errors import VoiceTrainerError


def main() -> None:
    """Parse arguments and download the recording."""
    parser = argparse.ArgumentParser(description="Download source audio for a voice")
    parser.add_argument("url", help="Page URL supported by yt-dlp")
    parser.add_argument(
        "-o", "--output-dir", default=str(settings.RAW_AUDIO_DIR), help="Output directory"
    )
    parser.add_argument("--name", default=DEFAULT_SOURCE_NAME, help="Output file stem")
    parser.add_argument(
        "--format", default=DEFAULT_AUDIO_FORMAT, help="Audio container (wav, flac, mp3)"
    )
    args = parser.parse_args()

    try:
        download_audio(args.url, args.output_dir, args.name, audio_format=args.format)
    except VoiceTrainerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
