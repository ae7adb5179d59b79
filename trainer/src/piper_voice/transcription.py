#!/usr/bin/env python3
"""
Transcribe dataset clips with OpenAI Whisper and manage metadata.csv.

metadata.csv follows the LJSpeech single-speaker layout expected by
piper_train.preprocess: one 'clip_id|text' row per clip, no header.
"""

from __future__ import annotations

import csv
import re
from importlib import import_module
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable

import soundfile as sf

from piper_voice.commands import ensure_ffmpeg_available
from piper_voice.errors import DatasetError, MissingToolError
from piper_voice.models import ClipInfo, TranscriptEntry, TranscriptionConfig

MISSING_WHISPER_MESSAGE = (
    "Whisper is not installed. Install it with `pip install openai-whisper`."
)

# Metadata CSV format
METADATA_DELIMITER = "|"
METADATA_CSV_COLUMNS = 2  # Expected: clip_id|text

_WHITESPACE = re.compile(r"\s+")


def load_whisper_module() -> ModuleType:
    """Import the Whisper module with a helpful error if it is unavailable."""
    try:
        return import_module("whisper")
    except ModuleNotFoundError as exc:
        raise MissingToolError(MISSING_WHISPER_MESSAGE) from exc


def load_whisper_model(config: TranscriptionConfig) -> Any:
    """Load the configured Whisper checkpoint (downloaded on first use)."""
    whisper = load_whisper_module()
    ensure_ffmpeg_available()
    print(f"Loading Whisper model: {config.whisper_model}")
    return whisper.load_model(config.whisper_model)


def clean_transcript(text: str) -> str:
    """Collapse whitespace and drop the metadata column delimiter."""
    text = text.replace(METADATA_DELIMITER, " ")
    return _WHITESPACE.sub(" ", text).strip()


def transcribe_clips(
    clips: Iterable[ClipInfo],
    config: TranscriptionConfig,
    *,
    model: Any = None,
) -> list[TranscriptEntry]:
    """
    Transcribe each clip and build metadata entries.

    Clips whose cleaned transcript is shorter than config.min_text_length
    (music, breathing, cut-off words) are skipped.

    Args:
        clips: Clips to transcribe, in dataset order.
        config: Whisper settings.
        model: Preloaded Whisper model; loaded from config when omitted.

    Returns:
        Entries for the clips that produced usable text.
    """
    if model is None:
        model = load_whisper_model(config)

    entries: list[TranscriptEntry] = []
    skipped = 0
    for clip in clips:
        result = model.transcribe(
            str(clip.path),
            language=config.language,
            fp16=config.fp16,
        )
        text = clean_transcript(str(result.get("text", "")))
        if len(text) < config.min_text_length:
            print(f"  ⚠️  Skipping {clip.clip_id}: transcript too short ({text!r})")
            skipped += 1
            continue

        entries.append(TranscriptEntry(clip_id=clip.clip_id, text=text))
        print(f"  {clip.clip_id}: {text}")

    print(f"Transcribed {len(entries)} clips ({skipped} skipped)")
    return entries


def clips_in_directory(wavs_dir: str | Path) -> list[ClipInfo]:
    """
    List the WAV clips of a dataset directory in filename order.

    Raises:
        DatasetError: If a clip cannot be read as audio.
    """
    clips: list[ClipInfo] = []
    for path in sorted(Path(wavs_dir).glob("*.wav")):
        if path.name.startswith("."):
            continue
        try:
            duration = sf.info(str(path)).duration
        except sf.LibsndfileError as exc:
            raise DatasetError(f"Unreadable clip {path}: {exc}") from exc
        clips.append(ClipInfo(clip_id=path.stem, path=path, duration_seconds=duration))
    return clips


def write_metadata(entries: Iterable[TranscriptEntry], metadata_file: str | Path) -> Path:
    """Write entries as pipe-delimited rows; returns the file path."""
    metadata_file = Path(metadata_file)
    metadata_file.parent.mkdir(parents=True, exist_ok=True)
    with open(metadata_file, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, delimiter=METADATA_DELIMITER, lineterminator="\n")
        writer.writerows((entry.clip_id, entry.text) for entry in entries)
    return metadata_file


def read_metadata(metadata_file: str | Path) -> list[TranscriptEntry]:
    """Read well-formed rows of a metadata file, ignoring malformed ones."""
    entries: list[TranscriptEntry] = []
    with open(metadata_file, "r", newline="", encoding="utf-8") as f:
        reader = csv.reader(f, delimiter=METADATA_DELIMITER)
        for row in reader:
            if len(row) != METADATA_CSV_COLUMNS:
                continue
            clip_id, text = row
            entries.append(TranscriptEntry(clip_id=clip_id, text=text))
    return entries


def validate_metadata(
    metadata_file: str | Path,
    wavs_dir: str | Path,
    min_text_length: int = 3,
) -> tuple[list[TranscriptEntry], list[str]]:
    """
    Validate metadata.csv against audio files.

    Checks that each entry in the metadata file has a corresponding
    audio file and a long enough transcription.

    Args:
        metadata_file: Path to the metadata CSV file.
        wavs_dir: Directory containing the audio files.
        min_text_length: Minimum transcript length in characters.

    Returns:
        Tuple of (valid_entries, errors) where errors is a list of
        messages for invalid rows.
    """
    errors: list[str] = []
    valid_entries: list[TranscriptEntry] = []

    with open(metadata_file, "r", newline="", encoding="utf-8") as f:
        reader = csv.reader(f, delimiter=METADATA_DELIMITER)
        for row in reader:
            if len(row) != METADATA_CSV_COLUMNS:
                errors.append(f"Invalid row format: {row}")
                continue

            clip_id, transcription = row
            wav_path = Path(wavs_dir) / f"{clip_id}.wav"

            if not wav_path.exists():
                errors.append(f"Audio file not found: {wav_path}")
                continue

            if len(transcription.strip()) < min_text_length:
                errors.append(f"Transcription too short for {clip_id}")
                continue

            valid_entries.append(TranscriptEntry(clip_id=clip_id, text=transcription))

    return valid_entries, errors
