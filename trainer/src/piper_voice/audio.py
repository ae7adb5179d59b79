#!/usr/bin/env python3
"""
Shared audio processing utilities.

Turns one long source recording into dataset clips: load and resample to
the trainer's sample rate, optionally denoise, cut out silent stretches,
normalize, split into fixed-length clips and write them as 16-bit PCM
mono WAV files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final

import librosa
import noisereduce as nr
import numpy as np
import soundfile as sf
from numpy.typing import NDArray

from piper_voice.errors import DatasetError
from piper_voice.models import AudioConfig, ClipInfo

# Type aliases
AudioArray = NDArray[np.float32]

# Defaults
DEFAULT_CLIP_PREFIX: Final[str] = "clip"
PCM_SUBTYPE: Final[str] = "PCM_16"


def load_audio(input_file: str | Path, target_sr: int) -> AudioArray:
    """
    Load an audio file as mono float32 at the target sample rate.

    Args:
        input_file: Path to any format librosa/ffmpeg can decode.
        target_sr: Sample rate of the returned signal.

    Returns:
        Mono waveform.
    """
    print(f"Loading: {input_file}")

    raw_audio: NDArray[np.floating]
    sr: int
    raw_audio, sr = librosa.load(str(input_file), sr=None, mono=True)
    audio: AudioArray = np.asarray(raw_audio, dtype=np.float32)
    print(f"Original: {sr}Hz, {len(audio)/sr:.2f}s, {len(audio)} samples")

    if sr != target_sr:
        print(f"Resampling: {sr}Hz -> {target_sr}Hz")
        audio = librosa.resample(audio, orig_sr=sr, target_sr=target_sr)

    return audio


def remove_silence(
    audio: AudioArray,
    sr: int,
    *,
    top_db: int,
    min_silence_seconds: float,
    keep_silence_seconds: float,
) -> AudioArray:
    """
    Remove silent stretches from a recording.

    Non-silent intervals are detected with librosa.effects.split. Gaps
    shorter than min_silence_seconds are natural pauses and stay in the
    output; longer gaps are cut down to keep_silence_seconds of padding
    on each side of the surrounding speech.

    Args:
        audio: Mono waveform.
        sr: Sample rate of audio.
        top_db: Threshold below the peak (in dB) considered silence.
        min_silence_seconds: Shortest gap that is removed.
        keep_silence_seconds: Padding kept around each speech interval.

    Returns:
        Waveform with long silences removed (empty if nothing is audible).
    """
    if audio.size == 0:
        return audio

    intervals = librosa.effects.split(audio, top_db=top_db)
    intervals = [(int(start), int(end)) for start, end in intervals if end > start]
    if not intervals:
        return np.zeros(0, dtype=audio.dtype)

    min_gap = int(min_silence_seconds * sr)
    pad = int(keep_silence_seconds * sr)

    # Merge intervals separated by short pauses or by gaps the padding would overlap
    merged: list[list[int]] = [list(intervals[0])]
    for start, end in intervals[1:]:
        if start - merged[-1][1] < max(min_gap, 2 * pad):
            merged[-1][1] = end
        else:
            merged.append([start, end])

    pieces = [
        audio[max(0, start - pad):min(len(audio), end + pad)]
        for start, end in merged
    ]
    return np.concatenate(pieces).astype(audio.dtype, copy=False)


def segment_audio(
    audio: AudioArray,
    sr: int,
    clip_seconds: float,
    min_clip_seconds: float = 0.0,
) -> list[AudioArray]:
    """
    Split a waveform into consecutive fixed-length clips.

    Every clip is exactly clip_seconds long except possibly the last,
    which is dropped when shorter than min_clip_seconds.

    Raises:
        ValueError: If clip_seconds is not positive.
    """
    if clip_seconds <= 0:
        raise ValueError(f"clip_seconds must be positive, got {clip_seconds}")

    clip_samples = max(1, int(round(clip_seconds * sr)))
    min_samples = int(round(min_clip_seconds * sr))

    clips: list[AudioArray] = []
    for start in range(0, len(audio), clip_samples):
        clip = audio[start:start + clip_samples]
        if len(clip) < clip_samples and len(clip) < min_samples:
            continue
        clips.append(clip)
    return clips


def clean_audio(audio: AudioArray, sr: int, config: AudioConfig) -> AudioArray:
    """Apply noise reduction, silence removal and normalization per config."""
    if config.denoise:
        print("Applying noise reduction...")
        audio = nr.reduce_noise(y=audio, sr=sr, prop_decrease=config.noise_reduction)

    print("Removing silence...")
    before = len(audio)
    audio = remove_silence(
        audio,
        sr,
        top_db=config.silence_top_db,
        min_silence_seconds=config.min_silence_seconds,
        keep_silence_seconds=config.keep_silence_seconds,
    )
    print(f"Removed {(before - len(audio)) / sr:.2f}s of silence")

    if config.normalize and audio.size:
        print("Normalizing volume...")
        audio = librosa.util.normalize(audio)

    return audio


def write_clips(
    clips: list[AudioArray],
    sr: int,
    output_dir: str | Path,
    prefix: str = DEFAULT_CLIP_PREFIX,
) -> list[ClipInfo]:
    """
    Write clips as 16-bit PCM mono WAV files named <prefix>_<NNNN>.wav.

    Numbering starts at 1 in the order given.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[ClipInfo] = []
    for index, clip in enumerate(clips, start=1):
        clip_id = f"{prefix}_{index:04d}"
        path = output_dir / f"{clip_id}.wav"
        sf.write(str(path), clip, sr, subtype=PCM_SUBTYPE)
        written.append(ClipInfo(clip_id=clip_id, path=path, duration_seconds=len(clip) / sr))
    return written


def process_recording(
    input_file: str | Path,
    output_dir: str | Path,
    config: AudioConfig,
    prefix: str = DEFAULT_CLIP_PREFIX,
) -> list[ClipInfo]:
    """
    Run the full clip preparation pipeline on one recording.

    Args:
        input_file: Source recording.
        output_dir: Destination for the clips (the dataset's wavs/ directory).
        config: Audio settings.
        prefix: Clip filename prefix.

    Returns:
        Written clips in order.

    Raises:
        DatasetError: If no clip survives silence removal and segmentation.
    """
    sr = config.sample_rate
    audio = load_audio(input_file, sr)
    audio = clean_audio(audio, sr, config)

    clips = segment_audio(audio, sr, config.clip_seconds, config.min_clip_seconds)
    if not clips:
        raise DatasetError(f"No audible audio left in {input_file} after silence removal")

    written = write_clips(clips, sr, output_dir, prefix)
    total = sum(clip.duration_seconds for clip in written)
    print(f"Saved {len(written)} clips to {output_dir}")
    print(f"Final: {sr}Hz, {total:.2f}s total, {config.clip_seconds:.1f}s per clip")
    return written
